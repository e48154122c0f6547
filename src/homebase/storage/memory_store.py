# src/homebase/storage/memory_store.py

from __future__ import annotations


class MemoryKeyValueStore:
    """
    Dict-backed KeyValueStore.

    Used for demos without a data dir and as the base of test fakes.
    Values are stored exactly as given (strings), like the SQLite store.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("key is required")
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)
