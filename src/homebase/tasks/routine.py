# src/homebase/tasks/routine.py

from __future__ import annotations

import logging
from dataclasses import replace

from ..core.errors import StorageReadError
from ..core.ports import KeyValueStore
from ..storage.json_blobs import (
    ROUTINE_KEY,
    ROUTINE_LAST_RESET_KEY,
    load_list,
    read_raw,
    save_list,
    save_raw,
)
from .task_models import RoutineItem

logger = logging.getLogger(__name__)

# Ids handed to rows appended by the editor beyond the existing list.
_EDITOR_ID_BASE = 1000


def default_routine() -> list[RoutineItem]:
    return [
        RoutineItem(id=101, title="Make beds"),
        RoutineItem(id=102, title="Kitchen reset"),
        RoutineItem(id=103, title="Move my body"),
    ]


class RoutineManager:
    """
    Daily checklist whose `done` flags reset once per calendar day.

    The reset decision always compares against the persisted last-reset key,
    never an in-memory flag: the process may restart mid-day.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = ROUTINE_KEY,
        last_reset_key: str = ROUTINE_LAST_RESET_KEY,
    ) -> None:
        self._store = store
        self._key = key
        self._last_reset_key = last_reset_key
        self.items: list[RoutineItem] = default_routine()

    async def save(self, *, strict: bool = False) -> bool:
        return await save_list(self._store, self._key, self.items, strict=strict)

    async def _read_last_reset(self) -> str | None:
        try:
            return await read_raw(self._store, self._last_reset_key)
        except StorageReadError as e:
            logger.warning("%s; treating routine as never reset", e)
            return None

    async def load_with_reset(self, today: str) -> list[RoutineItem]:
        """
        Load the checklist; clear every `done` flag if the last reset was not today.

        Idempotent per day: a second call with the same `today` finds the
        persisted key already equal and leaves the items alone.
        """
        self.items, _ = await load_list(
            self._store,
            self._key,
            RoutineItem.from_dict,
            missing=default_routine,
            malformed=default_routine,
        )
        last_reset = await self._read_last_reset()
        if last_reset == today:
            return list(self.items)

        self.items = [replace(t, done=False) for t in self.items]
        await self.save()
        await save_raw(self._store, self._last_reset_key, today)
        logger.info("Daily routine reset for %s (last reset: %s)", today, last_reset or "never")
        return list(self.items)

    async def toggle(self, item_id: int) -> RoutineItem | None:
        item = next((t for t in self.items if t.id == item_id), None)
        if item is None:
            return None
        flipped = replace(item, done=not item.done)
        self.items = [flipped if t.id == item_id else t for t in self.items]
        await self.save()
        return flipped

    async def edit(self, titles: list[str], today: str) -> list[RoutineItem]:
        """
        Rebuild the list from edited titles.

        Blank titles are dropped. Ids are kept by position where a row already
        existed; `done` is always cleared. Also stamps today's reset key so the
        next load does not reset again.
        """
        cleaned = [t.strip() for t in titles if t and t.strip()]
        self.items = [
            RoutineItem(
                id=self.items[idx].id if idx < len(self.items) else _EDITOR_ID_BASE + idx,
                title=title,
                done=False,
            )
            for idx, title in enumerate(cleaned)
        ]
        await self.save()
        await save_raw(self._store, self._last_reset_key, today)
        logger.info("Routine edited: %d item(s)", len(self.items))
        return list(self.items)

    async def reset_to_default(self, today: str) -> list[RoutineItem]:
        self.items = default_routine()
        await self.save()
        await save_raw(self._store, self._last_reset_key, today)
        return list(self.items)

    def done_count(self) -> int:
        return sum(1 for t in self.items if t.done)

    def is_fully_complete(self) -> bool:
        return len(self.items) > 0 and all(t.done for t in self.items)
