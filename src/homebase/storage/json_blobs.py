# src/homebase/storage/json_blobs.py

"""
JSON list blobs on top of a KeyValueStore.

Every bucket is persisted as one JSON array under one key. Reads never raise:
missing keys, malformed JSON and wrong shapes fall back to a default, and
rows that fail to parse are skipped. Writes raise StorageWriteError only when
the caller asks for strict mode.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from ..core.errors import StorageReadError, StorageWriteError
from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Stable key strings. Changing one orphans existing user data.
ON_DECK_KEY = "homebase:onDeckTasks:v2"
BACKLOG_KEY = "homebase:laterTasks:v1"
ROUTINE_KEY = "homebase:dailyRhythm:v1"
ROUTINE_LAST_RESET_KEY = "homebase:dailyRhythm:lastResetDate:v1"
ARCHIVE_KEY = "homebase:archive:v1"


async def read_raw(store: KeyValueStore, key: str) -> str | None:
    """Raw read that converts any store failure into StorageReadError."""
    try:
        return await store.get(key)
    except Exception as e:
        raise StorageReadError(key, repr(e)) from e


def decode_list(key: str, raw: str, row_from_dict: Callable[[dict[str, Any]], T]) -> list[T]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageReadError(key, "malformed JSON") from e
    if not isinstance(data, list):
        raise StorageReadError(key, f"expected a JSON array, got {type(data).__name__}")

    out: list[T] = []
    skipped = 0
    for row in data:
        if not isinstance(row, dict):
            skipped += 1
            continue
        try:
            out.append(row_from_dict(row))
        except Exception:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed row(s) in %s", skipped, key)
    return out


async def load_list(
    store: KeyValueStore,
    key: str,
    row_from_dict: Callable[[dict[str, Any]], T],
    *,
    missing: Callable[[], list[T]] = list,
    malformed: Callable[[], list[T]] = list,
) -> tuple[list[T], bool]:
    """
    Load a JSON array and parse each row.

    Returns (items, found). `found` is False when the key was absent, which
    lets callers decide whether to seed defaults.
    """
    try:
        raw = await read_raw(store, key)
        if raw is None:
            return missing(), False
        return decode_list(key, raw, row_from_dict), True
    except StorageReadError as e:
        logger.warning("%s; falling back to default", e)
        return malformed(), True


async def save_list(
    store: KeyValueStore,
    key: str,
    rows: Iterable[Any],
    *,
    strict: bool = False,
) -> bool:
    """
    Serialize rows (objects with to_dict()) and write them under key.

    strict=False: failures are logged and swallowed (fire-and-forget).
    strict=True: failures raise StorageWriteError for callers that sequence writes.
    """
    payload = [r.to_dict() for r in rows]
    return await save_raw(store, key, json.dumps(payload, ensure_ascii=False), strict=strict)


async def save_raw(store: KeyValueStore, key: str, value: str, *, strict: bool = False) -> bool:
    try:
        await store.set(key, value)
        return True
    except Exception as e:
        err = StorageWriteError(key, repr(e))
        if strict:
            logger.warning("%s", err)
            raise err from e
        logger.exception("%s (ignored)", err)
        return False
