# src/homebase/tasks/archive.py

from __future__ import annotations

import logging

from ..core.ports import KeyValueStore
from ..storage.json_blobs import ARCHIVE_KEY, load_list, save_list
from .task_models import ArchiveGroup, ArchivedTask

logger = logging.getLogger(__name__)


def group_by_day(entries: list[ArchivedTask]) -> list[ArchiveGroup]:
    """Newest day first; rows keep their stored (most-recent-first) order."""
    by_day: dict[str, list[ArchivedTask]] = {}
    for e in entries:
        by_day.setdefault(e.completed_date_key, []).append(e)
    return [ArchiveGroup(date_key=k, rows=by_day[k]) for k in sorted(by_day, reverse=True)]


class ArchiveManager:
    """
    Append-only completion log, most recent first.

    Entries are never edited. The only deletion is remove_by_id(), used by undo.
    Every mutation re-reads the persisted list first so other writers' entries
    are kept.
    """

    def __init__(self, store: KeyValueStore, *, key: str = ARCHIVE_KEY) -> None:
        self._store = store
        self._key = key
        self.entries: list[ArchivedTask] = []

    async def load(self) -> list[ArchivedTask]:
        self.entries, _ = await load_list(self._store, self._key, ArchivedTask.from_dict)
        return list(self.entries)

    async def append(self, entry: ArchivedTask, *, strict: bool = False) -> bool:
        await self.load()
        self.entries = [entry, *self.entries]
        ok = await save_list(self._store, self._key, self.entries, strict=strict)
        logger.info("Archived %r on %s", entry.title, entry.completed_date_key)
        return ok

    async def remove_by_id(self, archived_id: str) -> bool:
        await self.load()
        kept = [e for e in self.entries if e.id != archived_id]
        if len(kept) == len(self.entries):
            return False
        self.entries = kept
        await save_list(self._store, self._key, self.entries)
        return True

    def count_for_day(self, day: str) -> int:
        return sum(1 for e in self.entries if e.completed_date_key == day)

    def group_by_day(self) -> list[ArchiveGroup]:
        return group_by_day(self.entries)
