# src/homebase/tasks/backlog.py

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from ..core.clock import NO_DUE_SENTINEL, is_date_key
from ..core.ports import KeyValueStore
from ..storage.json_blobs import BACKLOG_KEY, load_list, save_list
from .task_models import BacklogItem

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True, slots=True)
class SurfaceSplit:
    to_promote: list[BacklogItem]
    remaining: list[BacklogItem]


def sort_by_due(items: list[BacklogItem]) -> list[BacklogItem]:
    """Ascending due date (missing last), then case-insensitive title."""
    return sorted(items, key=lambda t: (t.due_date_key or NO_DUE_SENTINEL, (t.title or "").lower()))


def partition_due(items: list[BacklogItem], today: str) -> SurfaceSplit:
    """Split items due today or earlier from the rest. Pure; order is preserved."""
    promote: list[BacklogItem] = []
    rest: list[BacklogItem] = []
    for t in items:
        if t.due_date_key and t.due_date_key <= today:
            promote.append(t)
        else:
            rest.append(t)
    return SurfaceSplit(to_promote=promote, remaining=rest)


class BacklogManager:
    """
    Owns the deferred ("Later") list.

    `items` is the in-memory snapshot; mutations update it and persist the
    whole list (fire-and-forget). Only the orchestrator moves items out.
    """

    def __init__(self, store: KeyValueStore, *, key: str = BACKLOG_KEY) -> None:
        self._store = store
        self._key = key
        self.items: list[BacklogItem] = []

    async def load(self) -> list[BacklogItem]:
        self.items, _ = await load_list(self._store, self._key, BacklogItem.from_dict)
        return list(self.items)

    async def save(self, *, strict: bool = False) -> bool:
        return await save_list(self._store, self._key, self.items, strict=strict)

    def get(self, item_id: str) -> BacklogItem | None:
        return next((t for t in self.items if t.id == item_id), None)

    async def add(self, items: list[BacklogItem]) -> None:
        # No self-dedup here; callers decide.
        if not items:
            return
        self.items = [*self.items, *items]
        logger.info("Backlog +%d (total=%d)", len(items), len(self.items))
        await self.save()

    async def update(
        self,
        item_id: str,
        *,
        title: str | None = None,
        category: Any = _UNSET,
        due_date_key: Any = _UNSET,
    ) -> BacklogItem | None:
        """
        Partial merge by id. Blank titles are ignored; pass due_date_key=None to
        clear a due date. Returns the updated item or None when id is unknown.
        """
        current = self.get(item_id)
        if current is None:
            return None

        patch: dict[str, Any] = {}
        if title is not None and title.strip():
            patch["title"] = title.strip()
        if category is not _UNSET:
            patch["category"] = category
        if due_date_key is not _UNSET:
            if due_date_key is not None and not is_date_key(due_date_key):
                raise ValueError(f"invalid due date key: {due_date_key!r}")
            patch["due_date_key"] = due_date_key
        if not patch:
            return current

        updated = replace(current, **patch)
        self.items = [updated if t.id == item_id else t for t in self.items]
        await self.save()
        return updated

    async def remove(self, item_id: str) -> bool:
        before = len(self.items)
        self.items = [t for t in self.items if t.id != item_id]
        if len(self.items) == before:
            return False
        await self.save()
        return True

    def list_sorted_by_due(self) -> list[BacklogItem]:
        return sort_by_due(self.items)

    def surface_due(self, today: str) -> SurfaceSplit:
        return partition_due(self.items, today)
