# src/homebase/tasks/on_deck.py

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, replace

from ..core.clock import NO_DUE_SENTINEL
from ..core.ports import KeyValueStore
from ..storage.json_blobs import ON_DECK_KEY, load_list, save_list
from .task_models import ArchivedTask, Category, Plan, Task, norm_title

logger = logging.getLogger(__name__)


def default_on_deck() -> list[Task]:
    """Seed list used only when nothing has ever been stored."""
    return [
        Task(id=1, title="Call dentist", plan=Plan.UPNEXT, category=Category.CALLS),
        Task(id=2, title="Sign permission slip", plan=Plan.TODAY, category=Category.KIDS),
        Task(id=3, title="Return Amazon package", plan=Plan.UPNEXT, category=Category.ERRANDS),
    ]


@dataclass(frozen=True, slots=True)
class OpenSplit:
    today_focus: list[Task]
    up_next: list[Task]


@dataclass(frozen=True, slots=True)
class Completion:
    task: Task
    archived: ArchivedTask


def new_archive_id() -> str:
    return f"arch-{int(time.time() * 1000)}-{secrets.token_hex(6)}"


def reindex(tasks: list[Task]) -> list[Task]:
    """Reassign id = position + 1. Returns new objects; idempotent."""
    return [replace(t, id=idx + 1) for idx, t in enumerate(tasks)]


def merge(new_items: list[Task], existing: list[Task]) -> list[Task]:
    """
    Prepend new tasks whose normalized title is not already present.

    Titles already in `existing` win; a title repeated inside `new_items`
    is kept once. The result is reindexed.
    """
    seen = {norm_title(t.title) for t in existing}
    fresh: list[Task] = []
    for t in new_items:
        key = norm_title(t.title)
        if not key or key in seen:
            continue
        seen.add(key)
        fresh.append(t)
    if len(fresh) != len(new_items):
        logger.debug("merge dropped %d duplicate title(s)", len(new_items) - len(fresh))
    return reindex([*fresh, *existing])


def sort_for_display(tasks: list[Task], today: str) -> list[Task]:
    """
    Display order: overdue, then due today, then by due date (missing last),
    then case-insensitive title. Stable. Derived on every render, never stored.
    """

    def key(t: Task) -> tuple[int, int, str, str]:
        due = t.due_date_key
        overdue = 0 if (due and due < today) else 1
        due_today = 0 if due == today else 1
        return (overdue, due_today, due or NO_DUE_SENTINEL, (t.title or "").lower())

    return sorted(tasks, key=key)


class OnDeckManager:
    """
    Owns the active list (Today-Focus + Up-Next).

    Task ids are positional. Every structural change goes through reindex().
    """

    def __init__(self, store: KeyValueStore, *, key: str = ON_DECK_KEY) -> None:
        self._store = store
        self._key = key
        self.tasks: list[Task] = []

    async def load(self, *, seed_defaults: bool = False) -> list[Task]:
        missing = default_on_deck if seed_defaults else list
        tasks, found = await load_list(self._store, self._key, Task.from_dict, missing=missing)
        self.tasks = reindex(tasks)
        if seed_defaults and not found:
            logger.info("On-deck list empty; seeded %d default task(s)", len(self.tasks))
            await self.save()
        return list(self.tasks)

    async def save(self, *, strict: bool = False) -> bool:
        return await save_list(self._store, self._key, self.tasks, strict=strict)

    def get(self, task_id: int) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_by_title(self, title: str) -> Task | None:
        key = norm_title(title)
        return next((t for t in self.tasks if norm_title(t.title) == key), None)

    def list_open(self) -> OpenSplit:
        open_tasks = [t for t in self.tasks if not t.done]
        return OpenSplit(
            today_focus=[t for t in open_tasks if t.plan == Plan.TODAY],
            up_next=[t for t in open_tasks if t.plan != Plan.TODAY],
        )

    def sort_for_display(self, tasks: list[Task], today: str) -> list[Task]:
        return sort_for_display(tasks, today)

    def open_sorted(self, today: str) -> list[Task]:
        return sort_for_display([t for t in self.tasks if not t.done], today)

    async def promote(self, task_id: int) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        promoted = replace(task, plan=Plan.TODAY)
        self.tasks = [promoted if t.id == task_id else t for t in self.tasks]
        logger.info("Promoted to Today Focus: %s", task.title)
        await self.save()
        return promoted

    def complete(self, task_id: int, today: str) -> Completion | None:
        """
        Remove the task from the in-memory list and build its archive entry.

        Does not persist or reindex: the orchestrator sequences the writes.
        """
        task = self.get(task_id)
        if task is None:
            return None
        self.tasks = [t for t in self.tasks if t.id != task_id]
        archived = ArchivedTask(
            id=new_archive_id(),
            title=task.title,
            completed_date_key=today,
            category=task.category,
        )
        return Completion(task=task, archived=archived)

    def reindex(self, tasks: list[Task] | None = None) -> list[Task]:
        if tasks is not None:
            return reindex(tasks)
        self.tasks = reindex(self.tasks)
        return list(self.tasks)

    def merge(self, new_items: list[Task], existing: list[Task] | None = None) -> list[Task]:
        base = self.tasks if existing is None else existing
        self.tasks = merge(new_items, base)
        return list(self.tasks)
