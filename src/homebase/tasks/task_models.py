# src/homebase/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.clock import is_date_key


class Category(StrEnum):
    ERRANDS = "Errands"
    CALLS = "Calls"
    GROCERIES = "Groceries"
    HOME = "Home"
    KIDS = "Kids"
    MEALS = "Meals"
    ADMIN = "Admin"
    IDEAS = "Ideas"
    SOMEDAY = "Someday"  # catch-all

    @classmethod
    def from_raw(cls, raw: Any) -> Category | None:
        if not raw:
            return None
        try:
            return cls(raw)
        except Exception:
            return None


class Bucket(StrEnum):
    """Classifier timing guess. Advisory only."""

    TODAY = "Today"
    LATER = "Later"


class Plan(StrEnum):
    """On-deck partition. A missing plan means "upnext"."""

    TODAY = "today"
    UPNEXT = "upnext"

    @classmethod
    def from_raw(cls, raw: Any) -> Plan | None:
        if not raw:
            return None
        try:
            return cls(raw)
        except Exception:
            return None


def norm_title(title: str) -> str:
    """Title identity used for de-duplication: trimmed, case-insensitive."""
    return (title or "").strip().lower()


def _due_from_raw(raw: Any) -> str | None:
    return raw if is_date_key(raw) else None


def _put_optional(out: dict[str, Any], name: str, value: Any) -> None:
    if value is not None:
        out[name] = value


@dataclass(slots=True)
class Task:
    """
    On-deck task.

    `id` is positional (1..N in list order) and is reassigned by reindex()
    after every insert/delete. Never use it as a cross-session identity.
    """

    id: int
    title: str
    done: bool = False
    category: Category | None = None
    due_date_key: str | None = None
    plan: Plan | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title, "done": self.done}
        _put_optional(out, "category", self.category.value if self.category else None)
        _put_optional(out, "dueDateKey", self.due_date_key)
        _put_optional(out, "plan", self.plan.value if self.plan else None)
        return out

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        title = d.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("task title is required")
        try:
            tid = int(d.get("id") or 0)
        except (TypeError, ValueError):
            tid = 0
        return cls(
            id=tid,
            title=title,
            done=bool(d.get("done", False)),
            category=Category.from_raw(d.get("category")),
            due_date_key=_due_from_raw(d.get("dueDateKey")),
            plan=Plan.from_raw(d.get("plan")),
        )


@dataclass(slots=True)
class BacklogItem:
    """Deferred ("Later") item. `id` is opaque and stable."""

    id: str
    title: str
    category: Category | None = None
    due_date_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title}
        _put_optional(out, "category", self.category.value if self.category else None)
        _put_optional(out, "dueDateKey", self.due_date_key)
        return out

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BacklogItem:
        title = d.get("title")
        item_id = d.get("id")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("backlog title is required")
        if item_id is None or str(item_id) == "":
            raise ValueError("backlog id is required")
        return cls(
            id=str(item_id),
            title=title,
            category=Category.from_raw(d.get("category")),
            due_date_key=_due_from_raw(d.get("dueDateKey")),
        )


@dataclass(slots=True)
class RoutineItem:
    id: int
    title: str
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "done": self.done}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RoutineItem:
        title = d.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("routine title is required")
        return cls(id=int(d["id"]), title=title, done=bool(d.get("done", False)))


@dataclass(frozen=True, slots=True)
class ArchivedTask:
    """Completed task. Never edited; undo deletes it by id."""

    id: str
    title: str
    completed_date_key: str
    category: Category | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title}
        _put_optional(out, "category", self.category.value if self.category else None)
        out["completedDateKey"] = self.completed_date_key
        return out

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ArchivedTask:
        arch_id = d.get("id")
        title = d.get("title")
        day = d.get("completedDateKey")
        if not arch_id or not isinstance(title, str) or not isinstance(day, str):
            raise ValueError("archived task needs id, title and completedDateKey")
        return cls(
            id=str(arch_id),
            title=title,
            completed_date_key=day,
            category=Category.from_raw(d.get("category")),
        )


@dataclass(slots=True)
class DraftTask:
    """Classified brain-dump line waiting in a review session (never persisted)."""

    id: str
    title: str
    category: Category
    bucket: Bucket
    due_date_key: str | None = None


@dataclass(frozen=True, slots=True)
class ArchiveGroup:
    date_key: str
    rows: list[ArchivedTask] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class UndoPayload:
    """What an undo restores: the completed task and the archive entry to delete."""

    task: Task
    archived_id: str
