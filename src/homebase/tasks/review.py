# src/homebase/tasks/review.py

"""
Review session: the in-memory step between a brain dump and the buckets.

Nothing here touches storage. Cancelling a review just drops the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum

from ..core.clock import add_days_key, is_date_key
from ..core.ports import Clock
from .classifier import guess_category, new_item_id, sort_brain_dump
from .task_models import BacklogItem, Bucket, Category, DraftTask, Plan, Task

logger = logging.getLogger(__name__)


class DueChoice(StrEnum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "week"
    NONE = "none"


_DAY_OFFSETS = {
    DueChoice.TODAY: 0,
    DueChoice.TOMORROW: 1,
    DueChoice.THIS_WEEK: 3,
}


def plan_for_due(due_date_key: str | None, today: str) -> Plan:
    """Due exactly today -> Today Focus. Everything else (overdue included) -> Up Next."""
    return Plan.TODAY if due_date_key and due_date_key == today else Plan.UPNEXT


@dataclass(slots=True)
class ReviewSession:
    clock: Clock
    drafts: list[DraftTask] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str, clock: Clock) -> ReviewSession:
        # Bucket guesses are advisory; every draft starts in Later until confirmed.
        drafts = [replace(d, bucket=Bucket.LATER) for d in sort_brain_dump(text)]
        logger.debug("Review session opened with %d draft(s)", len(drafts))
        return cls(clock=clock, drafts=drafts)

    def __len__(self) -> int:
        return len(self.drafts)

    def get(self, draft_id: str) -> DraftTask | None:
        return next((d for d in self.drafts if d.id == draft_id), None)

    def at(self, position: int) -> DraftTask | None:
        """1-based lookup, matching how drafts are listed to the user."""
        if 1 <= position <= len(self.drafts):
            return self.drafts[position - 1]
        return None

    def add(self, title: str) -> DraftTask | None:
        title = title.strip()
        if not title:
            return None
        draft = DraftTask(id=new_item_id(), title=title, category=guess_category(title), bucket=Bucket.LATER)
        self.drafts.append(draft)
        return draft

    def retitle(self, draft_id: str, title: str) -> DraftTask | None:
        title = title.strip()
        draft = self.get(draft_id)
        if draft is None or not title:
            return draft
        draft.title = title
        return draft

    def set_category(self, draft_id: str, category: Category) -> DraftTask | None:
        draft = self.get(draft_id)
        if draft is not None:
            draft.category = category
        return draft

    def remove(self, draft_id: str) -> bool:
        before = len(self.drafts)
        self.drafts = [d for d in self.drafts if d.id != draft_id]
        return len(self.drafts) != before

    def set_due(self, draft_id: str, choice: DueChoice | str | None) -> DraftTask | None:
        """
        Quick-pick a due date: today / tomorrow / this week (+3 days) / none,
        or an explicit YYYY-MM-DD key.
        """
        draft = self.get(draft_id)
        if draft is None:
            return None
        draft.due_date_key = self._resolve_due(choice)
        return draft

    def _resolve_due(self, choice: DueChoice | str | None) -> str | None:
        if choice is None:
            return None
        try:
            pick = DueChoice(choice)
        except ValueError:
            if not is_date_key(choice):
                raise ValueError(f"invalid due date: {choice!r}") from None
            return str(choice)
        if pick == DueChoice.NONE:
            return None
        return add_days_key(_DAY_OFFSETS[pick], self.clock.now())

    def goes_to(self, draft: DraftTask, today: str) -> Plan:
        return plan_for_due(draft.due_date_key, today)

    def to_tasks(self, today: str) -> list[Task]:
        """On-deck tasks for every draft. Ids are placeholders until merge reindexes."""
        return [
            Task(
                id=0,
                title=d.title,
                done=False,
                category=None if d.category == Category.SOMEDAY else d.category,
                due_date_key=d.due_date_key,
                plan=plan_for_due(d.due_date_key, today),
            )
            for d in self.drafts
        ]

    def to_backlog_items(self) -> list[BacklogItem]:
        return [
            BacklogItem(id=d.id, title=d.title, category=d.category, due_date_key=d.due_date_key)
            for d in self.drafts
        ]

    def clear(self) -> None:
        self.drafts = []
