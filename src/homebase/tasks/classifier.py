# src/homebase/tasks/classifier.py

"""
Keyword classifier for brain-dump lines.

Pure and deterministic: lowercase substring match against ordered keyword
groups, first matching group wins. Group order is a priority order, not a
best-match score, so "call the school" is Calls, not Kids.
"""

from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass

from .task_models import Bucket, Category, DraftTask

_BULLET_RE = re.compile(r"^[\-\*•]+\s*")
_NUMBERING_RE = re.compile(r"^\d+[\)\.\-]\s*")

_URGENT_WORDS = ("today", "tonight", "before bed", "this morning", "asap")
_TOMORROW_WORDS = ("tomorrow",)

# (category, keywords) in priority order. Groceries appears twice: stores first, staples second.
_CATEGORY_GROUPS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.GROCERIES, ("grocery", "groceries", "costco", "walmart", "heb", "target", "shopping", "buy ")),
    (Category.GROCERIES, ("milk", "eggs", "bread", "chicken", "ground beef", "produce", "snacks")),
    (Category.CALLS, ("call", "text", "email", "dm", "message", "reply")),
    (
        Category.ERRANDS,
        ("return", "pickup", "pick up", "drop off", "post office", "ups", "fedex", "ship", "deliver"),
    ),
    (
        Category.KIDS,
        (
            "school",
            "teacher",
            "permission slip",
            "field trip",
            "practice",
            "game",
            "uniform",
            "daycare",
            "pediatric",
            "dentist",
        ),
    ),
    (
        Category.HOME,
        ("laundry", "dishes", "clean", "vacuum", "mop", "trash", "kitchen reset", "wipe", "organize"),
    ),
    (Category.MEALS, ("dinner", "meal", "recipe", "cook", "prep", "marinate")),
    (
        Category.ADMIN,
        ("bill", "pay", "invoice", "bank", "budget", "renew", "insurance", "appointment", "schedule"),
    ),
    (Category.IDEAS, ("idea", "maybe", "would be nice", "plan")),
)

DEFAULT_CATEGORY = Category.SOMEDAY


@dataclass(frozen=True, slots=True)
class Classification:
    category: Category
    bucket: Bucket


def _contains_any(s: str, words: tuple[str, ...]) -> bool:
    return any(w in s for w in words)


def normalize_line(raw: str) -> str:
    """Strip list bullets / numbering and surrounding whitespace."""
    s = _BULLET_RE.sub("", raw.strip())
    s = _NUMBERING_RE.sub("", s)
    return s.strip()


def guess_bucket(title: str) -> Bucket:
    s = title.lower()
    if _contains_any(s, _URGENT_WORDS):
        return Bucket.TODAY
    if _contains_any(s, _TOMORROW_WORDS):
        return Bucket.TODAY
    return Bucket.LATER


def guess_category(title: str) -> Category:
    s = title.lower()
    for category, words in _CATEGORY_GROUPS:
        if _contains_any(s, words):
            return category
    return DEFAULT_CATEGORY


def classify(line: str) -> Classification:
    return Classification(category=guess_category(line), bucket=guess_bucket(line))


def new_item_id() -> str:
    """Opaque id: millisecond timestamp plus random hex."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"


def split_lines(text: str) -> list[str]:
    return [line for line in (normalize_line(x) for x in (text or "").splitlines()) if line]


def sort_brain_dump(text: str) -> list[DraftTask]:
    """One classified draft per non-empty line, in input order."""
    drafts: list[DraftTask] = []
    for title in split_lines(text):
        c = classify(title)
        drafts.append(DraftTask(id=new_item_id(), title=title, category=c.category, bucket=c.bucket))
    return drafts
