# src/homebase/core/clock.py

"""
Clock and DateKey helpers.

A DateKey is the local calendar day as "YYYY-MM-DD". String comparison of two
keys orders them by day, so callers compare keys directly instead of parsing.
"""

from __future__ import annotations

import re
import time
from datetime import date, datetime, timedelta
from typing import Literal

from .ports import Clock

DueState = Literal["overdue", "today", "future"]

# Missing due dates sort after every real key.
NO_DUE_SENTINEL = "9999-99-99"

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SystemClock:
    """Wall clock (epoch seconds)."""

    def now(self) -> float:
        return time.time()


def date_key(ts: float | None = None) -> str:
    """Local calendar day of `ts` (default: now) as YYYY-MM-DD."""
    if ts is None:
        ts = time.time()
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")


def today_key(clock: Clock) -> str:
    return date_key(clock.now())


def add_days_key(days: int, ts: float | None = None) -> str:
    if ts is None:
        ts = time.time()
    d = datetime.fromtimestamp(ts) + timedelta(days=int(days))
    return d.strftime("%Y-%m-%d")


def parse_date_key(key: str) -> date:
    """Inverse of date_key. Raises ValueError for anything that is not a real day."""
    if not is_date_key(key):
        raise ValueError(f"not a date key: {key!r}")
    return date.fromisoformat(key)


def is_date_key(value: object) -> bool:
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def classify_due(key: str | None, today: str) -> DueState | None:
    if not key:
        return None
    if key < today:
        return "overdue"
    if key == today:
        return "today"
    return "future"


def is_overdue(key: str | None, today: str) -> bool:
    return classify_due(key, today) == "overdue"


def format_due_label(key: str | None) -> str:
    """'2024-03-02' -> 'Mar 2'. Empty string for missing or malformed keys."""
    if not key or not is_date_key(key):
        return ""
    d = parse_date_key(key)
    return f"{d.strftime('%b')} {d.day}"


def format_day_heading(key: str) -> str:
    """'2024-03-02' -> 'Sat, Mar 2'. Falls back to the raw key."""
    if not is_date_key(key):
        return key
    d = parse_date_key(key)
    return f"{d.strftime('%a')}, {d.strftime('%b')} {d.day}"
