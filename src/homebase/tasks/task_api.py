# src/homebase/tasks/task_api.py

from __future__ import annotations

import time
from datetime import datetime

from ..core.clock import classify_due, format_day_heading, format_due_label
from .task_models import ArchiveGroup, BacklogItem, RoutineItem, Task


def recap_message(completed_today: int) -> str:
    if completed_today >= 5:
        return "Okay productivity queen 👑"
    if completed_today > 0:
        return "You're making progress. Keep going 💛"
    return "Tiny wins count. Check off one thing when you're ready."


def seasonal_emoji(ts: float | None = None) -> str:
    d = datetime.fromtimestamp(time.time() if ts is None else ts)
    m, day = d.month, d.day
    if m == 12:
        return "🎄"
    if m == 10:
        return "🎃"
    if m == 11:
        return "🍂"
    if m == 2 and day >= 10:
        return "💗"
    if m == 3:
        return "🌷"
    if m == 6:
        return "☀️"
    return "✨"


def greeting(first_name: str | None = None, ts: float | None = None) -> str:
    hour = datetime.fromtimestamp(time.time() if ts is None else ts).hour
    if hour < 12:
        g = "Good morning"
    elif hour < 17:
        g = "Good afternoon"
    else:
        g = "Good evening"
    name_part = f", {first_name}" if first_name else ""
    return f"{g}{name_part} {seasonal_emoji(ts)}"


def due_badge(due_date_key: str | None, today: str) -> str:
    """'Mar 2' for upcoming dates, 'Due Mar 2' once overdue, '' without a date."""
    label = format_due_label(due_date_key)
    if not label:
        return ""
    return f"Due {label}" if classify_due(due_date_key, today) == "overdue" else label


def render_task_line(task: Task, today: str) -> str:
    parts = [f"{task.id}. {task.title}"]
    badge = due_badge(task.due_date_key, today)
    if badge:
        parts.append(f"[{badge}]")
    if task.category:
        parts.append(f"({task.category.value})")
    return " ".join(parts)


def render_backlog_line(position: int, item: BacklogItem, today: str) -> str:
    badge = due_badge(item.due_date_key, today)
    suffix = f" [{badge}]" if badge else ""
    return f"{position}. {item.title}{suffix}"


def render_routine_line(item: RoutineItem) -> str:
    mark = "x" if item.done else " "
    return f"[{mark}] {item.id}: {item.title}"


def render_archive(groups: list[ArchiveGroup]) -> str:
    if not groups:
        return "Nothing archived yet."
    lines: list[str] = []
    for g in groups:
        lines.append(f"{format_day_heading(g.date_key)} ({len(g.rows)})")
        for row in g.rows:
            cat = f" ({row.category.value})" if row.category else ""
            lines.append(f"  - {row.title}{cat}")
    return "\n".join(lines)
