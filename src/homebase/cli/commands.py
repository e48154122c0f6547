# src/homebase/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.clock import is_date_key
from ..core.errors import HydrationTimeoutError
from ..core.state import AppState
from ..tasks.review import DueChoice, ReviewSession
from ..tasks.task_api import (
    due_badge,
    greeting,
    recap_message,
    render_archive,
    render_backlog_line,
    render_routine_line,
    render_task_line,
)
from ..tasks.task_models import Plan

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /dump, ...)."""

    def __init__(self, before: Callable[[AppState], Awaitable[object]] | None = None) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        # Awaited before every known command runs.
        self._before = before

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if self._before is not None:
            await self._before(state)

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


async def _roll_over_day(state: AppState) -> None:
    """A session left open past midnight gets the new day's reset and surfacing."""
    if await state.engine.roll_over_if_new_day():
        state.notices.append(f"New day ({state.engine.today()}): routine reset, due Later items surfaced.")


registry = CommandRegistry(before=_roll_over_day)


def _split_items(args: list[str]) -> list[str]:
    """'/dump milk; call mom' -> ['milk', 'call mom']."""
    return [p.strip() for p in " ".join(args).split(";") if p.strip()]


def _int_arg(args: list[str], index: int = 0) -> int | None:
    try:
        return int(args[index])
    except (IndexError, ValueError):
        return None


def _render_review(session: ReviewSession, today: str) -> str:
    if not session.drafts:
        return "Review is empty."
    lines = ["Review (due today -> Today Focus, everything else -> Coming Up):"]
    for i, d in enumerate(session.drafts, start=1):
        due = f" due {d.due_date_key}" if d.due_date_key else ""
        goes = "Today Focus" if session.goes_to(d, today) == Plan.TODAY else "Coming Up"
        lines.append(f"  {i}. {d.title} ({d.category.value}){due} -> {goes}")
    lines.append("Use /due N today|tomorrow|week|none|YYYY-MM-DD, /drop N, then /confirm or /later.")
    return "\n".join(lines)


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_home(state: AppState, args: list[str]) -> str:
    snap = state.engine.snapshot()
    lines = [greeting(getattr(state.settings, "first_name", None), state.engine.clock.now())]
    if snap.surfaced:
        lines.append(f"Surfaced from Later: {', '.join(snap.surfaced)}")
    lines.append("Today Focus:")
    lines.extend(f"  {render_task_line(t, snap.today)}" for t in snap.today_focus[:5])
    if not snap.today_focus:
        lines.append("  (nothing yet)")
    lines.append("Up Next:")
    lines.extend(f"  {render_task_line(t, snap.today)}" for t in snap.up_next[:3])
    if not snap.up_next:
        lines.append("  (clear)")
    lines.append("Daily Routine:")
    lines.extend(f"  {render_routine_line(r)}" for r in snap.routine)
    lines.append(f"Done today: {snap.completed_today}. {recap_message(snap.completed_today)}")
    return "\n".join(lines)


async def cmd_dump(state: AppState, args: list[str]) -> str:
    text = "\n".join(_split_items(args))
    session = state.engine.brain_dump(text)
    if not session.drafts:
        return "Usage: /dump first thing; second thing; ..."
    state.review = session
    return _render_review(session, state.engine.today())


async def cmd_review(state: AppState, args: list[str]) -> str:
    if state.review is None:
        return "No review open. Start one with /dump."
    return _render_review(state.review, state.engine.today())


async def cmd_due(state: AppState, args: list[str]) -> str:
    if state.review is None:
        return "No review open. Start one with /dump."
    pos = _int_arg(args)
    draft = state.review.at(pos) if pos is not None else None
    if draft is None or len(args) < 2:
        return "Usage: /due N today|tomorrow|week|none|YYYY-MM-DD"
    choice = args[1].lower()
    if choice not in {c.value for c in DueChoice} and not is_date_key(choice):
        return f"Unknown due date: {args[1]}"
    state.review.set_due(draft.id, choice)
    return _render_review(state.review, state.engine.today())


async def cmd_drop(state: AppState, args: list[str]) -> str:
    if state.review is None:
        return "No review open. Start one with /dump."
    pos = _int_arg(args)
    draft = state.review.at(pos) if pos is not None else None
    if draft is None:
        return "Usage: /drop N"
    state.review.remove(draft.id)
    return _render_review(state.review, state.engine.today())


async def cmd_confirm(state: AppState, args: list[str]) -> str:
    if state.review is None or not state.review.drafts:
        return "Nothing to confirm."
    total = len(state.review)
    added = await state.engine.confirm_review(state.review)
    state.review = None
    skipped = total - len(added)
    extra = f" ({skipped} already on deck)" if skipped else ""
    return f"Added {len(added)} task(s) to Homebase{extra}."


async def cmd_later(state: AppState, args: list[str]) -> str:
    if state.review is None or not state.review.drafts:
        return "Nothing to file."
    total = len(state.review)
    items = await state.engine.defer_to_backlog(state.review)
    state.review = None
    skipped = total - len(items)
    extra = f" ({skipped} already listed)" if skipped else ""
    return f"Filed {len(items)} item(s) under Later{extra}."


async def cmd_cancel(state: AppState, args: list[str]) -> str:
    state.review = None
    return "Review discarded."


async def cmd_deck(state: AppState, args: list[str]) -> str:
    engine = state.engine
    today = engine.today()
    tasks = engine.on_deck.open_sorted(today)
    if not tasks:
        return "On Deck is clear."
    lines = ["On Deck:"]
    for t in tasks:
        marker = "*" if t.plan == Plan.TODAY else " "
        lines.append(f" {marker}{render_task_line(t, today)}")
    return "\n".join(lines)


async def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _int_arg(args)
    if task_id is None:
        return "Usage: /done ID"
    archived = await state.engine.complete(task_id)
    if archived is None:
        return f"No open task with id {task_id}."
    window = state.engine.undo_slot.window_seconds
    return f"Completed: {archived.title}. /undo within {window:g}s to put it back."


async def cmd_undo(state: AppState, args: list[str]) -> str:
    task = await state.engine.undo()
    if task is None:
        return "Nothing to undo."
    return f"Restored: {task.title}"


async def cmd_focus(state: AppState, args: list[str]) -> str:
    task_id = _int_arg(args)
    if task_id is None:
        return "Usage: /focus ID"
    task = await state.engine.promote(task_id)
    if task is None:
        return f"No open task with id {task_id}."
    return f"Moved to Today Focus: {task.title}"


async def cmd_backlog(state: AppState, args: list[str]) -> str:
    engine = state.engine
    items = engine.backlog.list_sorted_by_due()
    if not items:
        return "Later is empty."
    today = engine.today()
    return "\n".join(["Later:", *(f"  {render_backlog_line(i, t, today)}" for i, t in enumerate(items, start=1))])


def _backlog_at(state: AppState, args: list[str]):
    pos = _int_arg(args)
    items = state.engine.backlog.list_sorted_by_due()
    if pos is None or not 1 <= pos <= len(items):
        return None
    return items[pos - 1]


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add title            -> file under Later
    /add title @YYYY-MM-DD -> file under Later with a due date
    """
    due = None
    words = list(args)
    if words and words[-1].startswith("@"):
        due = words.pop()[1:]
        if not is_date_key(due):
            return f"Invalid date: {due}"
    title = " ".join(words).strip()
    if not title:
        return "Usage: /add title [@YYYY-MM-DD]"
    item = await state.engine.add_to_backlog(title, due_date_key=due)
    if item is None:
        return f"Already listed: {title}"
    return f"Later: {item.title}"


async def cmd_pull(state: AppState, args: list[str]) -> str:
    item = _backlog_at(state, args)
    if item is None:
        return "Usage: /pull N [today]"
    plan = Plan.TODAY if len(args) > 1 and args[1].lower() == "today" else Plan.UPNEXT
    task = await state.engine.promote_from_backlog(item.id, plan)
    if task is None:
        return f"Could not move {item.title!r} right now."
    return f"On Deck: {task.title}"


async def cmd_rm(state: AppState, args: list[str]) -> str:
    item = _backlog_at(state, args)
    if item is None:
        return "Usage: /rm N"
    await state.engine.remove_backlog_item(item.id)
    return f"Deleted: {item.title}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit N new title     -> rename a Later item
    /edit N @YYYY-MM-DD   -> set its due date
    /edit N @none         -> clear its due date
    """
    usage = "Usage: /edit N new title | /edit N @YYYY-MM-DD | /edit N @none"
    item = _backlog_at(state, args)
    rest = args[1:]
    if item is None or not rest:
        return usage

    if len(rest) == 1 and rest[0].startswith("@"):
        raw = rest[0][1:]
        due = None if raw.lower() == "none" else raw
        if due is not None and not is_date_key(due):
            return f"Invalid date: {raw}"
        updated = await state.engine.update_backlog_item(item.id, due_date_key=due)
    else:
        title = " ".join(rest).strip()
        if not title:
            return usage
        updated = await state.engine.update_backlog_item(item.id, title=title)

    if updated is None:
        return f"Could not edit {item.title!r}."
    badge = due_badge(updated.due_date_key, state.engine.today())
    suffix = f" [{badge}]" if badge else ""
    return f"Updated: {updated.title}{suffix}"


async def cmd_routine(state: AppState, args: list[str]) -> str:
    items = state.engine.routine.items
    if not items:
        return "Daily routine is empty. Set one with /routine-edit a; b; c"
    return "\n".join(["Daily Routine:", *(f"  {render_routine_line(r)}" for r in items)])


async def cmd_tick(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    item_id = _int_arg(args)
    if item_id is None:
        return "Usage: /tick ID"
    item = await state.engine.toggle_routine(item_id)
    if item is None:
        return f"No routine item with id {item_id}."
    if emit is not None:
        while state.notices:
            emit(state.notices.pop(0))
    return render_routine_line(item)


async def cmd_routine_edit(state: AppState, args: list[str]) -> str:
    titles = _split_items(args)
    if not titles:
        return "Usage: /routine-edit first; second; third"
    await state.engine.edit_routine(titles)
    return await cmd_routine(state, [])


async def cmd_routine_reset(state: AppState, args: list[str]) -> str:
    await state.engine.reset_routine_to_default()
    return await cmd_routine(state, [])


async def cmd_archive(state: AppState, args: list[str]) -> str:
    await state.engine.archive.load()
    return render_archive(state.engine.archive.group_by_day())


async def cmd_recap(state: AppState, args: list[str]) -> str:
    n = state.engine.completed_today()
    return f"Done today: {n}. {recap_message(n)}"


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    await state.engine.on_focus()
    return await cmd_home(state, [])


async def cmd_retry(state: AppState, args: list[str]) -> str:
    timeout = float(getattr(state.settings, "hydration_timeout_seconds", 5.0))
    try:
        await state.engine.hydrate(timeout=timeout)
    except HydrationTimeoutError as e:
        return f"Still waiting on storage ({e}). Try /retry again."
    return await cmd_home(state, [])


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("home", cmd_home, help_text="Today Focus, Up Next, routine and recap.")
registry.register("dump", cmd_dump, help_text="Brain dump: /dump thing one; thing two; ...")
registry.register("review", cmd_review, help_text="Show the open review.")
registry.register("due", cmd_due, help_text="Set a draft due date: /due N today|tomorrow|week|none|YYYY-MM-DD.")
registry.register("drop", cmd_drop, help_text="Remove a draft from the review: /drop N.")
registry.register("confirm", cmd_confirm, help_text="Add reviewed drafts to On Deck.")
registry.register("later", cmd_later, help_text="File reviewed drafts under Later.")
registry.register("cancel", cmd_cancel, help_text="Discard the open review.")
registry.register("deck", cmd_deck, help_text="List open On Deck tasks (* = Today Focus).")
registry.register("done", cmd_done, help_text="Complete a task: /done ID.")
registry.register("undo", cmd_undo, help_text="Undo the last completion (while the window is open).")
registry.register("focus", cmd_focus, help_text="Move a task to Today Focus: /focus ID.")
registry.register("backlog", cmd_backlog, help_text="List Later items by due date.", aliases=["ls-later"])
registry.register("add", cmd_add, help_text="Add to Later: /add title [@YYYY-MM-DD].")
registry.register("pull", cmd_pull, help_text="Move a Later item On Deck: /pull N [today].")
registry.register("rm", cmd_rm, help_text="Delete a Later item: /rm N.")
registry.register("edit", cmd_edit, help_text="Edit a Later item: /edit N new title | @YYYY-MM-DD | @none.")
registry.register("routine", cmd_routine, help_text="Show the daily routine.")
registry.register("tick", cmd_tick, help_text="Toggle a routine item: /tick ID.")
registry.register("routine-edit", cmd_routine_edit, help_text="Replace routine titles: /routine-edit a; b; c.")
registry.register("routine-reset", cmd_routine_reset, help_text="Restore the default routine.")
registry.register("archive", cmd_archive, help_text="Completed tasks grouped by day.")
registry.register("recap", cmd_recap, help_text="How much got done today.")
registry.register("refresh", cmd_refresh, help_text="Re-read storage (surfaces due items, daily reset).")
registry.register("retry", cmd_retry, help_text="Retry loading storage after a timeout.")
