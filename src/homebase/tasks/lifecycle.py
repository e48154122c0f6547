# src/homebase/tasks/lifecycle.py

"""
Lifecycle orchestrator.

A task's state is whichever bucket holds it:

    Backlog -> OnDeck(upnext | today) -> Archived
                         ^                 |
                         +----- undo ------+

This module is the only code path that moves an item between buckets.
Each bucket is stored under its own key and the store has no transactions,
so multi-key transitions rely on write order plus title de-duplication:

- surface / promote-from-backlog: write On-Deck first, then Backlog. A crash
  in between leaves the item in both; the next surface drops the On-Deck copy
  by title and removes it from Backlog.
- complete: write On-Deck (task removed) first, then append to Archive. If the
  On-Deck write fails the completion is abandoned. If the Archive write fails
  the undo window still opens so the task can be put back.
- undo: write On-Deck (task restored) first, then delete the Archive entry. If
  the On-Deck write fails the undo is abandoned and the completion stands.

Transitions are serialized with an asyncio.Lock so a focus reconciliation
cannot interleave with a manual completion at a store suspension point.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace

from ..core.clock import today_key
from ..core.errors import HydrationTimeoutError, StorageWriteError
from ..core.ports import CelebrationHook, Clock, KeyValueStore
from .archive import ArchiveManager
from .backlog import BacklogManager
from .classifier import guess_category, new_item_id, normalize_line
from .on_deck import OnDeckManager, default_on_deck, reindex
from .review import ReviewSession, plan_for_due
from .routine import RoutineManager, default_routine
from .task_models import (
    ArchivedTask,
    BacklogItem,
    Category,
    Plan,
    RoutineItem,
    Task,
    UndoPayload,
    norm_title,
)
from .undo import UndoSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HomeSnapshot:
    """Everything the home view renders, derived fresh on every call."""

    today: str
    today_focus: list[Task]
    up_next: list[Task]
    backlog: list[BacklogItem]
    routine: list[RoutineItem]
    completed_today: int
    undo: UndoPayload | None = None
    surfaced: list[str] = field(default_factory=list)


class LifecycleOrchestrator:
    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock,
        *,
        undo_window_seconds: float = 6.0,
        seed_defaults: bool = True,
        on_routine_complete: CelebrationHook | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.seed_defaults = seed_defaults
        self.on_routine_complete = on_routine_complete

        self.backlog = BacklogManager(store)
        self.on_deck = OnDeckManager(store)
        self.routine = RoutineManager(store)
        self.archive = ArchiveManager(store)
        self.undo_slot = UndoSlot(undo_window_seconds)
        self.undo_slot.on_expire = self._on_undo_expired

        self._lock = asyncio.Lock()
        self._routine_was_complete = False
        self._last_surfaced: list[str] = []
        self._loaded_day: str | None = None
        self.hydrated = False

    def today(self) -> str:
        return today_key(self.clock)

    # ---- hydration / focus ----

    async def hydrate(self, timeout: float | None = None) -> HomeSnapshot:
        """
        Cold load: read every bucket, reset the routine if the day changed,
        surface due backlog items.

        Raises HydrationTimeoutError if it takes longer than `timeout` seconds;
        the caller may retry or call use_defaults().
        """
        try:
            if timeout is None:
                await self._cold_load()
            else:
                await asyncio.wait_for(self._cold_load(), timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Hydration timed out after %.1fs", timeout or 0.0)
            raise HydrationTimeoutError(float(timeout or 0.0)) from e
        return self.snapshot()

    async def _cold_load(self) -> None:
        async with self._lock:
            today = self.today()
            await self.on_deck.load(seed_defaults=self.seed_defaults)
            await self.backlog.load()
            self._last_surfaced = await self._surface(today)
            await self.routine.load_with_reset(today)
            await self.archive.load()
            # Baseline only: a routine already complete at load time is not a new completion.
            self._routine_was_complete = self.routine.is_fully_complete()
            self.hydrated = True
            self._loaded_day = today
            logger.info(
                "Hydrated day=%s on_deck=%d backlog=%d routine=%d archive=%d",
                today,
                len(self.on_deck.tasks),
                len(self.backlog.items),
                len(self.routine.items),
                len(self.archive.entries),
            )

    def use_defaults(self) -> HomeSnapshot:
        """Continue with in-memory defaults after a hydration timeout. Nothing is written."""
        self.on_deck.tasks = default_on_deck()
        self.backlog.items = []
        self.routine.items = default_routine()
        self.archive.entries = []
        self._routine_was_complete = False
        self.hydrated = True
        self._loaded_day = self.today()
        logger.info("Continuing with default state (storage not loaded).")
        return self.snapshot()

    async def on_focus(self) -> HomeSnapshot:
        """
        Foreground/focus reconciliation: re-read persisted state (another screen
        may have written it), re-run the daily reset check, surface due items.
        """
        async with self._lock:
            today = self.today()
            await self.on_deck.load()
            await self.backlog.load()
            self._last_surfaced = await self._surface(today)
            await self.routine.load_with_reset(today)
            await self.archive.load()
            self._check_routine_celebration()
            self._loaded_day = today
        return self.snapshot()

    async def roll_over_if_new_day(self) -> bool:
        """
        Reconcile again when the calendar day changed since the last load, e.g.
        a console session left open past midnight. Returns True if it ran.
        """
        today = self.today()
        if not self.hydrated or self._loaded_day == today:
            return False
        logger.info("Day changed (%s -> %s); reloading buckets.", self._loaded_day, today)
        await self.on_focus()
        return True

    # ---- surfacing ----

    async def _surface(self, today: str) -> list[str]:
        split = self.backlog.surface_due(today)
        if not split.to_promote:
            return []

        new_tasks = [
            Task(
                id=0,
                title=item.title,
                category=item.category,
                due_date_key=item.due_date_key,
                plan=plan_for_due(item.due_date_key, today),
            )
            for item in split.to_promote
        ]
        previous_deck = list(self.on_deck.tasks)
        previous_backlog = list(self.backlog.items)
        already_on_deck = {norm_title(t.title) for t in previous_deck}
        self.on_deck.merge(new_tasks)
        self.backlog.items = split.remaining

        try:
            await self.on_deck.save(strict=True)
        except StorageWriteError:
            # Backlog stays as persisted; the next load surfaces the same items again.
            logger.warning("Surfacing not persisted; backlog left untouched.")
            self.on_deck.tasks = previous_deck
            self.backlog.items = previous_backlog
            return []

        await self.backlog.save()
        # Items dropped by title de-dup leave the backlog but are not reported.
        titles = [t.title for t in self.on_deck.tasks if norm_title(t.title) not in already_on_deck]
        logger.info(
            "Surfaced %d due backlog item(s) for %s (%d already on deck)",
            len(titles),
            today,
            len(split.to_promote) - len(titles),
        )
        return titles

    # ---- intake ----

    def brain_dump(self, text: str) -> ReviewSession:
        """Classify free text into review drafts. Nothing is stored until confirm/defer."""
        return ReviewSession.from_text(text, self.clock)

    async def confirm_review(self, session: ReviewSession) -> list[Task]:
        """
        Merge reviewed drafts into On-Deck, de-duplicating against the persisted
        list re-read right now (not the in-memory snapshot).
        """
        async with self._lock:
            today = self.today()
            await self.on_deck.load()
            before = {t.title for t in self.on_deck.tasks}
            self.on_deck.merge(session.to_tasks(today))
            await self.on_deck.save()
            added = [t for t in self.on_deck.tasks if t.title not in before]
            logger.info("Review confirmed: %d added, %d skipped", len(added), len(session) - len(added))
            session.clear()
            return added

    async def _drop_known_titles(self, items: list[BacklogItem]) -> list[BacklogItem]:
        """
        Re-read Backlog and On-Deck, then keep only items whose normalized title
        is in neither (nor earlier in `items`). Caller holds the lock.
        """
        await self.backlog.load()
        await self.on_deck.load()
        seen = {norm_title(t.title) for t in self.backlog.items}
        seen.update(norm_title(t.title) for t in self.on_deck.tasks)
        fresh: list[BacklogItem] = []
        for item in items:
            key = norm_title(item.title)
            if not key or key in seen:
                continue
            seen.add(key)
            fresh.append(item)
        return fresh

    async def defer_to_backlog(self, session: ReviewSession) -> list[BacklogItem]:
        """File every draft under Later. Returns only the items actually added."""
        async with self._lock:
            items = await self._drop_known_titles(session.to_backlog_items())
            await self.backlog.add(items)
            logger.info("Review deferred: %d filed, %d skipped", len(items), len(session) - len(items))
            session.clear()
            return items

    async def add_to_backlog(
        self,
        title: str,
        *,
        due_date_key: str | None = None,
        category: Category | None = None,
    ) -> BacklogItem | None:
        """
        Manual backlog entry. The category is guessed when not given.

        Returns None for a blank title or one already in Backlog or On-Deck.
        """
        title = normalize_line(title)
        if not title:
            return None
        item = BacklogItem(
            id=new_item_id(),
            title=title,
            category=category or guess_category(title),
            due_date_key=due_date_key,
        )
        async with self._lock:
            if not await self._drop_known_titles([item]):
                logger.info("Backlog entry %r skipped: title already listed", title)
                return None
            await self.backlog.add([item])
        return item

    async def update_backlog_item(self, item_id: str, **patch) -> BacklogItem | None:
        async with self._lock:
            return await self.backlog.update(item_id, **patch)

    async def remove_backlog_item(self, item_id: str) -> bool:
        async with self._lock:
            return await self.backlog.remove(item_id)

    async def promote_from_backlog(self, item_id: str, plan: Plan = Plan.UPNEXT) -> Task | None:
        """
        Move one backlog item into On-Deck. A title already on deck is not
        duplicated, but the backlog item is still removed.
        """
        async with self._lock:
            item = self.backlog.get(item_id)
            if item is None:
                return None

            await self.on_deck.load()
            existing = self.on_deck.find_by_title(item.title)
            if existing is None:
                self.on_deck.merge(
                    [
                        Task(
                            id=0,
                            title=item.title,
                            category=item.category,
                            due_date_key=item.due_date_key,
                            plan=plan,
                        )
                    ]
                )
                try:
                    await self.on_deck.save(strict=True)
                except StorageWriteError:
                    logger.warning("Promotion of %r not persisted; kept in backlog.", item.title)
                    await self.on_deck.load()
                    return None

            await self.backlog.remove(item_id)
            return self.on_deck.find_by_title(item.title)

    # ---- on-deck actions ----

    async def promote(self, task_id: int) -> Task | None:
        async with self._lock:
            return await self.on_deck.promote(task_id)

    async def complete(self, task_id: int) -> ArchivedTask | None:
        """
        Complete an on-deck task: remove it, archive it, open the undo window.

        Returns the archive entry, or None if the id is unknown or the on-deck
        write failed (in which case nothing changed).
        """
        async with self._lock:
            today = self.today()
            previous = list(self.on_deck.tasks)
            done = self.on_deck.complete(task_id, today)
            if done is None:
                return None
            self.on_deck.reindex()

            try:
                await self.on_deck.save(strict=True)
            except StorageWriteError:
                logger.warning("Completion of %r abandoned: on-deck write failed.", done.task.title)
                self.on_deck.tasks = previous
                return None

            try:
                await self.archive.append(done.archived, strict=True)
            except StorageWriteError:
                logger.warning("Archive append failed for %r; undo stays available.", done.task.title)

            self.undo_slot.open(UndoPayload(task=done.task, archived_id=done.archived.id))
            logger.info("Completed %r", done.task.title)
            return done.archived

    async def undo(self) -> Task | None:
        """
        Reverse the last completion if its window is still open.

        After expiry this is a no-op and returns None. The archive entry is
        deleted only after the restored On-Deck list is written; if that write
        fails the completion stands and None is returned.
        """
        async with self._lock:
            payload = self.undo_slot.take()
            if payload is None:
                return None

            previous = list(self.on_deck.tasks)
            restored = replace(payload.task, done=False)
            self.on_deck.tasks = reindex([restored, *previous])
            try:
                await self.on_deck.save(strict=True)
            except StorageWriteError:
                logger.warning("Undo of %r abandoned: on-deck write failed; completion kept.", restored.title)
                self.on_deck.tasks = previous
                return None

            await self.archive.remove_by_id(payload.archived_id)
            logger.info("Undid completion of %r", restored.title)
            return self.on_deck.tasks[0]

    def _on_undo_expired(self, payload: UndoPayload) -> None:
        logger.info("Undo window closed; completion of %r is permanent", payload.task.title)

    # ---- routine ----

    async def toggle_routine(self, item_id: int) -> RoutineItem | None:
        async with self._lock:
            item = await self.routine.toggle(item_id)
            self._check_routine_celebration()
            return item

    async def edit_routine(self, titles: list[str]) -> list[RoutineItem]:
        async with self._lock:
            items = await self.routine.edit(titles, self.today())
            self._check_routine_celebration()
            return items

    async def reset_routine_to_default(self) -> list[RoutineItem]:
        async with self._lock:
            items = await self.routine.reset_to_default(self.today())
            self._check_routine_celebration()
            return items

    async def check_daily_reset(self) -> list[RoutineItem]:
        """Re-evaluate the routine reset from persisted state (e.g. after midnight)."""
        async with self._lock:
            items = await self.routine.load_with_reset(self.today())
            self._check_routine_celebration()
            return items

    def _check_routine_celebration(self) -> None:
        now_complete = self.routine.is_fully_complete()
        fire = now_complete and not self._routine_was_complete
        self._routine_was_complete = now_complete
        if fire and self.on_routine_complete is not None:
            logger.info("Daily routine complete.")
            try:
                self.on_routine_complete()
            except Exception:
                logger.exception("Routine completion hook failed.")

    # ---- derived views ----

    def completed_today(self) -> int:
        """Archive entries stamped today plus routine items checked off. Never stored."""
        return self.archive.count_for_day(self.today()) + self.routine.done_count()

    def snapshot(self) -> HomeSnapshot:
        today = self.today()
        split = self.on_deck.list_open()
        return HomeSnapshot(
            today=today,
            today_focus=self.on_deck.sort_for_display(split.today_focus, today),
            up_next=self.on_deck.sort_for_display(split.up_next, today),
            backlog=self.backlog.list_sorted_by_due(),
            routine=list(self.routine.items),
            completed_today=self.completed_today(),
            undo=self.undo_slot.pending,
            surfaced=list(self._last_surfaced),
        )

    def close(self) -> None:
        self.undo_slot.close()
