# src/homebase/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, clock and lifecycle orchestrator into AppState,
- hydrates the buckets with a bounded wait.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.errors import HydrationTimeoutError
from ..core.ports import Clock, KeyValueStore
from ..core.state import AppState
from ..storage.memory_store import MemoryKeyValueStore
from ..storage.sqlite_store import SQLiteKeyValueStore
from ..tasks.lifecycle import HomeSnapshot, LifecycleOrchestrator

logger = logging.getLogger(__name__)

CELEBRATION_TEXT = "Daily routine complete! 🎉"


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_path.parent.mkdir(parents=True, exist_ok=True)


def _build_store(settings) -> KeyValueStore:
    try:
        return SQLiteKeyValueStore(settings.store_path)
    except Exception:
        # Fallback for demos on read-only filesystems: nothing survives a restart.
        logger.exception("Could not open %s; using an in-memory store.", settings.store_path)
        return MemoryKeyValueStore()


def create_initial_state(*, settings=None, store: KeyValueStore | None = None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings, store and clock injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if store is None:
        _ensure_local_dirs(settings)
        store = _build_store(settings)

    engine = LifecycleOrchestrator(
        store,
        clock or SystemClock(),
        undo_window_seconds=float(getattr(settings, "undo_window_seconds", 6.0)),
        seed_defaults=bool(getattr(settings, "seed_defaults", True)),
    )
    state = AppState(settings=settings, engine=engine)
    engine.on_routine_complete = lambda: state.notices.append(CELEBRATION_TEXT)
    return state


async def hydrate_state(state: AppState, *, use_defaults_on_timeout: bool = True) -> HomeSnapshot:
    """
    Cold load with the configured bounded wait.

    On timeout either continue with defaults (interactive default) or re-raise
    so the caller can offer a retry.
    """
    timeout = float(getattr(state.settings, "hydration_timeout_seconds", 5.0))
    try:
        return await state.engine.hydrate(timeout=timeout)
    except HydrationTimeoutError:
        if not use_defaults_on_timeout:
            raise
        state.notices.append("Storage is slow to respond; continuing with defaults. Use /retry to load again.")
        return state.engine.use_defaults()
