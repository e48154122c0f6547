# tests/test_bootstrap.py

from __future__ import annotations

import pytest

from homebase.cli.bootstrap import CELEBRATION_TEXT, create_initial_state, hydrate_state
from homebase.core.errors import HydrationTimeoutError
from homebase.storage.sqlite_store import SQLiteKeyValueStore

from .fakes import FakeClock


@pytest.mark.asyncio
async def test_slow_store_continues_with_defaults(state, store) -> None:
    state.settings.hydration_timeout_seconds = 0.05
    store.get_delay = 0.2

    snap = await hydrate_state(state)

    assert len(snap.routine) == 3
    assert state.notices and "/retry" in state.notices[0]


@pytest.mark.asyncio
async def test_slow_store_can_reraise(state, store) -> None:
    state.settings.hydration_timeout_seconds = 0.05
    store.get_delay = 0.2

    with pytest.raises(HydrationTimeoutError):
        await hydrate_state(state, use_defaults_on_timeout=False)


@pytest.mark.asyncio
async def test_celebration_becomes_a_notice(state) -> None:
    await hydrate_state(state)
    for item_id in (101, 102, 103):
        await state.engine.toggle_routine(item_id)
    assert state.notices == [CELEBRATION_TEXT]


def test_default_store_is_sqlite_under_data_dir(settings) -> None:
    settings.data_dir = settings.data_dir / "nested"
    settings.store_path = settings.data_dir / "kv.sqlite3"

    state = create_initial_state(settings=settings, clock=FakeClock())

    assert isinstance(state.engine.store, SQLiteKeyValueStore)
    assert settings.store_path.exists()
    assert state.engine.undo_slot.window_seconds == 0.05
