# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from homebase.cli.bootstrap import create_initial_state
from homebase.core.state import AppState
from homebase.tasks.lifecycle import LifecycleOrchestrator

from .fakes import FakeClock, FlakyStore


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock("2024-03-02")


@pytest.fixture()
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture()
def engine(store: FlakyStore, clock: FakeClock) -> LifecycleOrchestrator:
    """Orchestrator over an in-memory store, no seeds, short undo window."""
    return LifecycleOrchestrator(store, clock, undo_window_seconds=0.05, seed_defaults=False)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="homebase-test",
        first_name=None,
        console_enabled=False,
        data_dir=tmp_path,
        store_path=tmp_path / "homebase.sqlite3",
        undo_window_seconds=0.05,
        hydration_timeout_seconds=1.0,
        seed_defaults=False,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: FlakyStore, clock: FakeClock) -> AppState:
    return create_initial_state(settings=settings, store=store, clock=clock)
