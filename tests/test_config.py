# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from homebase.config import Settings


def test_defaults_without_env(monkeypatch) -> None:
    for name in (
        "HOMEBASE_DATA_DIR",
        "HOMEBASE_STORE_PATH",
        "HOMEBASE_UNDO_WINDOW_SECONDS",
        "HOMEBASE_SEED_DEFAULTS",
        "HOMEBASE_FIRST_NAME",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.data_dir == Path(".local/homebase")
    assert s.store_path == Path(".local/homebase/homebase.sqlite3")
    assert s.undo_window_seconds == 6.0
    assert s.seed_defaults is True
    assert s.first_name is None


def test_env_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HOMEBASE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HOMEBASE_STORE_PATH", raising=False)
    monkeypatch.setenv("HOMEBASE_UNDO_WINDOW_SECONDS", "-3")
    monkeypatch.setenv("HOMEBASE_HYDRATION_TIMEOUT_SECONDS", "oops")
    monkeypatch.setenv("HOMEBASE_SEED_DEFAULTS", "no")
    monkeypatch.setenv("HOMEBASE_FIRST_NAME", "  Jess ")

    s = Settings.from_env()

    assert s.store_path == tmp_path / "homebase.sqlite3"
    assert s.undo_window_seconds == 0.1
    assert s.hydration_timeout_seconds == 5.0
    assert s.seed_defaults is False
    assert s.first_name == "Jess"
