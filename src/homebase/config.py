# src/homebase/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time: every value has a default.
- Components receive settings by injection; get_settings() is only the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "HOMEBASE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    first_name: str | None

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_path: Path

    # ---- Lifecycle tuning ----
    undo_window_seconds: float
    hydration_timeout_seconds: float
    seed_defaults: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "homebase") or "homebase"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        first_name = _env(_k("FIRST_NAME"), "").strip() or None

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/homebase"))
        store_path = _env_path(_k("STORE_PATH"), data_dir / "homebase.sqlite3")

        # Negative or zero windows would make undo unusable; keep a sane floor.
        undo_window_seconds = max(0.1, _env_float(_k("UNDO_WINDOW_SECONDS"), 6.0))
        hydration_timeout_seconds = max(0.1, _env_float(_k("HYDRATION_TIMEOUT_SECONDS"), 5.0))
        seed_defaults = _env_bool(_k("SEED_DEFAULTS"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            first_name=first_name,
            console_enabled=console_enabled,
            data_dir=data_dir,
            store_path=store_path,
            undo_window_seconds=undo_window_seconds,
            hydration_timeout_seconds=hydration_timeout_seconds,
            seed_defaults=seed_defaults,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
