# src/homebase/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.lifecycle import LifecycleOrchestrator
from ..tasks.review import ReviewSession


@dataclass
class AppState:
    # Settings object (Settings or a test SimpleNamespace).
    settings: Any

    engine: LifecycleOrchestrator

    # Open review session between /dump and /confirm (or /later, /cancel).
    review: ReviewSession | None = None

    # Messages produced outside a command reply (e.g. routine celebration).
    notices: list[str] = field(default_factory=list)
