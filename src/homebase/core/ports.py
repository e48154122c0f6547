# src/homebase/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and time sources swappable and makes testing easier.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol


class KeyValueStore(Protocol):
    """
    Whole-value blob store keyed by string.

    No transactions and no partial writes: a value is either replaced entirely
    or not at all. Any call may fail; failures surface as raised exceptions.
    """

    def get(self, key: str) -> Awaitable[str | None]: ...
    def set(self, key: str, value: str) -> Awaitable[None]: ...
    def remove(self, key: str) -> Awaitable[None]: ...


class Clock(Protocol):
    """Wall-clock source. Returns epoch seconds."""
    def now(self) -> float: ...


# Fired once each time the daily routine goes from "not all done" to "all done".
CelebrationHook = Callable[[], None]
