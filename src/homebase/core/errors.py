# src/homebase/core/errors.py

"""
Error taxonomy for the lifecycle engine.

Only HydrationTimeoutError is meant to reach the user. Read and write errors
are raised inside the bucket managers, logged there, and turned into
fallback values (reads) or a False return (writes).
"""

from __future__ import annotations


class HomebaseError(Exception):
    """Base class for every error raised by this package."""


class StorageReadError(HomebaseError):
    """A persisted value is missing, unreadable, or not the expected shape."""

    def __init__(self, key: str, reason: str = "") -> None:
        self.key = key
        self.reason = reason
        msg = f"failed to read {key!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class StorageWriteError(HomebaseError):
    """The store rejected a write. Never retried."""

    def __init__(self, key: str, reason: str = "") -> None:
        self.key = key
        self.reason = reason
        msg = f"failed to write {key!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class HydrationTimeoutError(HomebaseError):
    """Initial load did not finish in time; the UI offers retry or defaults."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"initial load did not finish within {timeout:.1f}s")
