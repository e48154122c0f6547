# src/homebase/tasks/undo.py

"""
Single-slot undo window.

Opening a window cancels whatever window was pending (its payload is dropped,
not restored). When the timer fires the payload silently disappears. Undo is
best-effort: nothing here is transactional.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .task_models import UndoPayload

logger = logging.getLogger(__name__)


class UndoSlot:
    def __init__(self, window_seconds: float = 6.0) -> None:
        self.window_seconds = max(0.0, float(window_seconds))
        self._payload: UndoPayload | None = None
        self._timer: asyncio.Task[None] | None = None
        self.on_expire: Callable[[UndoPayload], None] | None = None

    @property
    def pending(self) -> UndoPayload | None:
        return self._payload

    @property
    def is_open(self) -> bool:
        return self._payload is not None

    def open(self, payload: UndoPayload) -> None:
        """Start a new window. Must be called from a running event loop."""
        self._cancel_timer()
        if self._payload is not None:
            logger.debug("Undo window replaced; dropping pending undo for %r", self._payload.task.title)
        self._payload = payload
        self._timer = asyncio.get_running_loop().create_task(self._expire_after(payload))

    def take(self) -> UndoPayload | None:
        """Consume the pending payload (if any) and stop the timer."""
        payload = self._payload
        self._payload = None
        self._cancel_timer()
        return payload

    def close(self) -> None:
        self.take()

    def _cancel_timer(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done():
            timer.cancel()

    async def _expire_after(self, payload: UndoPayload) -> None:
        await asyncio.sleep(self.window_seconds)
        # A newer window may have replaced this one while we slept.
        if self._payload is not payload:
            return
        self._payload = None
        self._timer = None
        logger.debug("Undo window expired for %r", payload.task.title)
        if self.on_expire is not None:
            try:
                self.on_expire(payload)
            except Exception:
                logger.exception("Undo expiry hook failed.")
