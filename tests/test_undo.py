# tests/test_undo.py

from __future__ import annotations

import asyncio

import pytest

from homebase.tasks.task_models import Task, UndoPayload
from homebase.tasks.undo import UndoSlot


def _payload(title: str) -> UndoPayload:
    return UndoPayload(task=Task(id=1, title=title), archived_id=f"arch-{title}")


@pytest.mark.asyncio
async def test_take_consumes_payload_once() -> None:
    slot = UndoSlot(5.0)
    p = _payload("a")
    slot.open(p)

    assert slot.is_open
    assert slot.take() is p
    assert slot.take() is None
    assert not slot.is_open


@pytest.mark.asyncio
async def test_payload_expires_and_hook_runs() -> None:
    slot = UndoSlot(0.02)
    expired: list[UndoPayload] = []
    slot.on_expire = expired.append
    p = _payload("a")

    slot.open(p)
    await asyncio.sleep(0.08)

    assert slot.pending is None
    assert expired == [p]


@pytest.mark.asyncio
async def test_new_window_replaces_old_and_restarts_timer() -> None:
    slot = UndoSlot(0.05)
    expired: list[UndoPayload] = []
    slot.on_expire = expired.append

    slot.open(_payload("a"))
    await asyncio.sleep(0.03)
    b = _payload("b")
    slot.open(b)
    await asyncio.sleep(0.03)

    # "a" would have expired by now; "b" has its own full window.
    assert slot.pending is b
    assert expired == []

    await asyncio.sleep(0.06)
    assert slot.pending is None
    assert expired == [b]


@pytest.mark.asyncio
async def test_failing_hook_is_logged_not_raised(caplog) -> None:
    slot = UndoSlot(0.01)

    def boom(_payload: UndoPayload) -> None:
        raise RuntimeError("boom")

    slot.on_expire = boom
    slot.open(_payload("a"))
    await asyncio.sleep(0.05)

    assert slot.pending is None
    assert "Undo expiry hook failed." in caplog.text


def test_negative_window_is_clamped() -> None:
    assert UndoSlot(-1).window_seconds == 0.0
