# tests/test_buckets.py

from __future__ import annotations

import json

import pytest

from homebase.storage.json_blobs import ARCHIVE_KEY, BACKLOG_KEY, ON_DECK_KEY, ROUTINE_KEY, ROUTINE_LAST_RESET_KEY
from homebase.tasks.archive import ArchiveManager, group_by_day
from homebase.tasks.backlog import BacklogManager, partition_due, sort_by_due
from homebase.tasks.on_deck import OnDeckManager, merge, reindex, sort_for_display
from homebase.tasks.routine import RoutineManager
from homebase.tasks.task_models import ArchivedTask, BacklogItem, Category, Plan, Task

from .fakes import FlakyStore

TODAY = "2024-03-02"


def _task(title: str, *, due: str | None = None, plan: Plan | None = None, done: bool = False) -> Task:
    return Task(id=0, title=title, done=done, due_date_key=due, plan=plan)


# ---- backlog ----


def test_backlog_sorted_by_due_missing_last_then_title() -> None:
    items = [
        BacklogItem(id="1", title="b", due_date_key="2024-03-05"),
        BacklogItem(id="2", title="a"),
        BacklogItem(id="3", title="Zed", due_date_key="2024-03-01"),
        BacklogItem(id="4", title="apple", due_date_key="2024-03-01"),
    ]
    assert [t.title for t in sort_by_due(items)] == ["apple", "Zed", "b", "a"]


def test_backlog_partition_includes_overdue_and_today() -> None:
    items = [
        BacklogItem(id="1", title="overdue", due_date_key="2024-03-01"),
        BacklogItem(id="2", title="today", due_date_key=TODAY),
        BacklogItem(id="3", title="future", due_date_key="2024-03-03"),
        BacklogItem(id="4", title="undated"),
    ]
    split = partition_due(items, TODAY)
    assert [t.title for t in split.to_promote] == ["overdue", "today"]
    assert [t.title for t in split.remaining] == ["future", "undated"]


@pytest.mark.asyncio
async def test_backlog_add_update_remove_persist() -> None:
    store = FlakyStore()
    mgr = BacklogManager(store)
    await mgr.load()
    await mgr.add([BacklogItem(id="x", title="Renew insurance"), BacklogItem(id="y", title="Fix fence")])

    updated = await mgr.update("x", title="  Renew car insurance ", due_date_key="2024-04-01")
    assert updated is not None
    assert updated.title == "Renew car insurance"
    assert await mgr.update("x", title="   ") == updated  # blank edits ignored
    assert await mgr.update("missing", title="nope") is None
    with pytest.raises(ValueError):
        await mgr.update("x", due_date_key="next week")

    assert await mgr.remove("y") is True
    assert await mgr.remove("y") is False

    stored = json.loads(store.data[BACKLOG_KEY])
    assert stored == [{"id": "x", "title": "Renew car insurance", "dueDateKey": "2024-04-01"}]

    cleared = await mgr.update("x", due_date_key=None)
    assert cleared is not None and cleared.due_date_key is None


@pytest.mark.asyncio
async def test_backlog_malformed_json_falls_back_to_empty() -> None:
    store = FlakyStore({BACKLOG_KEY: "{not json"})
    mgr = BacklogManager(store)
    assert await mgr.load() == []


# ---- on deck ----


def test_reindex_is_positional_and_idempotent() -> None:
    tasks = [Task(id=7, title="a"), Task(id=7, title="b"), Task(id=2, title="c")]
    once = reindex(tasks)
    assert [t.id for t in once] == [1, 2, 3]
    assert reindex(once) == once


def test_merge_drops_existing_titles_and_prepends_new() -> None:
    existing = reindex([_task("Call mom"), _task("Return package")])
    out = merge([_task(" call MOM "), _task("Buy milk")], existing)
    assert [t.title for t in out] == ["Buy milk", "Call mom", "Return package"]
    assert [t.id for t in out] == [1, 2, 3]


def test_merge_keeps_a_repeated_new_title_once() -> None:
    out = merge([_task("A"), _task("a ")], [])
    assert [t.title for t in out] == ["A"]


def test_sort_for_display_overdue_today_future_undated() -> None:
    tasks = [
        _task("future", due="2099-01-01"),
        _task("undated"),
        _task("overdue", due="2024-01-01"),
        _task("today", due=TODAY),
    ]
    assert [t.title for t in sort_for_display(tasks, TODAY)] == ["overdue", "today", "future", "undated"]


def test_sort_for_display_ties_break_on_title_case_insensitive() -> None:
    tasks = [_task("beta"), _task("Alpha"), _task("gamma", due="2024-03-04"), _task("Delta", due="2024-03-04")]
    assert [t.title for t in sort_for_display(tasks, TODAY)] == ["Delta", "gamma", "Alpha", "beta"]


@pytest.mark.asyncio
async def test_list_open_splits_focus_and_up_next() -> None:
    mgr = OnDeckManager(FlakyStore())
    mgr.tasks = reindex(
        [
            _task("focus", plan=Plan.TODAY),
            _task("next", plan=Plan.UPNEXT),
            _task("no plan"),
            _task("finished", plan=Plan.TODAY, done=True),
        ]
    )
    split = mgr.list_open()
    assert [t.title for t in split.today_focus] == ["focus"]
    assert [t.title for t in split.up_next] == ["next", "no plan"]

    promoted = await mgr.promote(3)
    assert promoted is not None and promoted.plan == Plan.TODAY
    assert await mgr.promote(99) is None


def test_complete_removes_and_stamps_archive_entry() -> None:
    mgr = OnDeckManager(FlakyStore())
    mgr.tasks = reindex([Task(id=0, title="Call dentist", category=Category.CALLS), _task("Other")])
    done = mgr.complete(1, TODAY)
    assert done is not None
    assert done.archived.title == "Call dentist"
    assert done.archived.category == Category.CALLS
    assert done.archived.completed_date_key == TODAY
    assert done.archived.id.startswith("arch-")
    assert [t.title for t in mgr.tasks] == ["Other"]
    assert mgr.complete(42, TODAY) is None


@pytest.mark.asyncio
async def test_on_deck_seeds_defaults_only_when_key_missing() -> None:
    store = FlakyStore()
    mgr = OnDeckManager(store)
    seeded = await mgr.load(seed_defaults=True)
    assert [t.title for t in seeded] == ["Call dentist", "Sign permission slip", "Return Amazon package"]
    assert ON_DECK_KEY in store.data

    store.data[ON_DECK_KEY] = "[]"
    assert await mgr.load(seed_defaults=True) == []


@pytest.mark.asyncio
async def test_on_deck_skips_malformed_rows() -> None:
    rows = [{"id": 1, "title": "ok", "done": False}, {"id": 2}, "junk", {"title": "bad due", "dueDateKey": "soon"}]
    mgr = OnDeckManager(FlakyStore({ON_DECK_KEY: json.dumps(rows)}))
    tasks = await mgr.load()
    assert [t.title for t in tasks] == ["ok", "bad due"]
    assert tasks[1].due_date_key is None
    assert [t.id for t in tasks] == [1, 2]


# ---- routine ----


@pytest.mark.asyncio
async def test_routine_first_run_uses_defaults_and_stamps_reset() -> None:
    store = FlakyStore()
    mgr = RoutineManager(store)
    items = await mgr.load_with_reset(TODAY)
    assert [t.title for t in items] == ["Make beds", "Kitchen reset", "Move my body"]
    assert not any(t.done for t in items)
    assert store.data[ROUTINE_LAST_RESET_KEY] == TODAY


@pytest.mark.asyncio
async def test_routine_reset_is_idempotent_per_day() -> None:
    rows = [{"id": 1, "title": "Make beds", "done": True}, {"id": 2, "title": "Walk", "done": True}]
    store = FlakyStore({ROUTINE_KEY: json.dumps(rows), ROUTINE_LAST_RESET_KEY: "2024-03-01"})
    mgr = RoutineManager(store)

    items = await mgr.load_with_reset(TODAY)
    assert [t.done for t in items] == [False, False]

    await mgr.toggle(1)
    again = await mgr.load_with_reset(TODAY)
    assert [t.done for t in again] == [True, False]


@pytest.mark.asyncio
async def test_routine_edit_keeps_ids_by_position_and_clears_done() -> None:
    mgr = RoutineManager(FlakyStore())
    await mgr.load_with_reset(TODAY)
    await mgr.toggle(101)

    items = await mgr.edit(["A", "  ", "B", "C", "D"], TODAY)
    assert [(t.id, t.title, t.done) for t in items] == [
        (101, "A", False),
        (102, "B", False),
        (103, "C", False),
        (1003, "D", False),
    ]


@pytest.mark.asyncio
async def test_routine_fully_complete_requires_items() -> None:
    mgr = RoutineManager(FlakyStore())
    await mgr.edit([], TODAY)
    assert mgr.is_fully_complete() is False

    await mgr.edit(["only"], TODAY)
    await mgr.toggle(1000)
    assert mgr.is_fully_complete() is True


@pytest.mark.asyncio
async def test_routine_malformed_json_falls_back_to_defaults() -> None:
    store = FlakyStore({ROUTINE_KEY: "42", ROUTINE_LAST_RESET_KEY: TODAY})
    items = await RoutineManager(store).load_with_reset(TODAY)
    assert len(items) == 3


# ---- archive ----


def test_group_by_day_newest_first_preserving_row_order() -> None:
    entries = [
        ArchivedTask(id="c", title="third", completed_date_key="2024-03-02"),
        ArchivedTask(id="b", title="second", completed_date_key="2024-03-01"),
        ArchivedTask(id="a", title="first", completed_date_key="2024-03-02"),
    ]
    groups = group_by_day(entries)
    assert [g.date_key for g in groups] == ["2024-03-02", "2024-03-01"]
    assert [r.id for r in groups[0].rows] == ["c", "a"]
    assert [r.id for r in groups[1].rows] == ["b"]


@pytest.mark.asyncio
async def test_archive_append_prepends_and_remove_by_id() -> None:
    store = FlakyStore()
    mgr = ArchiveManager(store)
    await mgr.append(ArchivedTask(id="a1", title="Old", completed_date_key="2024-03-01"))
    await mgr.append(ArchivedTask(id="a2", title="New", completed_date_key=TODAY))

    assert [e["id"] for e in json.loads(store.data[ARCHIVE_KEY])] == ["a2", "a1"]
    assert mgr.count_for_day(TODAY) == 1

    assert await mgr.remove_by_id("a2") is True
    assert await mgr.remove_by_id("a2") is False
    assert mgr.count_for_day(TODAY) == 0
