# tests/test_gestures.py

from __future__ import annotations

from datetime import date, datetime

import pytest

from schedule_sync.calendar.gestures import (
    Dragging,
    GestureConflictError,
    GestureController,
    Idle,
    Resizing,
)
from schedule_sync.calendar.layout import ResizeEdge
from schedule_sync.tasks.task_store import TaskStore

# 80 px per 30 min slot.
PX_PER_MIN = 80 / 30


def _setup(store: TaskStore, minutes: int = 60) -> tuple[GestureController, str]:
    task = store.add_task(title="Focus", duration_minutes=minutes, color="#3b82f6")
    store.schedule_task(task.id, datetime(2024, 3, 4, 10))
    return GestureController(store), task.id


def _resize(ctl: GestureController, task_id: str, edge: ResizeEdge, delta_minutes: float) -> int | None:
    ctl.begin_resize(task_id, edge, 500.0)
    ctl.resize_to(500.0 + delta_minutes * PX_PER_MIN)
    return ctl.end_resize()


def test_bottom_resize_clamps_low(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    assert _resize(ctl, task_id, ResizeEdge.BOTTOM, -1000) == 30
    assert store.get_task(task_id).duration_minutes == 30


def test_bottom_resize_clamps_high(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    assert _resize(ctl, task_id, ResizeEdge.BOTTOM, 1000) == 480
    assert store.get_task(task_id).duration_minutes == 480


def test_top_edge_grows_when_dragged_up(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    assert _resize(ctl, task_id, ResizeEdge.TOP, -60) == 120


def test_preview_is_not_committed_until_release(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    ctl.begin_resize(task_id, "bottom", 100.0)
    assert ctl.resize_to(100.0 + 60 * PX_PER_MIN) == 120

    assert isinstance(ctl.state, Resizing)
    assert ctl.preview_duration_for(task_id) == 120
    assert ctl.preview_duration_for("other") is None
    assert store.get_task(task_id).duration_minutes == 60

    ctl.end_resize()
    assert store.get_task(task_id).duration_minutes == 120
    assert ctl.is_idle


def test_release_without_move_keeps_duration(store: TaskStore, kv) -> None:
    ctl, task_id = _setup(store)
    writes = kv.writes
    ctl.begin_resize(task_id, ResizeEdge.BOTTOM, 10.0)
    assert ctl.end_resize() is None
    assert store.get_task(task_id).duration_minutes == 60
    assert kv.writes == writes


def test_cancel_discards_preview(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    ctl.begin_resize(task_id, ResizeEdge.BOTTOM, 0.0)
    ctl.resize_to(300.0)
    ctl.cancel()
    assert isinstance(ctl.state, Idle)
    assert store.get_task(task_id).duration_minutes == 60
    assert ctl.end_resize() is None


def test_only_one_gesture_at_a_time(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    other = store.add_task(title="Other", duration_minutes=30, color="#000")

    ctl.begin_resize(task_id, ResizeEdge.BOTTOM, 0.0)
    with pytest.raises(GestureConflictError):
        ctl.begin_resize(other.id, ResizeEdge.BOTTOM, 0.0)
    with pytest.raises(GestureConflictError):
        ctl.begin_drag(task_id)

    # Same gesture on the same target keeps the running state.
    again = ctl.begin_resize(task_id, ResizeEdge.TOP, 42.0)
    assert isinstance(again, Resizing) and again.edge == ResizeEdge.BOTTOM

    ctl.end_resize()
    assert isinstance(ctl.begin_drag(other.id), Dragging)


def test_begin_resize_unknown_task_stays_idle(store: TaskStore) -> None:
    ctl = GestureController(store)
    assert isinstance(ctl.begin_resize("missing", ResizeEdge.TOP, 0.0), Idle)


def test_drop_overwrites_schedule_and_allows_overlap(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    other = store.add_task(title="Other", duration_minutes=30, color="#000")
    slot = datetime(2024, 3, 4, 10, 0)

    ctl.begin_drag(other.id)
    ctl.hover(slot)
    assert ctl.is_drop_preview(slot)
    assert ctl.drop(slot) == other.id

    assert store.get_task(other.id).scheduled_date == slot
    assert store.get_task(task_id).scheduled_date == slot
    assert ctl.is_idle

    ctl.begin_drag(task_id)
    ctl.drop(datetime(2024, 3, 4, 15, 30, 12))
    assert store.get_task(task_id).scheduled_date == datetime(2024, 3, 4, 15, 30)


def test_drop_on_day_defaults_to_nine(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    ctl.begin_drag(task_id)
    ctl.drop_on_day(date(2024, 3, 20))
    assert store.get_task(task_id).scheduled_date == datetime(2024, 3, 20, 9, 0)


def test_drop_without_drag_is_ignored(store: TaskStore) -> None:
    ctl, task_id = _setup(store)
    assert ctl.drop(datetime(2024, 3, 4, 12)) is None
    assert store.get_task(task_id).scheduled_date == datetime(2024, 3, 4, 10)
