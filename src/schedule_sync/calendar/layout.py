# src/schedule_sync/calendar/layout.py

"""
Layout of one day's scheduled tasks on the time grid.

Vertical: a task is drawn once, at the slot where it starts, and its height is derived
from its duration (or from the live resize preview).
Horizontal: tasks sharing a slot split the column evenly, later ones stacked on top.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

from ..tasks.task_models import Task
from .time_grid import TimeGrid, truncate_to_minute

BASE_Z_INDEX = 10
DEFAULT_UNIT_HEIGHT = 80.0
DEFAULT_MIN_HEIGHT = 80.0
DEFAULT_SNAP_MINUTES = 30
MIN_RESIZE_MINUTES = 30
MAX_RESIZE_MINUTES = 480


class ResizeEdge(StrEnum):
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(slots=True, frozen=True)
class Placement:
    left: float  # percent
    width: float  # percent
    z_index: int


@dataclass(slots=True, frozen=True)
class TaskLayout:
    task: Task
    slot: datetime
    top: float
    height: float
    placement: Placement
    duration_minutes: int
    is_preview: bool = False

    def css(self) -> dict[str, str | int]:
        return {
            "top": f"{self.top:g}px",
            "height": f"{self.height:g}px",
            "left": f"{self.placement.left:g}%",
            "width": f"{self.placement.width:g}%",
            "zIndex": self.placement.z_index,
        }


def task_height(
    duration_minutes: int,
    *,
    granularity_minutes: int = 30,
    unit_height: float = DEFAULT_UNIT_HEIGHT,
    minimum_height: float = DEFAULT_MIN_HEIGHT,
) -> float:
    return max(minimum_height, (duration_minutes / granularity_minutes) * unit_height)


def overlap_position(group: Sequence[Task], task_id: str) -> Placement:
    """Even split of the column among `group`, in group order."""
    total = len(group)
    if total <= 1:
        return Placement(left=0.0, width=100.0, z_index=BASE_Z_INDEX)

    index = next((i for i, t in enumerate(group) if t.id == task_id), -1)
    if index < 0:
        raise ValueError(f"task {task_id} is not part of the overlap group")

    width = 100.0 / total
    return Placement(left=index * width, width=width, z_index=BASE_Z_INDEX + index)


def js_round(x: float) -> int:
    """Half-up rounding (Math.round), unlike Python's banker's round()."""
    return math.floor(x + 0.5)


def snap_delta(
    pointer_delta_px: float,
    *,
    minutes_per_pixel: float,
    snap_minutes: int = DEFAULT_SNAP_MINUTES,
) -> int:
    return js_round(pointer_delta_px * minutes_per_pixel / snap_minutes) * snap_minutes


def resize_duration(
    original_minutes: int,
    delta_minutes: int,
    edge: ResizeEdge,
    *,
    min_duration: int = MIN_RESIZE_MINUTES,
    max_duration: int = MAX_RESIZE_MINUTES,
) -> int:
    # Dragging the top edge up (negative delta) makes the task longer.
    if edge == ResizeEdge.TOP:
        proposed = original_minutes - delta_minutes
    else:
        proposed = original_minutes + delta_minutes
    return max(min_duration, min(max_duration, proposed))


def layout_day(
    tasks: Sequence[Task],
    grid: TimeGrid,
    day: date,
    *,
    preview: Callable[[str], int | None] | None = None,
    unit_height: float = DEFAULT_UNIT_HEIGHT,
    minimum_height: float = DEFAULT_MIN_HEIGHT,
) -> list[TaskLayout]:
    """
    Position every task scheduled on `day` inside the grid window.

    `preview(task_id)` may return a live (uncommitted) duration for the task being resized.
    Tasks starting outside the window are skipped.
    """
    window_start, _ = grid.window(day)
    scheduled = [
        t
        for t in tasks
        if t.scheduled_date is not None
        and t.scheduled_date.date() == day
        and grid.in_window(truncate_to_minute(t.scheduled_date))
    ]

    out: list[TaskLayout] = []
    for task in scheduled:
        assert task.scheduled_date is not None
        start = truncate_to_minute(task.scheduled_date)
        slot = grid.slot_for(start)

        live = preview(task.id) if preview is not None else None
        duration = live if live is not None else task.duration_minutes

        offset_minutes = (start - window_start).total_seconds() / 60
        top = offset_minutes / grid.granularity_minutes * unit_height

        group = grid.tasks_at(scheduled, slot)
        if task not in group:
            # Off-grid start (e.g. 10:15 on a 30-minute grid): group with what shares its slot.
            group = [t for t in scheduled if grid.slot_for(truncate_to_minute(t.scheduled_date)) == slot]  # type: ignore[arg-type]

        out.append(
            TaskLayout(
                task=task,
                slot=slot,
                top=top,
                height=task_height(
                    duration,
                    granularity_minutes=grid.granularity_minutes,
                    unit_height=unit_height,
                    minimum_height=minimum_height,
                ),
                placement=overlap_position(group, task.id),
                duration_minutes=duration,
                is_preview=live is not None,
            )
        )
    return out
