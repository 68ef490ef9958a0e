# src/schedule_sync/calendar/gestures.py

"""
Pointer gestures on the calendar: drag-to-reschedule and resize-to-change-duration.

Exactly one gesture is active at a time:

    Idle -> Dragging(task_id, preview_slot) -> Idle      (drop / cancel)
    Idle -> Resizing(task_id, edge, ...)    -> Idle      (release / cancel)

A resize only shows a preview duration while the pointer moves; the store is written
once, on release. Drops always overwrite the task's scheduled_date; overlapping tasks
are allowed and laid out side by side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time

from ..tasks.task_store import TaskStore
from .layout import (
    DEFAULT_SNAP_MINUTES,
    DEFAULT_UNIT_HEIGHT,
    MAX_RESIZE_MINUTES,
    MIN_RESIZE_MINUTES,
    ResizeEdge,
    resize_duration,
    snap_delta,
)
from .time_grid import truncate_to_minute

logger = logging.getLogger(__name__)

DEFAULT_DROP_TIME = time(9, 0)


class GestureConflictError(RuntimeError):
    """A gesture was started while another one is still active."""


@dataclass(slots=True, frozen=True)
class Idle:
    pass


@dataclass(slots=True, frozen=True)
class Dragging:
    task_id: str
    preview_slot: datetime | None = None


@dataclass(slots=True, frozen=True)
class Resizing:
    task_id: str
    edge: ResizeEdge
    anchor_y: float
    original_duration: int
    preview_duration: int | None = None


GestureState = Idle | Dragging | Resizing

IDLE = Idle()


class GestureController:
    def __init__(
        self,
        store: TaskStore,
        *,
        minutes_per_pixel: float = DEFAULT_SNAP_MINUTES / DEFAULT_UNIT_HEIGHT,
        snap_minutes: int = DEFAULT_SNAP_MINUTES,
        min_duration: int = MIN_RESIZE_MINUTES,
        max_duration: int = MAX_RESIZE_MINUTES,
    ) -> None:
        self._store = store
        self.minutes_per_pixel = float(minutes_per_pixel)
        self.snap_minutes = int(snap_minutes)
        self.min_duration = int(min_duration)
        self.max_duration = int(max_duration)
        self._state: GestureState = IDLE

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    def _claim(self, kind: type, task_id: str) -> bool:
        """True if a new gesture may start; False if the same gesture is already running."""
        if isinstance(self._state, Idle):
            return True
        if isinstance(self._state, kind) and self._state.task_id == task_id:
            return False
        raise GestureConflictError(
            f"cannot start {kind.__name__.lower()} on {task_id}: "
            f"{type(self._state).__name__.lower()} on {self._state.task_id} is still active"
        )

    def cancel(self) -> None:
        """Abort the active gesture without touching the store."""
        if not self.is_idle:
            logger.debug("Gesture cancelled state=%s", self._state)
        self._state = IDLE

    # ---- resize ----

    def begin_resize(self, task_id: str, edge: ResizeEdge | str, pointer_y: float) -> GestureState:
        if not self._claim(Resizing, task_id):
            return self._state
        task = self._store.get_task(task_id)
        if task is None:
            logger.debug("begin_resize: unknown task id=%s (ignored)", task_id)
            return self._state
        self._state = Resizing(
            task_id=task_id,
            edge=ResizeEdge(edge),
            anchor_y=float(pointer_y),
            original_duration=task.duration_minutes,
        )
        return self._state

    def resize_to(self, pointer_y: float) -> int | None:
        """Update the live preview from the pointer position. Returns the preview duration."""
        state = self._state
        if not isinstance(state, Resizing):
            return None
        delta = snap_delta(
            float(pointer_y) - state.anchor_y,
            minutes_per_pixel=self.minutes_per_pixel,
            snap_minutes=self.snap_minutes,
        )
        preview = resize_duration(
            state.original_duration,
            delta,
            state.edge,
            min_duration=self.min_duration,
            max_duration=self.max_duration,
        )
        self._state = replace(state, preview_duration=preview)
        return preview

    def end_resize(self) -> int | None:
        """
        Pointer released: commit the preview duration.

        Returns the committed duration, or None when nothing was committed
        (no resize active, pointer never moved, or duration unchanged).
        """
        state = self._state
        self._state = IDLE
        if not isinstance(state, Resizing):
            return None
        if state.preview_duration is None or state.preview_duration == state.original_duration:
            return None
        self._store.update_task(state.task_id, duration_minutes=state.preview_duration)
        logger.info(
            "Resize committed id=%s edge=%s %d -> %d min",
            state.task_id,
            state.edge.value,
            state.original_duration,
            state.preview_duration,
        )
        return state.preview_duration

    def preview_duration_for(self, task_id: str) -> int | None:
        state = self._state
        if isinstance(state, Resizing) and state.task_id == task_id:
            return state.preview_duration
        return None

    # ---- drag ----

    def begin_drag(self, task_id: str) -> GestureState:
        if not self._claim(Dragging, task_id):
            return self._state
        self._state = Dragging(task_id=task_id)
        return self._state

    def hover(self, slot: datetime | None) -> None:
        """Pointer is over `slot` (None when it left the grid)."""
        state = self._state
        if isinstance(state, Dragging):
            self._state = replace(state, preview_slot=slot)

    def drop(self, slot: datetime) -> str | None:
        """Drop on a time slot. Returns the rescheduled task id."""
        state = self._state
        self._state = IDLE
        if not isinstance(state, Dragging):
            return None
        when = truncate_to_minute(slot)
        self._store.schedule_task(state.task_id, when)
        logger.info("Dropped id=%s at %s", state.task_id, when.isoformat())
        return state.task_id

    def drop_on_day(self, day: date, at: time = DEFAULT_DROP_TIME) -> str | None:
        """Month-view drop: no time-of-day is known, so the task lands at 09:00."""
        return self.drop(datetime.combine(day, at))

    def is_drop_preview(self, slot: datetime) -> bool:
        state = self._state
        return (
            isinstance(state, Dragging)
            and state.preview_slot is not None
            and truncate_to_minute(state.preview_slot) == truncate_to_minute(slot)
        )
