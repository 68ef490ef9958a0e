# src/schedule_sync/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from ..calendar.gestures import GestureController
from ..calendar.layout import DEFAULT_MIN_HEIGHT, DEFAULT_UNIT_HEIGHT
from ..calendar.time_grid import TimeGrid
from ..tasks.task_store import TaskStore
from .ports import Clock


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: TaskStore
    grid: TimeGrid
    gestures: GestureController
    clock: Clock = datetime.now

    # Pixel height of one grid slot and the floor for short tasks.
    unit_height: float = DEFAULT_UNIT_HEIGHT
    minimum_height: float = DEFAULT_MIN_HEIGHT

    # Day currently shown by the front-end.
    current_day: date = field(default_factory=date.today)
