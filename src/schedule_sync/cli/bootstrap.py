# src/schedule_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the key-value backend and wires it into the TaskStore,
- builds the time grid and gesture controller from settings.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..calendar.gestures import GestureController
from ..calendar.time_grid import TimeGrid
from ..config import get_settings
from ..core.ports import Clock, KeyValueStore
from ..core.state import AppState
from ..storage.kv_store import JsonFileKeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore
from ..storage.task_storage import KeyValueTaskStorage
from ..tasks.recurrence import IntervalPolicy
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def build_key_value_store(settings) -> KeyValueStore:
    backend = str(getattr(settings, "storage_backend", "json")).lower()
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "sqlite":
        return SqliteKeyValueStore(settings.storage_path)
    return JsonFileKeyValueStore(settings.storage_path)


def build_grid(settings) -> TimeGrid:
    if getattr(settings, "full_day", False):
        return TimeGrid.full_day()
    return TimeGrid(
        granularity_minutes=settings.granularity_minutes,
        start_hour=settings.day_start_hour,
        end_hour=settings.day_end_hour,
    )


def create_initial_state(*, settings=None, clock: Clock = datetime.now) -> AppState:
    """
    Create AppState from the provided settings and load persisted tasks.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if settings.storage_backend != "memory":
        _ensure_local_dirs(settings)

    storage = KeyValueTaskStorage(build_key_value_store(settings), settings.storage_key)
    store = TaskStore(
        storage,
        clock=clock,
        interval_policy=IntervalPolicy.from_config(settings.interval_policy),
    )
    store.load()

    grid = build_grid(settings)
    gestures = GestureController(
        store,
        minutes_per_pixel=grid.granularity_minutes / settings.slot_height_px,
        snap_minutes=settings.snap_minutes,
        min_duration=settings.min_resize_minutes,
        max_duration=settings.max_resize_minutes,
    )

    logger.info(
        "State ready backend=%s tasks=%d grid=%r",
        settings.storage_backend,
        store.count_tasks(),
        grid,
    )
    return AppState(
        settings=settings,
        store=store,
        grid=grid,
        gestures=gestures,
        clock=clock,
        unit_height=float(settings.slot_height_px),
        minimum_height=float(settings.min_task_height_px),
        current_day=clock().date(),
    )


def reconcile(state: AppState) -> int:
    """Per-load pass: create today's occurrences of recurring series."""
    created = state.store.generate_todays_occurrences()
    return len(created)
