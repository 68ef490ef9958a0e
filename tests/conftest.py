# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from schedule_sync.cli.bootstrap import create_initial_state
from schedule_sync.core.state import AppState
from schedule_sync.storage.kv_store import MemoryKeyValueStore
from schedule_sync.storage.task_storage import KeyValueTaskStorage
from schedule_sync.tasks.task_store import TaskStore

from .fakes import FakeClock

# Monday.
MONDAY_NOON = datetime(2024, 3, 4, 12, 0, 0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(MONDAY_NOON)


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(kv: MemoryKeyValueStore, clock: FakeClock) -> TaskStore:
    """TaskStore wired to an in-memory key-value backend and a fixed clock."""
    return TaskStore(KeyValueTaskStorage(kv), clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="schedule-sync-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path,
        storage_backend="memory",
        storage_path=tmp_path / "tasks.json",
        storage_key="schedule-sync-tasks",
        granularity_minutes=30,
        day_start_hour=6,
        day_end_hour=23,
        full_day=False,
        slot_height_px=80,
        min_task_height_px=80,
        snap_minutes=30,
        min_resize_minutes=30,
        max_resize_minutes=480,
        interval_policy="ignore",
    )


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    return create_initial_state(settings=settings, clock=clock)
