# src/schedule_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read from disk at import time except an optional .env file.
- Tests build their own settings objects instead of importing SETTINGS.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "SCHEDSYNC"

STORAGE_BACKENDS = ("json", "sqlite", "memory")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Persistence ----
    data_dir: Path
    storage_backend: str
    storage_path: Path
    storage_key: str

    # ---- Time grid ----
    granularity_minutes: int
    day_start_hour: int
    day_end_hour: int
    full_day: bool

    # ---- Layout / gestures ----
    slot_height_px: int
    min_task_height_px: int
    snap_minutes: int
    min_resize_minutes: int
    max_resize_minutes: int

    # ---- Recurrence ----
    interval_policy: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "schedule-sync")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/schedule_sync"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "json").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "json"
        default_file = "tasks.sqlite3" if storage_backend == "sqlite" else "tasks.json"
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / default_file)
        storage_key = _env(_k("STORAGE_KEY"), "schedule-sync-tasks")

        full_day = _env_bool(_k("FULL_DAY"), False)
        if full_day:
            granularity_minutes, day_start_hour, day_end_hour = 60, 0, 24
        else:
            granularity_minutes = _env_int(_k("GRANULARITY_MINUTES"), 30)
            day_start_hour = _env_int(_k("DAY_START_HOUR"), 6)
            day_end_hour = _env_int(_k("DAY_END_HOUR"), 23)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            storage_backend=storage_backend,
            storage_path=storage_path,
            storage_key=storage_key,
            granularity_minutes=granularity_minutes,
            day_start_hour=day_start_hour,
            day_end_hour=day_end_hour,
            full_day=full_day,
            slot_height_px=_env_int(_k("SLOT_HEIGHT_PX"), 80),
            min_task_height_px=_env_int(_k("MIN_TASK_HEIGHT_PX"), 80),
            snap_minutes=_env_int(_k("SNAP_MINUTES"), 30),
            min_resize_minutes=_env_int(_k("MIN_RESIZE_MINUTES"), 30),
            max_resize_minutes=_env_int(_k("MAX_RESIZE_MINUTES"), 480),
            interval_policy=_env(_k("INTERVAL_POLICY"), "ignore").strip().lower(),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
