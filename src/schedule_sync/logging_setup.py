# src/schedule_sync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

APP_LOGGER = "schedule_sync"
LOG_FILE_NAME = "schedule_sync.log"

# Write-through persistence logs on every mutation; console shows these only from WARNING.
QUIET_ON_CONSOLE = ("schedule_sync.storage.", "schedule_sync.tasks.task_codec")


def level_from_name(name: object, default: int = logging.INFO) -> int:
    """'debug' -> logging.DEBUG; unknown names fall back to `default`."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable:
    - app logs pass, except persistence chatter below WARNING
    - captured Python warnings ('py.warnings') and third-party logs only at ERROR+
    """

    def __init__(self, quiet_prefixes: tuple[str, ...] = QUIET_ON_CONSOLE) -> None:
        super().__init__()
        self._quiet = quiet_prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == APP_LOGGER or name.startswith(APP_LOGGER + "."):
            if name.startswith(self._quiet):
                return record.levelno >= logging.WARNING
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/schedule_sync",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler (filtered) + file handler (everything at file_level).

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
