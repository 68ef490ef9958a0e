# src/schedule_sync/core/ports.py

"""
Ports (interfaces) used by the core.

The task store depends on Protocols instead of concrete implementations.
This keeps persistence backends swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

from ..tasks.task_models import Task

Clock = Callable[[], datetime]
# Returns naive local wall-clock time (datetime.now by default).


class KeyValueStore(Protocol):
    """String key -> string value store (localStorage-like)."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class TaskStorage(Protocol):
    """
    Persistence port of the task store.

    load() is called once on startup; save() after every successful mutation.
    Errors raised by save() propagate to the caller of the mutation.
    """

    def load(self) -> list[Task]: ...
    def save(self, tasks: Sequence[Task]) -> None: ...
