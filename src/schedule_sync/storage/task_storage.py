# src/schedule_sync/storage/task_storage.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.ports import KeyValueStore
from ..tasks.task_codec import dumps_tasks, loads_tasks
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "schedule-sync-tasks"


class KeyValueTaskStorage:
    """All tasks (series, standalone tasks and occurrences) as one JSON array under one key."""

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._kv = kv
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> list[Task]:
        tasks = loads_tasks(self._kv.get(self._key))
        logger.info("Loaded %d tasks from key=%s", len(tasks), self._key)
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        self._kv.set(self._key, dumps_tasks(tasks))
        logger.debug("Saved %d tasks to key=%s", len(tasks), self._key)
