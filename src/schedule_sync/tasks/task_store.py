# src/schedule_sync/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from ..core.ports import Clock, TaskStorage
from .recurrence import IntervalPolicy, matches
from .task_models import IMMUTABLE_FIELDS, UPDATABLE_FIELDS, RecurrenceRule, Task, occurrence_id
from .task_stats import TaskStatistics, compute_statistics

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory owner of task definitions and their occurrences.

    Persistence is write-through: every mutation that changes something is saved via the
    injected TaskStorage before it becomes visible. If save() raises, the in-memory state
    is left untouched and the error propagates.

    Unknown ids on mutating calls are no-ops (callers are expected to pass known ids).
    """

    def __init__(
        self,
        storage: TaskStorage | None = None,
        *,
        clock: Clock = datetime.now,
        interval_policy: IntervalPolicy = IntervalPolicy.IGNORE,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._interval_policy = interval_policy
        self._tasks: list[Task] = []
        # Occurrence ids explicitly deleted by the user; never regenerated by this store.
        self._dismissed: set[str] = set()

    # ---- low-level helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _commit(self, new_tasks: list[Task]) -> None:
        if self._storage is not None:
            self._storage.save(new_tasks)
        self._tasks = new_tasks

    def _replace_at(self, index: int, task: Task) -> None:
        new_tasks = list(self._tasks)
        new_tasks[index] = task
        self._commit(new_tasks)

    def _placeable(self, task_id: str, op: str) -> int | None:
        """Index of a task the user may place/complete directly, else None."""
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("%s: unknown task id=%s (no-op)", op, task_id)
            return None
        if self._tasks[idx].is_series:
            logger.warning("%s: task id=%s is a series definition (no-op)", op, task_id)
            return None
        return idx

    # ---- loading ----

    def load(self) -> None:
        if self._storage is None:
            return
        self._tasks = list(self._storage.load())
        logger.info("TaskStore loaded total=%d", len(self._tasks))

    # ---- queries ----

    def list_tasks(self) -> list[Task]:
        return list(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def count_tasks(self) -> int:
        return len(self._tasks)

    def occurrences_for_date(self, day: date, *, generate: bool = True) -> list[Task]:
        """
        Placeable instances scheduled on `day`, ordered by start time then insertion order.

        With generate=True the day is evaluated first, so matching series get their
        occurrence for that date created lazily.
        """
        if generate:
            self.generate_occurrences(day)
        hits = [
            (t.scheduled_date, i, t)
            for i, t in enumerate(self._tasks)
            if not t.is_series and t.scheduled_date is not None and t.scheduled_date.date() == day
        ]
        hits.sort(key=lambda x: (x[0], x[1]))
        return [t for _, _, t in hits]

    def unscheduled_tasks(self) -> list[Task]:
        """Placeable instances waiting to be dragged onto the calendar."""
        return [
            t
            for t in self._tasks
            if not t.is_series and t.scheduled_date is None and not t.completed
        ]

    def scheduled_tasks(self) -> list[Task]:
        hits = [
            (t.scheduled_date, i, t)
            for i, t in enumerate(self._tasks)
            if not t.is_series and t.scheduled_date is not None
        ]
        hits.sort(key=lambda x: (x[0], x[1]))
        return [t for _, _, t in hits]

    def get_statistics(self) -> TaskStatistics:
        return compute_statistics(self._tasks)

    # ---- mutations ----

    def add_task(
        self,
        *,
        title: str,
        duration_minutes: int,
        color: str,
        description: str | None = None,
        recurrence: RecurrenceRule | None = None,
        scheduled_date: datetime | None = None,
    ) -> Task:
        task = Task(
            id=uuid.uuid4().hex,
            title=title,
            description=description,
            duration_minutes=int(duration_minutes),
            color=color,
            recurrence=recurrence,
            scheduled_date=scheduled_date,
            completed=False,
            completed_at=None,
            created_at=self._clock(),
        )
        self._commit([*self._tasks, task])
        logger.debug(
            "Task added id=%s recurrence=%s scheduled=%s",
            task.id,
            recurrence.type.value if recurrence else None,
            scheduled_date,
        )
        return task

    def update_task(self, task_id: str, **fields: Any) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS - IMMUTABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown task fields: {', '.join(sorted(unknown))}")

        for name in IMMUTABLE_FIELDS & set(fields):
            logger.warning("update_task: field %s is immutable; ignored (id=%s)", name, task_id)
            fields.pop(name)

        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("update_task: unknown task id=%s (no-op)", task_id)
            return
        if not fields:
            return

        current = self._tasks[idx]
        if "completed" in fields and "completed_at" not in fields:
            if fields["completed"] and not current.completed:
                fields["completed_at"] = self._clock()
            elif not fields["completed"]:
                fields["completed_at"] = None

        updated = replace(current, **fields)
        if not updated.completed:
            updated.completed_at = None
        elif updated.completed_at is None:
            updated.completed_at = self._clock()
        self._replace_at(idx, updated)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))

    def delete_task(self, task_id: str) -> None:
        """Remove the task and, for a series, every occurrence generated from it."""
        target = self.get_task(task_id)
        if target is None:
            logger.debug("delete_task: unknown task id=%s (no-op)", task_id)
            return

        new_tasks = [t for t in self._tasks if t.id != task_id and t.parent_task_id != task_id]
        removed = len(self._tasks) - len(new_tasks)
        self._commit(new_tasks)

        if target.is_recurring_instance:
            self._dismissed.add(task_id)
        logger.info("Task deleted id=%s removed=%d", task_id, removed)

    def schedule_task(self, task_id: str, when: datetime) -> None:
        idx = self._placeable(task_id, "schedule_task")
        if idx is None:
            return
        self._replace_at(idx, replace(self._tasks[idx], scheduled_date=when))
        logger.debug("Task scheduled id=%s at=%s", task_id, when)

    def unschedule_task(self, task_id: str) -> None:
        idx = self._placeable(task_id, "unschedule_task")
        if idx is None:
            return
        if self._tasks[idx].scheduled_date is None:
            return
        self._replace_at(idx, replace(self._tasks[idx], scheduled_date=None))
        logger.debug("Task unscheduled id=%s", task_id)

    def complete_task(self, task_id: str) -> None:
        """Toggle completion; completed_at follows the completed flag."""
        idx = self._placeable(task_id, "complete_task")
        if idx is None:
            return
        current = self._tasks[idx]
        if current.completed:
            updated = replace(current, completed=False, completed_at=None)
        else:
            updated = replace(current, completed=True, completed_at=self._clock())
        self._replace_at(idx, updated)
        logger.debug("Task completion toggled id=%s completed=%s", task_id, updated.completed)

    # ---- recurrence ----

    def generate_occurrences(self, day: date) -> list[Task]:
        """
        Ensure exactly one occurrence exists on `day` for every matching series.

        Idempotent: occurrences are keyed by occurrence_id(series, day), so repeated calls
        create nothing new. Occurrences the user deleted are not recreated.
        Returns the newly created occurrences.
        """
        existing = {t.id for t in self._tasks}
        now = self._clock()
        created: list[Task] = []

        for series in self._tasks:
            if not series.is_series:
                continue
            occ_id = occurrence_id(series.id, day)
            if occ_id in existing or occ_id in self._dismissed:
                continue
            if not matches(
                series.recurrence,
                day,
                anchor=series.created_at.date(),
                policy=self._interval_policy,
            ):
                continue

            created.append(
                replace(
                    series,
                    id=occ_id,
                    recurrence=None,
                    parent_task_id=series.id,
                    scheduled_date=None,
                    completed=False,
                    completed_at=None,
                    created_at=now,
                )
            )
            existing.add(occ_id)

        if created:
            self._commit([*self._tasks, *created])
            logger.info("Generated %d occurrences for %s", len(created), day.isoformat())
        return created

    def generate_todays_occurrences(self) -> list[Task]:
        return self.generate_occurrences(self._clock().date())
