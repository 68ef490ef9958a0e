# src/schedule_sync/tasks/task_stats.py

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .task_models import Task


@dataclass(slots=True, frozen=True)
class SeriesStats:
    task: Task
    total_instances: int
    completed_instances: int
    scheduled_instances: int
    completion_rate: float


@dataclass(slots=True, frozen=True)
class TaskStatistics:
    total_tasks: int
    completed_tasks: int
    scheduled_tasks: int
    completion_rate: float
    scheduling_rate: float
    series: list[SeriesStats]


def _rate(part: int, whole: int) -> float:
    return part / whole if whole > 0 else 0.0


def compute_statistics(tasks: Sequence[Task]) -> TaskStatistics:
    """
    Completion / scheduling statistics.

    Per top-level task (no parent): the instance set is the task itself plus every
    occurrence generated from it. Overall figures count every stored task.
    """
    children: dict[str, list[Task]] = {}
    for t in tasks:
        if t.parent_task_id is not None:
            children.setdefault(t.parent_task_id, []).append(t)

    series: list[SeriesStats] = []
    for t in tasks:
        if t.parent_task_id is not None:
            continue
        instances = [t, *children.get(t.id, [])]
        done = sum(1 for i in instances if i.completed)
        series.append(
            SeriesStats(
                task=t,
                total_instances=len(instances),
                completed_instances=done,
                scheduled_instances=sum(1 for i in instances if i.scheduled_date is not None),
                completion_rate=_rate(done, len(instances)),
            )
        )

    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    scheduled = sum(1 for t in tasks if t.scheduled_date is not None)

    return TaskStatistics(
        total_tasks=total,
        completed_tasks=completed,
        scheduled_tasks=scheduled,
        completion_rate=_rate(completed, total),
        scheduling_rate=_rate(scheduled, total),
        series=series,
    )
