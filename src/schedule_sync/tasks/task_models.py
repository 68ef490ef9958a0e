# src/schedule_sync/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class RecurrenceType(StrEnum):
    """How a series repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    WEEKDAYS = "weekdays"

    @classmethod
    def parse(cls, raw: object) -> RecurrenceType:
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError(f"recurrence type is required, got {raw!r}")
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"unknown recurrence type: {raw!r}") from None


@dataclass(frozen=True, slots=True)
class RecurrenceRule:
    """
    Recurrence rule of a series.

    Notes:
    - interval is "repeat every N"; it only matters for daily/weekly/monthly and only
      when the store applies intervals (see recurrence.IntervalPolicy).
    - weekdays use 0=Sunday..6=Saturday and only matter for WEEKDAYS.
    """

    type: RecurrenceType
    interval: int = 1
    weekdays: frozenset[int] = field(default_factory=frozenset)


def occurrence_id(series_id: str, day: date) -> str:
    """Stable id of the occurrence of `series_id` on `day`."""
    return f"{series_id}-{day.isoformat()}"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    duration_minutes: int
    color: str
    created_at: datetime

    description: str | None = None
    recurrence: RecurrenceRule | None = None
    scheduled_date: datetime | None = None

    completed: bool = False
    completed_at: datetime | None = None

    # Set on generated occurrences only.
    parent_task_id: str | None = None

    @property
    def is_recurring_instance(self) -> bool:
        return self.parent_task_id is not None

    @property
    def is_series(self) -> bool:
        """A recurring definition: never placed or completed directly."""
        return self.recurrence is not None and self.parent_task_id is None

    @property
    def is_scheduled(self) -> bool:
        return self.scheduled_date is not None


# Fields callers may change through TaskStore.update_task.
UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "duration_minutes",
        "color",
        "recurrence",
        "scheduled_date",
        "completed",
        "completed_at",
        "parent_task_id",
    }
)

# Never changed after creation.
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})
