# src/schedule_sync/tasks/task_editor.py

"""
Input boundary for task creation and editing.

The store trusts its callers; everything typed by a user goes through validate_draft()
first. Drafts convert into TaskStore.add_task / update_task keyword arguments.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .task_models import RecurrenceRule, RecurrenceType, Task

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480
DEFAULT_DURATION_MINUTES = 30
DEFAULT_COLOR = "#3b82f6"

DURATION_CHOICES = (15, 30, 45, 60, 90, 120, 180, 240, 360, 480)


class TaskValidationError(ValueError):
    """User input rejected before it reaches the store."""


@dataclass(slots=True)
class TaskDraft:
    title: str = ""
    description: str | None = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    color: str = DEFAULT_COLOR
    recurrence: RecurrenceRule | None = None
    scheduled_date: datetime | None = None

    def to_fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "color": self.color,
            "recurrence": self.recurrence,
            "scheduled_date": self.scheduled_date,
        }


@dataclass(slots=True)
class RecurrenceInput:
    type: str
    interval: int = 1
    weekdays: Iterable[int] = field(default_factory=tuple)


def build_rule(raw: RecurrenceInput | None) -> RecurrenceRule | None:
    if raw is None:
        return None
    try:
        rtype = RecurrenceType.parse(raw.type)
    except ValueError as e:
        raise TaskValidationError(str(e)) from e

    interval = int(raw.interval)
    if interval < 1:
        raise TaskValidationError("interval must be at least 1")

    days = frozenset(int(d) for d in raw.weekdays)
    bad = sorted(d for d in days if not 0 <= d <= 6)
    if bad:
        raise TaskValidationError(f"weekdays must be within 0..6 (0=Sunday), got {bad}")
    if rtype != RecurrenceType.WEEKDAYS:
        days = frozenset()

    return RecurrenceRule(type=rtype, interval=interval, weekdays=days)


def validate_draft(draft: TaskDraft) -> TaskDraft:
    """Return a normalized copy of `draft` or raise TaskValidationError."""
    title = (draft.title or "").strip()
    if not title:
        raise TaskValidationError("title is required")

    duration = int(draft.duration_minutes)
    if not MIN_DURATION_MINUTES <= duration <= MAX_DURATION_MINUTES:
        raise TaskValidationError(
            f"duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
        )

    description = (draft.description or "").strip() or None

    return TaskDraft(
        title=title,
        description=description,
        duration_minutes=duration,
        color=(draft.color or DEFAULT_COLOR).strip(),
        recurrence=draft.recurrence,
        scheduled_date=draft.scheduled_date,
    )


def draft_for_slot(slot: datetime) -> TaskDraft:
    """Click-to-create: a blank draft pre-placed at the clicked slot."""
    return TaskDraft(scheduled_date=slot.replace(second=0, microsecond=0))


def draft_from_task(task: Task) -> TaskDraft:
    return TaskDraft(
        title=task.title,
        description=task.description,
        duration_minutes=task.duration_minutes,
        color=task.color,
        recurrence=task.recurrence,
        scheduled_date=task.scheduled_date,
    )
