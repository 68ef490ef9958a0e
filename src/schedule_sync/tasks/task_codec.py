# src/schedule_sync/tasks/task_codec.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from .task_models import RecurrenceRule, RecurrenceType, Task

logger = logging.getLogger(__name__)


class TaskStorageError(RuntimeError):
    """Persisted task payload could not be decoded."""


def _dt_to_str(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _str_to_dt(raw: Any, *, field_name: str) -> datetime | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise TaskStorageError(f"{field_name}: expected ISO-8601 string, got {type(raw).__name__}")
    try:
        value = datetime.fromisoformat(raw)
    except ValueError as e:
        raise TaskStorageError(f"{field_name}: not ISO-8601: {raw!r}") from e
    if value.tzinfo is not None:
        # Wall-clock only: convert to local time and drop tzinfo.
        value = value.astimezone().replace(tzinfo=None)
    return value


def _rule_to_record(rule: RecurrenceRule | None) -> dict[str, Any] | None:
    if rule is None:
        return None
    out: dict[str, Any] = {"type": rule.type.value, "interval": int(rule.interval)}
    if rule.type == RecurrenceType.WEEKDAYS:
        out["weekdays"] = sorted(rule.weekdays)
    return out


def _record_to_rule(raw: Any) -> RecurrenceRule | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise TaskStorageError("recurrence: expected an object")
    try:
        rtype = RecurrenceType.parse(raw.get("type"))
    except ValueError as e:
        raise TaskStorageError(f"recurrence: {e}") from e
    try:
        interval = int(raw.get("interval") or 1)
    except (TypeError, ValueError) as e:
        raise TaskStorageError("recurrence.interval: expected an integer") from e
    weekdays = raw.get("weekdays") or []
    if not isinstance(weekdays, list):
        raise TaskStorageError("recurrence.weekdays: expected a list")
    try:
        days = frozenset(int(d) for d in weekdays)
    except (TypeError, ValueError) as e:
        raise TaskStorageError(f"recurrence.weekdays: expected integers, got {weekdays!r}") from e
    return RecurrenceRule(type=rtype, interval=interval, weekdays=days)


def _record_flag(raw: Any, *, field_name: str) -> bool:
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in {"true", "false"}:
        return raw.strip().lower() == "true"
    raise TaskStorageError(f"{field_name}: expected a boolean, got {raw!r}")


def task_to_record(task: Task) -> dict[str, Any]:
    """Task -> JSON-compatible dict (camelCase keys, ISO-8601 dates)."""
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "duration": task.duration_minutes,
        "color": task.color,
        "recurrence": _rule_to_record(task.recurrence),
        "scheduledDate": _dt_to_str(task.scheduled_date),
        "completed": task.completed,
        "completedAt": _dt_to_str(task.completed_at),
        "createdAt": _dt_to_str(task.created_at),
        "isRecurringInstance": task.is_recurring_instance,
        "parentTaskId": task.parent_task_id,
    }


def record_to_task(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise TaskStorageError("task record: expected an object")

    task_id = raw.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise TaskStorageError("task record: missing id")

    created_at = _str_to_dt(raw.get("createdAt"), field_name="createdAt")
    if created_at is None:
        raise TaskStorageError(f"task {task_id}: missing createdAt")

    try:
        duration = int(raw.get("duration") or 0)
    except (TypeError, ValueError) as e:
        raise TaskStorageError(f"task {task_id}: duration is not an integer") from e

    completed = _record_flag(raw.get("completed"), field_name="completed")
    completed_at = _str_to_dt(raw.get("completedAt"), field_name="completedAt")
    if not completed:
        completed_at = None
    elif completed_at is None:
        # completedAt is set iff completed.
        completed_at = created_at

    return Task(
        id=task_id,
        title=str(raw.get("title") or ""),
        description=raw.get("description"),
        duration_minutes=duration,
        color=str(raw.get("color") or ""),
        recurrence=_record_to_rule(raw.get("recurrence")),
        scheduled_date=_str_to_dt(raw.get("scheduledDate"), field_name="scheduledDate"),
        completed=completed,
        completed_at=completed_at,
        created_at=created_at,
        parent_task_id=raw.get("parentTaskId") or None,
    )


def dumps_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)


def loads_tasks(payload: str | None) -> list[Task]:
    if not payload:
        return []
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise TaskStorageError(f"task payload is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise TaskStorageError("task payload: expected a JSON array")
    tasks = [record_to_task(r) for r in data]
    logger.debug("Decoded %d task records", len(tasks))
    return tasks
