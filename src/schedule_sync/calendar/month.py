# src/schedule_sync/calendar/month.py

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from ..tasks.recurrence import sunday_first_weekday
from ..tasks.task_models import Task

DEFAULT_MAX_VISIBLE = 3


@dataclass(slots=True)
class MonthCell:
    day: date
    visible: list[Task] = field(default_factory=list)
    overflow: int = 0
    is_today: bool = False


def month_days(year: int, month: int) -> list[date]:
    _, last = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, last + 1)]


def leading_blanks(year: int, month: int) -> int:
    """Empty cells before day 1 in a Sunday-first week layout."""
    return sunday_first_weekday(date(year, month, 1))


def month_grid(
    tasks: Sequence[Task],
    year: int,
    month: int,
    *,
    max_visible: int = DEFAULT_MAX_VISIBLE,
    today: date | None = None,
) -> list[MonthCell]:
    by_day: dict[date, list[Task]] = {}
    for t in tasks:
        if t.scheduled_date is not None:
            by_day.setdefault(t.scheduled_date.date(), []).append(t)

    cells: list[MonthCell] = []
    for d in month_days(year, month):
        day_tasks = sorted(by_day.get(d, []), key=lambda t: t.scheduled_date)  # type: ignore[arg-type, return-value]
        cells.append(
            MonthCell(
                day=d,
                visible=day_tasks[:max_visible],
                overflow=max(0, len(day_tasks) - max_visible),
                is_today=(d == today),
            )
        )
    return cells
