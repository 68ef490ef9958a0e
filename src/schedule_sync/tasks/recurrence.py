# src/schedule_sync/tasks/recurrence.py

"""
Recurrence evaluation.

Decides whether a series has an occurrence on a given calendar date.

Fixed anchors:
- weekly series occur on Mondays,
- monthly series occur on the 1st of the month,
- weekdays series occur on the listed weekdays (0=Sunday..6=Saturday).

The rule's interval is only honoured under IntervalPolicy.APPLY, counted from an anchor
date (normally the series creation date). Under IntervalPolicy.IGNORE every matching
day produces an occurrence.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import StrEnum

from .task_models import RecurrenceRule, RecurrenceType

MONDAY = 1
FIRST_OF_MONTH = 1


class IntervalPolicy(StrEnum):
    IGNORE = "ignore"
    APPLY = "apply"

    @classmethod
    def from_config(cls, raw: str | None) -> IntervalPolicy:
        if not raw:
            return cls.IGNORE
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.IGNORE


def sunday_first_weekday(d: date) -> int:
    """0=Sunday..6=Saturday (date.weekday() is 0=Monday)."""
    return (d.weekday() + 1) % 7


def _interval_ok(rule: RecurrenceRule, candidate: date, anchor: date) -> bool:
    every = max(1, int(rule.interval or 1))

    if rule.type == RecurrenceType.DAILY:
        delta = (candidate - anchor).days
        return delta >= 0 and delta % every == 0

    if rule.type == RecurrenceType.WEEKLY:
        anchor_monday = anchor - timedelta(days=anchor.weekday())
        delta = (candidate - anchor_monday).days
        if delta < 0:
            return False
        return (delta // 7) % every == 0

    if rule.type == RecurrenceType.MONTHLY:
        months = (candidate.year - anchor.year) * 12 + (candidate.month - anchor.month)
        return months >= 0 and months % every == 0

    return True


def matches(
    rule: RecurrenceRule | None,
    candidate: date,
    *,
    anchor: date | None = None,
    policy: IntervalPolicy = IntervalPolicy.IGNORE,
) -> bool:
    """Return True if `rule` produces an occurrence on `candidate`."""
    if rule is None:
        return False

    weekday = sunday_first_weekday(candidate)

    if rule.type == RecurrenceType.DAILY:
        hit = True
    elif rule.type == RecurrenceType.WEEKLY:
        hit = weekday == MONDAY
    elif rule.type == RecurrenceType.MONTHLY:
        hit = candidate.day == FIRST_OF_MONTH
    elif rule.type == RecurrenceType.WEEKDAYS:
        hit = weekday in rule.weekdays
    else:
        hit = False

    if not hit:
        return False

    if policy == IntervalPolicy.APPLY and anchor is not None:
        return _interval_ok(rule, candidate, anchor)
    return True
