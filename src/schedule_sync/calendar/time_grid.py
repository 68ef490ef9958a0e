# src/schedule_sync/calendar/time_grid.py

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta

from ..tasks.task_models import Task


def truncate_to_minute(ts: datetime) -> datetime:
    return ts.replace(second=0, microsecond=0)


def same_minute(a: datetime, b: datetime) -> bool:
    """Slot equality: same date, hour and minute (seconds ignored)."""
    return truncate_to_minute(a) == truncate_to_minute(b)


class DaySlots:
    """
    Slot start times of one day.

    Lazy and restartable: each iteration walks the window again; nothing is precomputed.
    """

    __slots__ = ("_start", "_step", "_count")

    def __init__(self, start: datetime, step: timedelta, count: int) -> None:
        self._start = start
        self._step = step
        self._count = count

    def __iter__(self) -> Iterator[datetime]:
        for i in range(self._count):
            yield self._start + i * self._step

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, index: int) -> datetime:
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError("slot index out of range")
        return self._start + index * self._step

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, datetime):
            return False
        offset = value - self._start
        if offset < timedelta(0) or offset >= self._count * self._step:
            return False
        return offset % self._step == timedelta(0)

    def __repr__(self) -> str:
        return f"DaySlots(start={self._start.isoformat()}, step={self._step}, count={self._count})"


class TimeGrid:
    """
    Evenly spaced slots covering [start_hour:00, end_hour:00) of a day.

    Default: 30-minute slots from 06:00 to 23:00. TimeGrid.full_day() is the
    60-minute, whole-day variant.
    """

    def __init__(self, granularity_minutes: int = 30, start_hour: int = 6, end_hour: int = 23) -> None:
        if granularity_minutes <= 0:
            raise ValueError("granularity_minutes must be positive")
        if not 0 <= start_hour < end_hour <= 24:
            raise ValueError("expected 0 <= start_hour < end_hour <= 24")
        self.granularity_minutes = int(granularity_minutes)
        self.start_hour = int(start_hour)
        self.end_hour = int(end_hour)

    @classmethod
    def full_day(cls) -> TimeGrid:
        return cls(granularity_minutes=60, start_hour=0, end_hour=24)

    def __repr__(self) -> str:
        return (
            f"TimeGrid(granularity_minutes={self.granularity_minutes}, "
            f"start_hour={self.start_hour}, end_hour={self.end_hour})"
        )

    @property
    def step(self) -> timedelta:
        return timedelta(minutes=self.granularity_minutes)

    def window(self, day: date) -> tuple[datetime, datetime]:
        midnight = datetime.combine(day, time())
        return midnight + timedelta(hours=self.start_hour), midnight + timedelta(hours=self.end_hour)

    def slots_for_day(self, day: date) -> DaySlots:
        start, end = self.window(day)
        minutes = int((end - start).total_seconds() // 60)
        count = -(-minutes // self.granularity_minutes)  # ceil
        return DaySlots(start, self.step, count)

    def slot_for(self, ts: datetime) -> datetime:
        """Floor `ts` to a slot boundary, counted from the window start of the same day."""
        start, _ = self.window(ts.date())
        elapsed = truncate_to_minute(ts) - start
        return start + (elapsed // self.step) * self.step

    def in_window(self, ts: datetime) -> bool:
        start, end = self.window(ts.date())
        return start <= ts < end

    @staticmethod
    def label(slot: datetime) -> str:
        return slot.strftime("%H:%M")

    # ---- occurrence membership ----

    @staticmethod
    def occupies(task: Task, slot: datetime) -> bool:
        """start <= slot < start + duration, at minute precision."""
        if task.scheduled_date is None:
            return False
        start = truncate_to_minute(task.scheduled_date)
        end = start + timedelta(minutes=task.duration_minutes)
        return start <= truncate_to_minute(slot) < end

    @staticmethod
    def starts_at(task: Task, slot: datetime) -> bool:
        """The slot where the task is drawn (its exact start, hour and minute)."""
        return task.scheduled_date is not None and same_minute(task.scheduled_date, slot)

    def tasks_at(self, tasks: Iterable[Task], slot: datetime) -> list[Task]:
        return [t for t in tasks if self.occupies(t, slot)]
