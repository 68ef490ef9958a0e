# tests/test_task_store.py

from __future__ import annotations

from datetime import date, datetime

import pytest

from schedule_sync.storage.kv_store import MemoryKeyValueStore
from schedule_sync.tasks.recurrence import IntervalPolicy
from schedule_sync.tasks.task_models import RecurrenceRule, RecurrenceType, occurrence_id
from schedule_sync.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingStorage

DAILY = RecurrenceRule(type=RecurrenceType.DAILY)
TODAY = date(2024, 3, 4)


def _add(store: TaskStore, title: str = "Write report", **kw):
    kw.setdefault("duration_minutes", 60)
    kw.setdefault("color", "#3b82f6")
    return store.add_task(title=title, **kw)


def test_add_task_assigns_identity(store: TaskStore, clock: FakeClock) -> None:
    a = _add(store)
    b = _add(store, "Other")
    assert a.id and b.id and a.id != b.id
    assert a.completed is False and a.completed_at is None
    assert a.created_at == clock.now
    assert [t.id for t in store.list_tasks()] == [a.id, b.id]


def test_generate_todays_occurrences_is_idempotent(store: TaskStore) -> None:
    series = _add(store, "Stretch", recurrence=DAILY)

    first = store.generate_todays_occurrences()
    snapshot = [t.id for t in store.list_tasks()]
    second = store.generate_todays_occurrences()

    assert [t.id for t in first] == [occurrence_id(series.id, TODAY)]
    assert second == []
    assert [t.id for t in store.list_tasks()] == snapshot


def test_generated_occurrence_is_a_fresh_instance(store: TaskStore) -> None:
    series = _add(store, "Stretch", recurrence=DAILY)
    (occ,) = store.generate_todays_occurrences()

    assert occ.id == f"{series.id}-2024-03-04"
    assert occ.parent_task_id == series.id
    assert occ.is_recurring_instance and not occ.is_series
    assert occ.recurrence is None
    assert occ.scheduled_date is None and not occ.completed
    assert occ.title == series.title and occ.duration_minutes == series.duration_minutes


def test_no_occurrence_when_rule_does_not_match(store: TaskStore) -> None:
    _add(store, "Pay rent", recurrence=RecurrenceRule(type=RecurrenceType.MONTHLY))
    assert store.generate_todays_occurrences() == []


def test_occurrence_state_is_independent_from_series(store: TaskStore) -> None:
    series = _add(store, "Stretch", recurrence=DAILY)
    (occ,) = store.generate_todays_occurrences()
    store.complete_task(occ.id)

    assert store.get_task(occ.id).completed
    assert not store.get_task(series.id).completed


def test_deleted_occurrence_is_not_regenerated(store: TaskStore) -> None:
    _add(store, "Stretch", recurrence=DAILY)
    (occ,) = store.generate_todays_occurrences()

    store.delete_task(occ.id)
    assert store.generate_todays_occurrences() == []
    assert store.get_task(occ.id) is None


def test_cascade_delete_leaves_other_series_untouched(store: TaskStore, clock: FakeClock) -> None:
    s1 = _add(store, "Stretch", recurrence=DAILY)
    s2 = _add(store, "Read", recurrence=DAILY)
    store.generate_todays_occurrences()
    clock.advance(days=1)
    store.generate_todays_occurrences()
    assert len(store.list_tasks()) == 6

    store.delete_task(s1.id)

    remaining = store.list_tasks()
    assert all(t.id != s1.id and t.parent_task_id != s1.id for t in remaining)
    assert sorted(t.id for t in remaining if t.parent_task_id == s2.id) == [
        f"{s2.id}-2024-03-04",
        f"{s2.id}-2024-03-05",
    ]


def test_complete_task_toggles_completed_at(store: TaskStore, clock: FakeClock) -> None:
    task = _add(store)
    store.complete_task(task.id)
    done = store.get_task(task.id)
    assert done.completed is True
    assert done.completed_at == clock.now

    store.complete_task(task.id)
    undone = store.get_task(task.id)
    assert undone.completed is False
    assert undone.completed_at is None


def test_update_task_merges_and_protects_identity(store: TaskStore, clock: FakeClock) -> None:
    task = _add(store)
    created_at = task.created_at

    store.update_task(task.id, id="hijack", created_at=datetime(2000, 1, 1), title="Renamed", duration_minutes=90)

    updated = store.get_task(task.id)
    assert updated.title == "Renamed"
    assert updated.duration_minutes == 90
    assert updated.created_at == created_at
    assert store.get_task("hijack") is None


def test_update_task_keeps_completed_at_consistent(store: TaskStore, clock: FakeClock) -> None:
    task = _add(store)
    store.update_task(task.id, completed=True)
    assert store.get_task(task.id).completed_at == clock.now
    store.update_task(task.id, completed=False)
    assert store.get_task(task.id).completed_at is None


def test_update_task_rejects_unknown_fields(store: TaskStore) -> None:
    task = _add(store)
    with pytest.raises(ValueError):
        store.update_task(task.id, colour="#fff")


def test_unknown_ids_are_noops(store: TaskStore, kv: MemoryKeyValueStore) -> None:
    _add(store)
    writes = kv.writes

    store.update_task("missing", title="x")
    store.delete_task("missing")
    store.schedule_task("missing", datetime(2024, 3, 4, 9))
    store.unschedule_task("missing")
    store.complete_task("missing")

    assert kv.writes == writes
    assert len(store.list_tasks()) == 1


def test_series_definition_cannot_be_scheduled_or_completed(store: TaskStore) -> None:
    series = _add(store, "Stretch", recurrence=DAILY)
    store.schedule_task(series.id, datetime(2024, 3, 4, 9))
    store.complete_task(series.id)

    current = store.get_task(series.id)
    assert current.scheduled_date is None
    assert current.completed is False


def test_schedule_and_unschedule(store: TaskStore) -> None:
    task = _add(store)
    when = datetime(2024, 3, 4, 9, 30)
    store.schedule_task(task.id, when)
    assert store.get_task(task.id).scheduled_date == when

    store.schedule_task(task.id, datetime(2024, 3, 4, 14))
    assert store.get_task(task.id).scheduled_date == datetime(2024, 3, 4, 14)

    store.unschedule_task(task.id)
    assert store.get_task(task.id).scheduled_date is None


def test_occurrences_for_date_generates_and_orders(store: TaskStore) -> None:
    series = _add(store, "Stretch", recurrence=DAILY)
    late = _add(store, "Late", scheduled_date=datetime(2024, 3, 6, 15))
    early = _add(store, "Early", scheduled_date=datetime(2024, 3, 6, 8))
    _add(store, "Other day", scheduled_date=datetime(2024, 3, 7, 8))

    day = date(2024, 3, 6)
    assert [t.id for t in store.occurrences_for_date(day)] == [early.id, late.id]

    occ_id = occurrence_id(series.id, day)
    assert store.get_task(occ_id) is not None
    store.schedule_task(occ_id, datetime(2024, 3, 6, 8))
    assert [t.id for t in store.occurrences_for_date(day)] == [early.id, occ_id, late.id]


def test_unscheduled_tasks_excludes_series_completed_and_scheduled(store: TaskStore) -> None:
    _add(store, "Stretch", recurrence=DAILY)
    (occ,) = store.generate_todays_occurrences()
    loose = _add(store, "Loose")
    placed = _add(store, "Placed", scheduled_date=datetime(2024, 3, 4, 10))
    finished = _add(store, "Finished")
    store.complete_task(finished.id)

    ids = [t.id for t in store.unscheduled_tasks()]
    assert ids == [occ.id, loose.id]
    assert placed.id not in ids


def test_scheduled_tasks_sorted_and_without_series(store: TaskStore) -> None:
    series = _add(store, "Stretch", recurrence=DAILY, scheduled_date=datetime(2024, 3, 4, 9))
    (occ,) = store.generate_todays_occurrences()
    late = _add(store, "Late", scheduled_date=datetime(2024, 3, 5, 8))
    early = _add(store, "Early", scheduled_date=datetime(2024, 3, 4, 7))
    _add(store, "Loose")
    store.schedule_task(occ.id, datetime(2024, 3, 4, 7))

    ids = [t.id for t in store.scheduled_tasks()]
    # Same start time: insertion order decides.
    assert ids == [occ.id, early.id, late.id]
    assert series.id not in ids


def test_every_mutation_is_written_through(clock: FakeClock) -> None:
    storage = RecordingStorage()
    store = TaskStore(storage, clock=clock)
    task = store.add_task(title="A", duration_minutes=30, color="#000")
    store.schedule_task(task.id, datetime(2024, 3, 4, 9))
    store.complete_task(task.id)

    assert len(storage.saves) == 3
    assert storage.saves[-1][0].completed is True


def test_failed_save_leaves_memory_untouched(clock: FakeClock) -> None:
    storage = RecordingStorage()
    store = TaskStore(storage, clock=clock)
    task = store.add_task(title="A", duration_minutes=30, color="#000")

    storage.fail_next_save = True
    with pytest.raises(OSError):
        store.complete_task(task.id)
    assert store.get_task(task.id).completed is False


def test_load_replaces_contents(clock: FakeClock) -> None:
    seed = TaskStore(clock=clock)
    t = seed.add_task(title="Seeded", duration_minutes=45, color="#123456")

    store = TaskStore(RecordingStorage(initial=[t]), clock=clock)
    store.load()
    assert [x.title for x in store.list_tasks()] == ["Seeded"]


def test_apply_interval_policy_skips_days(clock: FakeClock) -> None:
    store = TaskStore(clock=clock, interval_policy=IntervalPolicy.APPLY)
    series = store.add_task(
        title="Every other day",
        duration_minutes=30,
        color="#000",
        recurrence=RecurrenceRule(type=RecurrenceType.DAILY, interval=2),
    )
    hits = [d for d in range(4, 10) if store.generate_occurrences(date(2024, 3, d))]
    assert hits == [4, 6, 8]
    assert all(t.parent_task_id == series.id for t in store.list_tasks()[1:])
