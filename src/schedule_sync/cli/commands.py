# src/schedule_sync/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, time, timedelta

from ..calendar.layout import ResizeEdge, layout_day
from ..calendar.month import leading_blanks, month_grid
from ..core.state import AppState
from ..tasks.task_editor import (
    DURATION_CHOICES,
    RecurrenceInput,
    TaskDraft,
    TaskValidationError,
    build_rule,
    validate_draft,
)
from ..tasks.task_models import Task
from ..util.display import format_duration, format_duration_short

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

ID_WIDTH = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TaskValidationError as e:
            return f"Invalid task: {e}"
        except ValueError as e:
            return f"Bad arguments for /{name}: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _short(task_id: str) -> str:
    return task_id[:ID_WIDTH]


def _resolve_id(state: AppState, raw: str) -> str:
    """Exact id or unique id prefix."""
    ids = [t.id for t in state.store.list_tasks()]
    if raw in ids:
        return raw
    hits = [i for i in ids if i.startswith(raw)]
    if len(hits) == 1:
        return hits[0]
    if not hits:
        raise ValueError(f"no task with id {raw!r}")
    raise ValueError(f"id prefix {raw!r} is ambiguous ({len(hits)} tasks)")


def _parse_day(state: AppState, raw: str | None) -> date:
    if not raw:
        return state.current_day
    if raw in ("today", "0"):
        return state.clock().date()
    if raw[0] in "+-" and raw[1:].isdigit():
        return state.current_day + timedelta(days=int(raw))
    return date.fromisoformat(raw)


def _parse_when(state: AppState, raw: str) -> datetime:
    """HH:MM on the current day, or a full ISO date-time."""
    if "T" in raw or " " in raw:
        return datetime.fromisoformat(raw).replace(second=0, microsecond=0)
    return datetime.combine(state.current_day, time.fromisoformat(raw))


def _parse_recurrence(raw: str) -> RecurrenceInput:
    # daily | weekly/2 | monthly | weekdays:1,3,5
    kind, _, days = raw.partition(":")
    kind, _, every = kind.partition("/")
    weekdays = [int(d) for d in days.split(",") if d.strip()] if days else []
    return RecurrenceInput(type=kind, interval=int(every or 1), weekdays=weekdays)


def _describe(task: Task) -> str:
    bits = [f"[{_short(task.id)}]", task.title, f"({format_duration_short(task.duration_minutes)})"]
    if task.recurrence is not None:
        bits.append(f"every:{task.recurrence.type.value}")
    if task.scheduled_date is not None:
        bits.append(f"@ {task.scheduled_date:%Y-%m-%d %H:%M}")
    if task.completed:
        bits.append("done")
    return " ".join(bits)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        raise ValueError("usage: /add <minutes> <title...> [--every RULE] [--at WHEN] [--color HEX]")

    duration = int(args[0])
    title_parts: list[str] = []
    rule_raw = when_raw = color = None

    it = iter(args[1:])
    for token in it:
        if token == "--every":
            rule_raw = next(it, None)
        elif token == "--at":
            when_raw = next(it, None)
        elif token == "--color":
            color = next(it, None)
        else:
            title_parts.append(token)

    draft = TaskDraft(title=" ".join(title_parts), duration_minutes=duration)
    if color:
        draft.color = color
    if rule_raw:
        draft.recurrence = build_rule(_parse_recurrence(rule_raw))
    if when_raw:
        draft.scheduled_date = _parse_when(state, when_raw)

    clean = validate_draft(draft)
    if clean.recurrence is not None and clean.scheduled_date is not None:
        raise ValueError("recurring tasks are placed through their occurrences; drop --at")

    task = state.store.add_task(**clean.to_fields())
    created = state.store.generate_todays_occurrences() if task.is_series else []
    extra = f" (+{len(created)} occurrence for today)" if created else ""
    return f"Added {_describe(task)}{extra}"


def cmd_list(state: AppState, args: list[str]) -> str:
    show_all = bool(args) and args[0] == "all"
    tasks = state.store.list_tasks() if show_all else state.store.unscheduled_tasks()
    if not tasks:
        return "No tasks." if show_all else "No unscheduled tasks."
    header = "All tasks:" if show_all else "Drag to schedule:"
    return "\n".join([header, *(f"  {_describe(t)}" for t in tasks)])


def cmd_day(state: AppState, args: list[str]) -> str:
    day = _parse_day(state, args[0] if args else None)
    state.current_day = day
    occurrences = state.store.occurrences_for_date(day)
    placed = layout_day(
        occurrences,
        state.grid,
        day,
        preview=state.gestures.preview_duration_for,
        unit_height=state.unit_height,
        minimum_height=state.minimum_height,
    )
    layouts = {lay.task.id: lay for lay in placed}

    lines = [f"{day:%A, %B %d %Y}"]
    for slot in state.grid.slots_for_day(day):
        starting = [t for t in occurrences if t.id in layouts and layouts[t.id].slot == slot]
        if not starting:
            continue
        for t in starting:
            lay = layouts[t.id]
            end = t.scheduled_date + timedelta(minutes=t.duration_minutes)  # type: ignore[operator]
            lines.append(
                f"  {state.grid.label(slot)}  {t.title} "
                f"({t.scheduled_date:%H:%M}-{end:%H:%M}, {format_duration(t.duration_minutes)}) "
                f"[{_short(t.id)}] width={lay.placement.width:.2f}% "
                f"top={lay.top:g}px height={lay.height:g}px"
                f"{' done' if t.completed else ''}"
            )
    if len(lines) == 1:
        lines.append("  Nothing scheduled.")
    return "\n".join(lines)


def cmd_schedule(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        raise ValueError("usage: /schedule <id> <HH:MM | YYYY-MM-DDTHH:MM>")
    task_id = _resolve_id(state, args[0])
    when = _parse_when(state, args[1])
    state.gestures.begin_drag(task_id)
    state.gestures.hover(when)
    state.gestures.drop(when)
    task = state.store.get_task(task_id)
    if task is None or task.scheduled_date != when:
        kind = "a recurring series" if task is not None and task.is_series else "not schedulable"
        return f"[{_short(task_id)}] is {kind}; nothing was scheduled"
    return f"Scheduled [{_short(task_id)}] at {when:%Y-%m-%d %H:%M}"


def cmd_unschedule(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise ValueError("usage: /unschedule <id>")
    task_id = _resolve_id(state, args[0])
    state.store.unschedule_task(task_id)
    return f"Unscheduled [{_short(task_id)}]"


def cmd_done(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise ValueError("usage: /done <id>")
    task_id = _resolve_id(state, args[0])
    state.store.complete_task(task_id)
    task = state.store.get_task(task_id)
    status = "completed" if task is not None and task.completed else "not completed"
    return f"[{_short(task_id)}] {status}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise ValueError("usage: /delete <id>")
    task_id = _resolve_id(state, args[0])
    state.store.delete_task(task_id)
    return f"Deleted [{_short(task_id)}]"


def cmd_resize(state: AppState, args: list[str]) -> str:
    if len(args) != 3:
        raise ValueError("usage: /resize <id> <top|bottom> <+/-minutes>")
    task_id = _resolve_id(state, args[0])
    edge = ResizeEdge(args[1].lower())
    minutes = int(args[2])

    gestures = state.gestures
    gestures.begin_resize(task_id, edge, 0.0)
    gestures.resize_to(minutes / gestures.minutes_per_pixel)
    committed = gestures.end_resize()
    if committed is None:
        return f"[{_short(task_id)}] duration unchanged"
    return f"[{_short(task_id)}] duration now {format_duration(committed)}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.store.get_statistics()
    lines = [
        "Task statistics:",
        f"  total={stats.total_tasks} completed={stats.completed_tasks} scheduled={stats.scheduled_tasks}",
        f"  completion rate: {stats.completion_rate * 100:.1f}%",
        f"  scheduling rate: {stats.scheduling_rate * 100:.1f}%",
    ]
    for s in stats.series[:10]:
        lines.append(
            f"  {s.task.title}: {s.completed_instances}/{s.total_instances} "
            f"({s.completion_rate * 100:.0f}%)"
        )
    return "\n".join(lines)


def cmd_month(state: AppState, args: list[str]) -> str:
    if args:
        year_s, _, month_s = args[0].partition("-")
        year, month = int(year_s), int(month_s)
    else:
        year, month = state.current_day.year, state.current_day.month

    cells = month_grid(state.store.list_tasks(), year, month, today=state.clock().date())
    lines = [f"{date(year, month, 1):%B %Y} (starts on column {leading_blanks(year, month)}, Sun=0)"]
    for cell in cells:
        if not cell.visible:
            continue
        titles = ", ".join(t.title for t in cell.visible)
        more = f" +{cell.overflow} more" if cell.overflow else ""
        mark = "*" if cell.is_today else " "
        lines.append(f" {mark}{cell.day:%d}: {titles}{more}")
    return "\n".join(lines)


registry.register("help", cmd_help, "Show this help", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    "Add a task: /add 30 Title [--every daily|weekly|monthly|weekdays:1,3,5] [--at HH:MM] "
    f"(common durations: {', '.join(str(m) for m in DURATION_CHOICES)})",
)
registry.register("list", cmd_list, "Unscheduled tasks (/list all for everything)", aliases=["ls"])
registry.register("day", cmd_day, "Show a day: /day [YYYY-MM-DD|today|+1|-1]")
registry.register("schedule", cmd_schedule, "Place a task: /schedule <id> <HH:MM>", aliases=["drop"])
registry.register("unschedule", cmd_unschedule, "Remove a task from the calendar")
registry.register("done", cmd_done, "Toggle completion", aliases=["complete"])
registry.register("delete", cmd_delete, "Delete a task (series: with all occurrences)", aliases=["rm"])
registry.register("resize", cmd_resize, "Change duration: /resize <id> <top|bottom> <+/-minutes>")
registry.register("stats", cmd_stats, "Completion statistics")
registry.register("month", cmd_month, "Month overview: /month [YYYY-MM]")
