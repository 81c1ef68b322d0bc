"""Tagged command interface for the task and event stores.

Each operation a store supports is a frozen dataclass. The apply_*
functions dispatch a command to the matching pure transition and return
the new collection, so every state change can be replayed or tested
without touching storage.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from . import calendar as cal
from . import tasks as tk
from .calendar import CalendarEvent
from .tasks import Priority, Task, TaskStatus


# ============== Task commands ==============


@dataclass(frozen=True)
class AddTask:
    task_id: str
    title: str
    created_at: int
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    description: str | None = None
    due_date: datetime | None = None


@dataclass(frozen=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True)
class UpdateTask:
    task_id: str
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToggleTaskCompletion:
    task_id: str


@dataclass(frozen=True)
class AddSubTask:
    task_id: str
    subtask_id: str
    title: str


@dataclass(frozen=True)
class ToggleSubTask:
    task_id: str
    subtask_id: str


@dataclass(frozen=True)
class ReorderTasks:
    new_order: tuple[Task, ...]


@dataclass(frozen=True)
class MoveTask:
    active_id: str
    over_id: str


TaskCommand = (
    AddTask
    | DeleteTask
    | UpdateTask
    | ToggleTaskCompletion
    | AddSubTask
    | ToggleSubTask
    | ReorderTasks
    | MoveTask
)


def apply_task_command(tasks: list[Task], command: TaskCommand) -> list[Task]:
    """Run one task command against the collection. Pure function - no I/O."""
    match command:
        case AddTask():
            return tk.add_task(
                tasks,
                command.task_id,
                command.title,
                command.created_at,
                priority=command.priority,
                status=command.status,
                description=command.description,
                due_date=command.due_date,
            )
        case DeleteTask(task_id=task_id):
            return tk.delete_task(tasks, task_id)
        case UpdateTask(task_id=task_id, changes=changes):
            return tk.update_task(tasks, task_id, **changes)
        case ToggleTaskCompletion(task_id=task_id):
            return tk.toggle_task_completion(tasks, task_id)
        case AddSubTask(task_id=task_id, subtask_id=subtask_id, title=title):
            return tk.add_subtask(tasks, task_id, subtask_id, title)
        case ToggleSubTask(task_id=task_id, subtask_id=subtask_id):
            return tk.toggle_subtask(tasks, task_id, subtask_id)
        case ReorderTasks(new_order=new_order):
            return tk.reorder_tasks(tasks, list(new_order))
        case MoveTask(active_id=active_id, over_id=over_id):
            return tk.move_task(tasks, active_id, over_id)
    raise TypeError(f"Unknown task command: {command!r}")


# ============== Event commands ==============


@dataclass(frozen=True)
class AddEvent:
    event: CalendarEvent
    years: int = cal.RECURRENCE_YEARS


@dataclass(frozen=True)
class DeleteEvent:
    event_id: str


@dataclass(frozen=True)
class CleanupPastEvents:
    now: datetime
    retention_years: int = cal.ANNIVERSARY_RETENTION_YEARS


@dataclass(frozen=True)
class GenerateRecurringEvents:
    now: datetime
    years: int = cal.RECURRENCE_YEARS


EventCommand = AddEvent | DeleteEvent | CleanupPastEvents | GenerateRecurringEvents


def apply_event_command(
    events: list[CalendarEvent],
    command: EventCommand,
    make_id: Callable[[], str],
) -> list[CalendarEvent]:
    """Run one event command against the collection. Pure function - no I/O."""
    match command:
        case AddEvent(event=event, years=years):
            return cal.add_event(events, event, make_id, years)
        case DeleteEvent(event_id=event_id):
            return cal.delete_event(events, event_id)
        case CleanupPastEvents(now=now, retention_years=retention_years):
            return cal.cleanup_past_events(events, now, retention_years)
        case GenerateRecurringEvents(now=now, years=years):
            return cal.generate_recurring_events(events, now, make_id, years)
    raise TypeError(f"Unknown event command: {command!r}")
