"""Functional core - pure business logic with no I/O."""

from .tasks import Task, SubTask, Priority, TaskStatus, partition_tasks, move_task
from .calendar import (
    CalendarEvent,
    EventType,
    build_event_window,
    events_on_day,
    month_markers,
    overlaps_day,
)
from .commands import apply_event_command, apply_task_command

__all__ = [
    # Tasks
    "Task",
    "SubTask",
    "Priority",
    "TaskStatus",
    "partition_tasks",
    "move_task",
    # Calendar
    "CalendarEvent",
    "EventType",
    "build_event_window",
    "events_on_day",
    "month_markers",
    "overlaps_day",
    # Commands
    "apply_task_command",
    "apply_event_command",
]
