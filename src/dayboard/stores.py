"""Task and event stores - owned state plus a persistence commit step.

Each store holds its live collection, applies commands through the pure
transitions in dayboard.core, and writes the whole collection to the
key-value store after every change. Construct one of each per process
and pass them to whatever needs them.
"""

import json
import logging
from datetime import date, datetime
from typing import Callable

from .core import calendar as cal
from .core.calendar import CalendarEvent, EventType
from .core.commands import (
    AddEvent,
    AddSubTask,
    AddTask,
    CleanupPastEvents,
    DeleteEvent,
    DeleteTask,
    EventCommand,
    GenerateRecurringEvents,
    MoveTask,
    ReorderTasks,
    TaskCommand,
    ToggleSubTask,
    ToggleTaskCompletion,
    UpdateTask,
    apply_event_command,
    apply_task_command,
)
from .core.tasks import Priority, Task, TaskStatus, find_task, remaining_count
from .ports import Clock, IdGenerator, KeyValueStore

logger = logging.getLogger(__name__)

TASK_STORAGE_KEY = "task-storage"
EVENT_STORAGE_KEY = "calendar-storage"
STORAGE_VERSION = 0

_MALFORMED = (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError)


def _dump(field_name: str, items: list) -> str:
    """Serialize a collection in the persisted {"state": ..., "version": ...} envelope."""
    return json.dumps(
        {"state": {field_name: [item.to_dict() for item in items]}, "version": STORAGE_VERSION}
    )


def _load(storage: KeyValueStore, key: str, field_name: str, factory: Callable) -> list:
    """
    Rehydrate a collection, falling back to empty on missing or bad data.

    Accepts both the enveloped form and a bare {field_name: [...]} blob.
    """
    raw = storage.get(key)
    if raw is None:
        return []
    try:
        data = json.loads(raw)
        state = data.get("state", data)
        return [factory(item) for item in state[field_name]]
    except _MALFORMED as e:
        logger.warning(f"Discarding unreadable {key} data: {e}")
        return []


class _Observable:
    """Listeners are called with the new collection after each commit."""

    def __init__(self):
        self._listeners: list[Callable[[list], None]] = []

    def subscribe(self, listener: Callable[[list], None]) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, collection: list) -> None:
        for listener in list(self._listeners):
            listener(collection)


class TaskStore(_Observable):
    """Owns the task list and nested subtasks."""

    def __init__(
        self,
        storage: KeyValueStore,
        clock: Clock,
        make_id: IdGenerator,
        key: str = TASK_STORAGE_KEY,
    ):
        super().__init__()
        self.storage = storage
        self.clock = clock
        self.make_id = make_id
        self.key = key
        self.tasks: list[Task] = _load(storage, key, "tasks", Task.from_dict)
        logger.debug(f"Loaded {len(self.tasks)} tasks from {key}")

    def _commit(self, tasks: list[Task]) -> None:
        """Persist the new collection, then swap it in."""
        if tasks is self.tasks:
            return
        blob = _dump("tasks", tasks)
        try:
            self.storage.set(self.key, blob)
        except OSError as e:
            logger.error(f"Failed to persist {self.key}: {e}")
            raise
        self.tasks = tasks
        logger.debug(f"Committed {len(tasks)} tasks")
        self._notify(tasks)

    def dispatch(self, command: TaskCommand) -> None:
        """Apply a task command and commit the result."""
        self._commit(apply_task_command(self.tasks, command))

    def get(self, task_id: str) -> Task | None:
        return find_task(self.tasks, task_id)

    def add_task(
        self,
        title: str,
        priority: Priority = Priority.MEDIUM,
        status: TaskStatus = TaskStatus.TODO,
        description: str | None = None,
        due_date: datetime | None = None,
    ) -> Task:
        """Append a new task. Title validation is the caller's job."""
        task_id = self.make_id()
        created_at = int(self.clock.now().timestamp() * 1000)
        self.dispatch(
            AddTask(
                task_id=task_id,
                title=title,
                created_at=created_at,
                priority=priority,
                status=status,
                description=description,
                due_date=due_date,
            )
        )
        return self.tasks[-1]

    def delete_task(self, task_id: str) -> None:
        self.dispatch(DeleteTask(task_id))

    def update_task(self, task_id: str, **changes) -> None:
        self.dispatch(UpdateTask(task_id, changes))

    def toggle_task_completion(self, task_id: str) -> None:
        self.dispatch(ToggleTaskCompletion(task_id))

    def add_subtask(self, task_id: str, title: str) -> None:
        self.dispatch(AddSubTask(task_id, self.make_id(), title))

    def toggle_subtask(self, task_id: str, subtask_id: str) -> None:
        self.dispatch(ToggleSubTask(task_id, subtask_id))

    def reorder_tasks(self, new_order: list[Task]) -> None:
        self.dispatch(ReorderTasks(tuple(new_order)))

    def move_task(self, active_id: str, over_id: str) -> None:
        """Reorder after dragging active_id onto over_id in the open list."""
        self.dispatch(MoveTask(active_id, over_id))

    def remaining_count(self) -> int:
        return remaining_count(self.tasks)


class EventStore(_Observable):
    """Owns calendar events, their yearly series and cleanup."""

    def __init__(
        self,
        storage: KeyValueStore,
        clock: Clock,
        make_id: IdGenerator,
        key: str = EVENT_STORAGE_KEY,
        recurrence_years: int = cal.RECURRENCE_YEARS,
        retention_years: int = cal.ANNIVERSARY_RETENTION_YEARS,
    ):
        super().__init__()
        self.storage = storage
        self.clock = clock
        self.make_id = make_id
        self.key = key
        self.recurrence_years = recurrence_years
        self.retention_years = retention_years
        self.events: list[CalendarEvent] = _load(storage, key, "events", CalendarEvent.from_dict)
        logger.debug(f"Loaded {len(self.events)} events from {key}")

    def _commit(self, events: list[CalendarEvent]) -> None:
        """Persist the new collection, then swap it in."""
        if events is self.events:
            return
        blob = _dump("events", events)
        try:
            self.storage.set(self.key, blob)
        except OSError as e:
            logger.error(f"Failed to persist {self.key}: {e}")
            raise
        self.events = events
        logger.debug(f"Committed {len(events)} events")
        self._notify(events)

    def dispatch(self, command: EventCommand) -> None:
        """Apply an event command and commit the result."""
        self._commit(apply_event_command(self.events, command, self.make_id))

    def get(self, event_id: str) -> CalendarEvent | None:
        return next((e for e in self.events if e.id == event_id), None)

    def add_event(
        self,
        title: str,
        start_date: datetime,
        end_date: datetime,
        type: EventType = EventType.NORMAL,
        is_all_day: bool = False,
        related_task_id: str | None = None,
    ) -> list[CalendarEvent]:
        """
        Add an event with a fresh id and series id.

        Birthdays and holidays are expanded into yearly occurrences sharing
        the series id. Returns every event that was added.
        """
        base = CalendarEvent(
            id=self.make_id(),
            title=title,
            start_date=start_date,
            end_date=end_date,
            type=type,
            is_all_day=is_all_day,
            related_task_id=related_task_id,
            series_id=self.make_id(),
        )
        before = len(self.events)
        self.dispatch(AddEvent(base, self.recurrence_years))
        added = self.events[before:]
        logger.debug(f"Added {len(added)} event(s) in series {base.series_id}")
        return added

    def delete_event(self, event_id: str) -> None:
        """Delete an event, or its whole series."""
        self.dispatch(DeleteEvent(event_id))

    def cleanup_past_events(self) -> int:
        """Drop stale events. Returns how many were removed."""
        before = len(self.events)
        self.dispatch(CleanupPastEvents(self.clock.now(), self.retention_years))
        removed = before - len(self.events)
        if removed:
            logger.info(f"Cleaned up {removed} past event(s)")
        return removed

    def generate_recurring_events(self) -> int:
        """Top up yearly series. Returns how many occurrences were added."""
        before = len(self.events)
        self.dispatch(GenerateRecurringEvents(self.clock.now(), self.recurrence_years))
        added = len(self.events) - before
        if added:
            logger.info(f"Generated {added} recurring occurrence(s)")
        return added

    def events_on_day(self, day: date | datetime) -> list[CalendarEvent]:
        return cal.events_on_day(self.events, day)

    def events_starting_on(self, day: date | datetime) -> list[CalendarEvent]:
        return cal.events_starting_on(self.events, day)

    def month_markers(self, year: int, month: int) -> dict[date, list[CalendarEvent]]:
        return cal.month_markers(self.events, year, month)

    def series(self, series_id: str) -> list[CalendarEvent]:
        """All events in a series, earliest first."""
        return cal.sort_events_by_start([e for e in self.events if e.series_id == series_id])
