"""Use cases that coordinate the task and event stores.

The stores never call each other; anything touching both goes through
here, in a fixed order.
"""

import logging
from datetime import date, time

from .adapters import JsonFileStore, SystemClock, short_id, uuid_id
from .config import Config
from .core.calendar import CalendarEvent, EventType, build_event_window
from .ports import Clock, IdGenerator, KeyValueStore
from .stores import EventStore, TaskStore

logger = logging.getLogger(__name__)


def get_storage(config: Config) -> JsonFileStore:
    """Resolve the storage directory from config."""
    return JsonFileStore(config.data_path)


def get_id_generator(config: Config) -> IdGenerator:
    return short_id if config.id_style == "short" else uuid_id


def open_stores(
    config: Config,
    storage: KeyValueStore | None = None,
    clock: Clock | None = None,
    run_startup: bool = True,
) -> tuple[TaskStore, EventStore]:
    """Build both stores and, unless run_startup is False, run startup housekeeping."""
    storage = storage if storage is not None else get_storage(config)
    clock = clock or SystemClock()
    make_id = get_id_generator(config)

    tasks = TaskStore(storage, clock, make_id)
    events = EventStore(
        storage,
        clock,
        make_id,
        recurrence_years=config.recurrence_years,
        retention_years=config.anniversary_retention_years,
    )
    if run_startup:
        startup(events)
    return tasks, events


def startup(events: EventStore) -> None:
    """Drop stale events, then top up yearly series."""
    removed = events.cleanup_past_events()
    added = events.generate_recurring_events()
    logger.debug(f"Startup housekeeping: removed {removed}, generated {added}")


def create_event(
    events: EventStore,
    title: str,
    day: date,
    start: time,
    end: time,
    event_type: EventType = EventType.NORMAL,
) -> list[CalendarEvent]:
    """Add an event on a day from wall-clock times."""
    start_dt, end_dt, all_day = build_event_window(day, start, end, event_type)
    return events.add_event(
        title=title,
        start_date=start_dt,
        end_date=end_dt,
        type=event_type,
        is_all_day=all_day,
    )


def schedule_task(
    tasks: TaskStore,
    events: EventStore,
    task_id: str,
    day: date,
    start: time,
    end: time,
) -> CalendarEvent | None:
    """
    Block out calendar time for a task and move its due date to match.

    Adds a task-block event, then sets the task's due date to the block's
    start. Returns the new event, or None when the task does not exist.
    """
    task = tasks.get(task_id)
    if task is None:
        logger.debug(f"Not scheduling unknown task {task_id}")
        return None

    start_dt, end_dt, _ = build_event_window(day, start, end, EventType.TASK_BLOCK)
    [event] = events.add_event(
        title=task.title,
        start_date=start_dt,
        end_date=end_dt,
        type=EventType.TASK_BLOCK,
        is_all_day=False,
        related_task_id=task.id,
    )
    tasks.update_task(task.id, due_date=event.start_date)
    return event
