"""Dayboard CLI - tasks and calendar."""

import json
import logging
import sys
from datetime import date, time

import click

from .config import load_config
from .core.calendar import EventType, events_on_day
from .core.tasks import Priority, TaskStatus, partition_tasks
from .stores import EventStore, TaskStore
from .workflows import create_event, open_stores, schedule_task


def _open(run_startup: bool = True) -> tuple[TaskStore, EventStore]:
    config = load_config()
    return open_stores(config, run_startup=run_startup)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _parse_date(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        _fail(f"invalid date {value!r}, expected YYYY-MM-DD")


def _parse_time(value: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError:
        _fail(f"invalid time {value!r}, expected HH:MM")


@click.group()
@click.version_option(package_name="dayboard")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Dayboard - tasks and calendar."""
    config = load_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else getattr(logging, config.log_level, logging.WARNING),
    )


# ============== Tasks ==============


@main.group(invoke_without_command=True)
@click.pass_context
def tasks(ctx):
    """Manage the task list."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(tasks_list)


@tasks.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks_list(as_json: bool = False):
    """List tasks, open ones first."""
    task_store, _ = _open()

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in task_store.tasks], indent=2))
        return

    if not task_store.tasks:
        click.echo("No tasks.")
        return

    open_tasks, done_tasks = partition_tasks(task_store.tasks)
    for task in [*open_tasks, *done_tasks]:
        mark = "x" if task.is_done else ("~" if task.status == TaskStatus.IN_PROGRESS else " ")
        due = f" (due {task.due_date:%Y-%m-%d %H:%M})" if task.due_date else ""
        done_count, total = task.subtask_progress()
        progress = f" [{done_count}/{total}]" if total else ""
        click.echo(f"[{mark}] {task.title}{due}{progress}  {task.priority.value}  {task.id}")
        for st in task.subtasks:
            click.echo(f"      [{'x' if st.completed else ' '}] {st.title}  {st.id}")

    click.echo(f"\n{task_store.remaining_count()} left")


@tasks.command("add")
@click.argument("title")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    default=Priority.MEDIUM.value,
    show_default=True,
)
@click.option("--description", default=None, help="Longer notes")
def tasks_add(title: str, priority: str, description: str | None):
    """Add a task."""
    if not title.strip():
        _fail("title must not be empty")
    task_store, _ = _open()
    task = task_store.add_task(title.strip(), Priority(priority), description=description)
    click.echo(f"Added {task.id}")


@tasks.command("done")
@click.argument("task_id")
def tasks_done(task_id: str):
    """Toggle a task between done and todo."""
    task_store, _ = _open()
    if task_store.get(task_id) is None:
        _fail(f"task {task_id} not found")
    task_store.toggle_task_completion(task_id)
    click.echo(f"{task_id}: {task_store.get(task_id).status.value}")


@tasks.command("status")
@click.argument("task_id")
@click.argument("status", type=click.Choice([s.value for s in TaskStatus]))
def tasks_status(task_id: str, status: str):
    """Set a task's status directly."""
    task_store, _ = _open()
    if task_store.get(task_id) is None:
        _fail(f"task {task_id} not found")
    task_store.update_task(task_id, status=TaskStatus(status))
    click.echo(f"{task_id}: {status}")


@tasks.command("rm")
@click.argument("task_id")
def tasks_rm(task_id: str):
    """Delete a task."""
    task_store, _ = _open()
    task_store.delete_task(task_id)
    click.echo(f"Deleted {task_id}")


@tasks.command("subtask")
@click.argument("task_id")
@click.argument("title")
def tasks_subtask(task_id: str, title: str):
    """Add a subtask."""
    if not title.strip():
        _fail("title must not be empty")
    task_store, _ = _open()
    if task_store.get(task_id) is None:
        _fail(f"task {task_id} not found")
    task_store.add_subtask(task_id, title.strip())
    click.echo(f"Added {task_store.get(task_id).subtasks[-1].id}")


@tasks.command("check")
@click.argument("task_id")
@click.argument("subtask_id")
def tasks_check(task_id: str, subtask_id: str):
    """Toggle a subtask."""
    task_store, _ = _open()
    task_store.toggle_subtask(task_id, subtask_id)


@tasks.command("move")
@click.argument("active_id")
@click.argument("over_id")
def tasks_move(active_id: str, over_id: str):
    """Move an open task to another open task's position."""
    task_store, _ = _open()
    task_store.move_task(active_id, over_id)


# ============== Calendar ==============


@main.group(invoke_without_command=True)
@click.pass_context
def calendar(ctx):
    """Show and edit calendar events."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(calendar_day)


@calendar.command("day")
@click.option("--date", "-d", "target_date", default=None,
              help="Date to view (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_day(target_date: str | None = None, as_json: bool = False):
    """Show a day's agenda."""
    day = _parse_date(target_date)
    _, event_store = _open()
    events = events_on_day(event_store.events, day)

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in events], indent=2))
        return

    click.echo(f"### {day.strftime('%A, %B %d')}")
    if not events:
        click.echo("No events.")
        return
    for event in events:
        click.echo(f"  {event.format_time():11} {event.title}  ({event.type.value}) {event.id}")


@calendar.command("month")
@click.option("--month", "-m", "target_month", default=None,
              help="Month to view (YYYY-MM), defaults to this month")
def calendar_month(target_month: str | None):
    """Show which days of a month have events."""
    if target_month:
        first = _parse_date(f"{target_month}-01")
    else:
        first = date.today().replace(day=1)
    _, event_store = _open()
    markers = event_store.month_markers(first.year, first.month)

    click.echo(f"### {first.strftime('%B %Y')}")
    if not markers:
        click.echo("No events.")
        return
    for day, events in markers.items():
        titles = ", ".join(e.title for e in events)
        click.echo(f"  {day.day:2} {'•' * len(events)} {titles}")


@calendar.command("add")
@click.argument("title")
@click.option("--date", "-d", "target_date", default=None, help="YYYY-MM-DD, defaults to today")
@click.option("--start", default="09:00", show_default=True)
@click.option("--end", default="10:00", show_default=True)
@click.option(
    "--type",
    "event_type",
    type=click.Choice([t.value for t in EventType if t != EventType.TASK_BLOCK]),
    default=EventType.NORMAL.value,
    show_default=True,
)
def calendar_add(title: str, target_date: str | None, start: str, end: str, event_type: str):
    """Add an event."""
    if not title.strip():
        _fail("title must not be empty")
    day = _parse_date(target_date)
    start_t, end_t = _parse_time(start), _parse_time(end)
    _, event_store = _open()
    added = create_event(event_store, title.strip(), day, start_t, end_t, EventType(event_type))
    click.echo(f"Added {added[0].id}" + (f" (+{len(added) - 1} yearly)" if len(added) > 1 else ""))


@calendar.command("schedule")
@click.argument("task_id")
@click.option("--date", "-d", "target_date", default=None, help="YYYY-MM-DD, defaults to today")
@click.option("--start", default="09:00", show_default=True)
@click.option("--end", default="10:00", show_default=True)
def calendar_schedule(task_id: str, target_date: str | None, start: str, end: str):
    """Block out time for a task and set its due date."""
    day = _parse_date(target_date)
    start_t, end_t = _parse_time(start), _parse_time(end)
    task_store, event_store = _open()
    event = schedule_task(task_store, event_store, task_id, day, start_t, end_t)
    if event is None:
        _fail(f"task {task_id} not found")
    click.echo(f"Scheduled {event.title} at {event.start_date:%Y-%m-%d %H:%M}")


@calendar.command("rm")
@click.argument("event_id")
def calendar_rm(event_id: str):
    """Delete an event (and the rest of its series)."""
    _, event_store = _open()
    before = len(event_store.events)
    event_store.delete_event(event_id)
    click.echo(f"Deleted {before - len(event_store.events)} event(s)")


@calendar.command("cleanup")
def calendar_cleanup():
    """Drop past events and top up yearly series."""
    _, event_store = _open(run_startup=False)
    removed = event_store.cleanup_past_events()
    event_store.generate_recurring_events()
    click.echo(f"Removed {removed} event(s)")


if __name__ == "__main__":
    main()
