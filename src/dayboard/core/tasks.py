"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Callable

from .timestamps import parse_timestamp


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


@dataclass
class SubTask:
    """A checklist item owned by a task."""

    id: str
    title: str
    completed: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: dict) -> "SubTask":
        return cls(
            id=data["id"],
            title=data["title"],
            completed=bool(data.get("completed", False)),
        )


@dataclass
class Task:
    """A task with optional due date and nested subtasks."""

    id: str
    title: str
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    description: str | None = None
    due_date: datetime | None = None
    subtasks: list[SubTask] = field(default_factory=list)
    created_at: int = 0  # epoch milliseconds

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    def subtask_progress(self) -> tuple[int, int]:
        """(completed, total) subtask counts."""
        return sum(1 for st in self.subtasks if st.completed), len(self.subtasks)

    def to_dict(self) -> dict:
        """Serialize using the persisted camelCase field names."""
        data = {
            "id": self.id,
            "title": self.title,
            "priority": self.priority.value,
            "status": self.status.value,
            "subTasks": [st.to_dict() for st in self.subtasks],
            "createdAt": self.created_at,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.due_date is not None:
            data["dueDate"] = self.due_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from its persisted form, reviving dueDate."""
        due = None
        if data.get("dueDate"):
            due = parse_timestamp(data["dueDate"])
        return cls(
            id=data["id"],
            title=data["title"],
            priority=Priority(data.get("priority", "medium")),
            status=TaskStatus(data.get("status", "todo")),
            description=data.get("description"),
            due_date=due,
            subtasks=[SubTask.from_dict(st) for st in data.get("subTasks", [])],
            created_at=int(data.get("createdAt", 0)),
        )


# Fields update_task is not allowed to overwrite
_PROTECTED_FIELDS = {"id", "subtasks", "created_at"}
_UPDATABLE_FIELDS = {f.name for f in fields(Task)} - _PROTECTED_FIELDS


def _map_task(tasks: list[Task], task_id: str, fn: Callable[[Task], Task]) -> list[Task]:
    if find_task(tasks, task_id) is None:
        return tasks
    return [fn(t) if t.id == task_id else t for t in tasks]


def add_task(
    tasks: list[Task],
    task_id: str,
    title: str,
    created_at: int,
    priority: Priority = Priority.MEDIUM,
    status: TaskStatus = TaskStatus.TODO,
    description: str | None = None,
    due_date: datetime | None = None,
) -> list[Task]:
    """Append a new task with no subtasks."""
    task = Task(
        id=task_id,
        title=title,
        priority=priority,
        status=status,
        description=description,
        due_date=due_date,
        created_at=created_at,
    )
    return [*tasks, task]


def delete_task(tasks: list[Task], task_id: str) -> list[Task]:
    if find_task(tasks, task_id) is None:
        return tasks
    return [t for t in tasks if t.id != task_id]


def update_task(tasks: list[Task], task_id: str, **updates) -> list[Task]:
    """
    Merge the given fields into the matching task.

    Status and priority accept their enum values as strings. Raises
    TypeError for field names that are not updatable and ValueError for
    unknown status or priority values; a missing task_id is a no-op.
    """
    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"Cannot update task fields: {', '.join(sorted(unknown))}")
    if "status" in updates:
        updates["status"] = TaskStatus(updates["status"])
    if "priority" in updates:
        updates["priority"] = Priority(updates["priority"])
    return _map_task(tasks, task_id, lambda t: replace(t, **updates))


def toggle_task_completion(tasks: list[Task], task_id: str) -> list[Task]:
    """
    Flip between done and todo.

    Anything that is not done becomes done, and done always becomes todo,
    so an in-progress task toggled twice ends up as todo.
    """

    def toggle(t: Task) -> Task:
        new_status = TaskStatus.TODO if t.status == TaskStatus.DONE else TaskStatus.DONE
        return replace(t, status=new_status)

    return _map_task(tasks, task_id, toggle)


def add_subtask(tasks: list[Task], task_id: str, subtask_id: str, title: str) -> list[Task]:
    return _map_task(
        tasks,
        task_id,
        lambda t: replace(t, subtasks=[*t.subtasks, SubTask(id=subtask_id, title=title)]),
    )


def toggle_subtask(tasks: list[Task], task_id: str, subtask_id: str) -> list[Task]:
    def toggle(t: Task) -> Task:
        return replace(
            t,
            subtasks=[
                replace(st, completed=not st.completed) if st.id == subtask_id else st
                for st in t.subtasks
            ],
        )

    return _map_task(tasks, task_id, toggle)


def reorder_tasks(tasks: list[Task], new_order: list[Task]) -> list[Task]:
    """Replace the collection with new_order verbatim."""
    return list(new_order)


def partition_tasks(tasks: list[Task]) -> tuple[list[Task], list[Task]]:
    """
    Split tasks into (open, done), preserving relative order.

    Returns: (open_tasks, done_tasks)
    Pure function - no I/O.
    """
    open_tasks = [t for t in tasks if not t.is_done]
    done_tasks = [t for t in tasks if t.is_done]
    return open_tasks, done_tasks


def move_task(tasks: list[Task], active_id: str, over_id: str) -> list[Task]:
    """
    Reconcile a drag of active_id onto over_id within the open partition.

    The result is [*open, *done]: open tasks in their new order followed by
    done tasks in their existing order. Returns the input unchanged when
    either id is not an open task or the ids are equal.
    """
    if active_id == over_id:
        return tasks

    open_tasks, done_tasks = partition_tasks(tasks)
    ids = [t.id for t in open_tasks]
    if active_id not in ids or over_id not in ids:
        return tasks

    old_index = ids.index(active_id)
    new_index = ids.index(over_id)
    moved = open_tasks.pop(old_index)
    open_tasks.insert(new_index, moved)
    return reorder_tasks(tasks, [*open_tasks, *done_tasks])


def remaining_count(tasks: list[Task]) -> int:
    """Number of tasks that are not done."""
    return sum(1 for t in tasks if not t.is_done)


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    return next((t for t in tasks if t.id == task_id), None)
