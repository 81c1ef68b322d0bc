"""Tests for core task logic."""

from datetime import datetime

import pytest

from dayboard.core.tasks import (
    Priority,
    SubTask,
    Task,
    TaskStatus,
    add_subtask,
    add_task,
    delete_task,
    move_task,
    partition_tasks,
    remaining_count,
    reorder_tasks,
    toggle_subtask,
    toggle_task_completion,
    update_task,
)


@pytest.fixture
def sample_tasks():
    return [
        Task(id="a", title="Write report", status=TaskStatus.TODO),
        Task(id="b", title="Review PR", status=TaskStatus.DONE),
        Task(id="c", title="Plan sprint", status=TaskStatus.IN_PROGRESS),
        Task(id="d", title="Book flights", status=TaskStatus.TODO),
        Task(id="e", title="Pay rent", status=TaskStatus.DONE),
    ]


class TestAddTask:
    def test_appends_with_defaults(self):
        tasks = add_task([], "t1", "Buy milk", created_at=1717243200000)

        assert len(tasks) == 1
        task = tasks[0]
        assert task.id == "t1"
        assert task.title == "Buy milk"
        assert task.priority == Priority.MEDIUM
        assert task.status == TaskStatus.TODO
        assert task.subtasks == []
        assert task.created_at == 1717243200000

    def test_keeps_existing_order(self, sample_tasks):
        tasks = add_task(sample_tasks, "z", "New", created_at=0, priority=Priority.HIGH)
        assert [t.id for t in tasks] == ["a", "b", "c", "d", "e", "z"]
        assert tasks[-1].priority == Priority.HIGH

    def test_does_not_mutate_input(self, sample_tasks):
        add_task(sample_tasks, "z", "New", created_at=0)
        assert len(sample_tasks) == 5


class TestDeleteTask:
    def test_removes_matching(self, sample_tasks):
        tasks = delete_task(sample_tasks, "c")
        assert [t.id for t in tasks] == ["a", "b", "d", "e"]

    def test_missing_id_is_noop(self, sample_tasks):
        tasks = delete_task(sample_tasks, "nope")
        assert tasks is sample_tasks


class TestUpdateTask:
    def test_merges_fields(self, sample_tasks):
        due = datetime(2024, 6, 3, 9, 0)
        tasks = update_task(sample_tasks, "a", due_date=due, priority=Priority.HIGH)

        assert tasks[0].due_date == due
        assert tasks[0].priority == Priority.HIGH
        assert tasks[0].title == "Write report"

    def test_missing_id_is_noop(self, sample_tasks):
        tasks = update_task(sample_tasks, "nope", title="x")
        assert tasks is sample_tasks

    def test_status_and_priority_accept_strings(self, sample_tasks):
        tasks = update_task(sample_tasks, "a", status="done", priority="high")

        assert tasks[0].status is TaskStatus.DONE
        assert tasks[0].priority is Priority.HIGH

    def test_rejects_unknown_status(self, sample_tasks):
        with pytest.raises(ValueError, match="blocked"):
            update_task(sample_tasks, "a", status="blocked")

    def test_rejects_unknown_fields(self, sample_tasks):
        with pytest.raises(TypeError, match="colour"):
            update_task(sample_tasks, "a", colour="red")

    def test_rejects_protected_fields(self, sample_tasks):
        with pytest.raises(TypeError, match="id"):
            update_task(sample_tasks, "a", id="other")


class TestToggleTaskCompletion:
    def test_todo_becomes_done(self, sample_tasks):
        tasks = toggle_task_completion(sample_tasks, "a")
        assert tasks[0].status == TaskStatus.DONE

    def test_done_becomes_todo(self, sample_tasks):
        tasks = toggle_task_completion(sample_tasks, "b")
        assert tasks[1].status == TaskStatus.TODO

    def test_in_progress_becomes_done(self, sample_tasks):
        tasks = toggle_task_completion(sample_tasks, "c")
        assert tasks[2].status == TaskStatus.DONE

    @pytest.mark.parametrize("status", [TaskStatus.TODO, TaskStatus.IN_PROGRESS])
    def test_double_toggle_lands_on_todo(self, status):
        tasks = [Task(id="x", title="X", status=status)]
        tasks = toggle_task_completion(toggle_task_completion(tasks, "x"), "x")
        assert tasks[0].status == TaskStatus.TODO

    def test_other_tasks_untouched(self, sample_tasks):
        tasks = toggle_task_completion(sample_tasks, "a")
        assert tasks[1:] == sample_tasks[1:]

    def test_missing_id_returns_input(self, sample_tasks):
        assert toggle_task_completion(sample_tasks, "nope") is sample_tasks


class TestSubTasks:
    def test_add_subtask_appends_in_order(self, sample_tasks):
        tasks = add_subtask(sample_tasks, "a", "s1", "Outline")
        tasks = add_subtask(tasks, "a", "s2", "Draft")

        assert tasks[0].subtasks == [
            SubTask(id="s1", title="Outline", completed=False),
            SubTask(id="s2", title="Draft", completed=False),
        ]

    def test_add_subtask_missing_task_is_noop(self, sample_tasks):
        tasks = add_subtask(sample_tasks, "nope", "s1", "Outline")
        assert tasks is sample_tasks

    def test_toggle_subtask(self, sample_tasks):
        tasks = add_subtask(sample_tasks, "a", "s1", "Outline")
        tasks = toggle_subtask(tasks, "a", "s1")
        assert tasks[0].subtasks[0].completed is True

        tasks = toggle_subtask(tasks, "a", "s1")
        assert tasks[0].subtasks[0].completed is False

    def test_toggle_unknown_subtask_is_noop(self, sample_tasks):
        tasks = add_subtask(sample_tasks, "a", "s1", "Outline")
        tasks = toggle_subtask(tasks, "a", "s9")
        assert tasks[0].subtasks[0].completed is False

    def test_subtask_progress(self):
        task = Task(
            id="x",
            title="X",
            subtasks=[SubTask("1", "one", True), SubTask("2", "two"), SubTask("3", "three", True)],
        )
        assert task.subtask_progress() == (2, 3)


class TestReorder:
    def test_reorder_is_verbatim(self, sample_tasks):
        new_order = list(reversed(sample_tasks))
        tasks = reorder_tasks(sample_tasks, new_order)
        assert tasks == new_order

    def test_reorder_keeps_same_ids(self, sample_tasks):
        new_order = [sample_tasks[i] for i in (3, 0, 2, 4, 1)]
        tasks = reorder_tasks(sample_tasks, new_order)
        assert {t.id for t in tasks} == {t.id for t in sample_tasks}
        assert [t.id for t in tasks] == ["d", "a", "c", "e", "b"]

    def test_partition_preserves_order(self, sample_tasks):
        open_tasks, done_tasks = partition_tasks(sample_tasks)
        assert [t.id for t in open_tasks] == ["a", "c", "d"]
        assert [t.id for t in done_tasks] == ["b", "e"]

    def test_move_task_down(self, sample_tasks):
        tasks = move_task(sample_tasks, "a", "d")
        assert [t.id for t in tasks] == ["c", "d", "a", "b", "e"]

    def test_move_task_up(self, sample_tasks):
        tasks = move_task(sample_tasks, "d", "a")
        assert [t.id for t in tasks] == ["d", "a", "c", "b", "e"]

    def test_move_task_is_permutation(self, sample_tasks):
        tasks = move_task(sample_tasks, "c", "a")
        assert sorted(t.id for t in tasks) == sorted(t.id for t in sample_tasks)

    def test_move_onto_itself_is_noop(self, sample_tasks):
        assert move_task(sample_tasks, "a", "a") is sample_tasks

    def test_move_done_task_is_noop(self, sample_tasks):
        assert move_task(sample_tasks, "b", "a") is sample_tasks

    def test_move_unknown_is_noop(self, sample_tasks):
        assert move_task(sample_tasks, "a", "nope") is sample_tasks

    def test_remaining_count(self, sample_tasks):
        assert remaining_count(sample_tasks) == 3


class TestSerialization:
    def test_to_dict_uses_camel_case(self):
        task = Task(
            id="a",
            title="Write report",
            due_date=datetime(2024, 6, 3, 9, 30),
            subtasks=[SubTask("s1", "Outline")],
            created_at=42,
        )
        data = task.to_dict()

        assert data["dueDate"] == "2024-06-03T09:30:00"
        assert data["subTasks"] == [{"id": "s1", "title": "Outline", "completed": False}]
        assert data["createdAt"] == 42
        assert data["status"] == "todo"
        assert "description" not in data

    def test_from_dict_revives_due_date(self):
        task = Task.from_dict(
            {
                "id": "a",
                "title": "Write report",
                "priority": "high",
                "status": "in-progress",
                "dueDate": "2024-06-03T09:30:00.000",
                "subTasks": [],
                "createdAt": 42,
            }
        )
        assert task.due_date == datetime(2024, 6, 3, 9, 30)
        assert task.priority == Priority.HIGH
        assert task.status == TaskStatus.IN_PROGRESS

    def test_from_dict_null_due_date(self):
        task = Task.from_dict({"id": "a", "title": "T", "dueDate": None})
        assert task.due_date is None
        assert task.subtasks == []

    def test_round_trip(self):
        task = Task(
            id="a",
            title="Write report",
            priority=Priority.LOW,
            status=TaskStatus.DONE,
            description="Quarterly numbers",
            due_date=datetime(2024, 6, 3, 9, 30),
            subtasks=[SubTask("s1", "Outline", True)],
            created_at=1717243200000,
        )
        assert Task.from_dict(task.to_dict()) == task
