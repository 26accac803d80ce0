# tests/test_task_store.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_planner.core.errors import TaskNotFoundError, TaskValidationError
from task_planner.tasks.task_store import TaskStore


def test_create_applies_defaults_and_assigns_id(task_store: TaskStore) -> None:
    task = task_store.create({"name": "  Buy milk "})

    assert task.id
    assert task.name == "Buy milk"
    assert task.priority == 2
    assert task.completed is False
    assert task.deleted is False

    stored = task_store.get_task(task.id)
    assert stored is not None
    assert stored.name == "Buy milk"
    assert task_store.count_tasks() == 1


def test_update_complete_and_soft_delete(task_store: TaskStore) -> None:
    task = task_store.create({"name": "Do taxes", "priority": 1})

    updated = task_store.update(task.id, {"name": "Do taxes 2025", "priority": 3})
    assert updated.name == "Do taxes 2025"
    assert updated.priority == 3

    task_store.complete(task.id)
    task_store.soft_delete(task.id)

    stored = task_store.get_task(task.id)
    assert stored is not None
    assert stored.completed is True
    assert stored.deleted is True
    # soft delete keeps the row
    assert task_store.count_tasks() == 1


def test_update_unknown_id_raises(task_store: TaskStore) -> None:
    with pytest.raises(TaskNotFoundError):
        task_store.update("nope", {"completed": True})


@pytest.mark.parametrize(
    "fields",
    [
        {"name": ""},
        {"priority": "high"},
        {"priority": True},
        {"priority": 2**63},
        {"completed": "yes"},
        {"colour": "red"},
        {},
    ],
)
def test_update_rejects_bad_fields(task_store: TaskStore, fields: dict) -> None:
    task = task_store.create({"name": "Gym"})
    with pytest.raises(TaskValidationError):
        task_store.update(task.id, fields)


def test_create_requires_name(task_store: TaskStore) -> None:
    with pytest.raises(TaskValidationError):
        task_store.create({"priority": 1})


def test_list_filters(task_store: TaskStore) -> None:
    a = task_store.create({"name": "a", "priority": 3})
    b = task_store.create({"name": "b", "priority": 1})
    c = task_store.create({"name": "c"})
    task_store.complete(a.id)
    task_store.soft_delete(c.id)

    assert [t.name for t in task_store.list_tasks()] == ["b", "a"]
    assert [t.name for t in task_store.list_tasks(only_pending=True)] == ["b"]
    assert {t.id for t in task_store.list_tasks(include_deleted=True)} == {a.id, b.id, c.id}


def test_purge_completed_only_then_all(task_store: TaskStore) -> None:
    done = task_store.create({"name": "done"})
    task_store.create({"name": "open"})
    task_store.complete(done.id)

    assert task_store.purge(completed_only=True) == 1
    assert task_store.get_task(done.id) is None
    assert task_store.count_tasks() == 1

    assert task_store.purge() == 1
    assert task_store.count_tasks() == 0


def test_store_reopens_existing_db(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "tasks.sqlite3"
    first = TaskStore(db)
    task = first.create({"name": "persisted"})

    second = TaskStore(db)
    stored = second.get_task(task.id)
    assert stored is not None
    assert stored.name == "persisted"
