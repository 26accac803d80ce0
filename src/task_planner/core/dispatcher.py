# src/task_planner/core/dispatcher.py

from __future__ import annotations

"""
Command dispatch.

Each Command maps to exactly one TaskRepo call. Commands run strictly one at
a time, in the order the run reported them. A failing command is logged and
reported in its DispatchOutcome; the rest of the batch still runs.
Nothing is retried: retrying a create would duplicate the task.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .actions import AddTask, Command, CompleteTask, RemoveTask, UpdateTask
from .errors import DispatchError, TaskStoreError
from .ports import TaskRepo

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DispatchOutcome:
    command: Any
    task_id: str | None = None
    error: DispatchError | None = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped

    def as_tool_output(self) -> dict[str, Any]:
        """Short JSON-able summary handed back to the assistant."""
        if self.skipped:
            return {"ok": False, "task_id": self.task_id, "error": "unsupported command"}
        return {
            "ok": self.error is None,
            "task_id": self.task_id,
            "error": str(self.error.cause) if self.error is not None else None,
        }


def _add(store: TaskRepo, cmd: AddTask) -> str | None:
    task = store.create(cmd.task_input())
    return getattr(task, "id", None)


def _update(store: TaskRepo, cmd: UpdateTask) -> str | None:
    store.update(cmd.id, dict(cmd.fields))
    return cmd.id


def _complete(store: TaskRepo, cmd: CompleteTask) -> str | None:
    store.update(cmd.id, {"completed": True})
    return cmd.id


def _remove(store: TaskRepo, cmd: RemoveTask) -> str | None:
    # Soft delete only.
    store.update(cmd.id, {"deleted": True})
    return cmd.id


HANDLERS: dict[type, Callable[[TaskRepo, Any], str | None]] = {
    AddTask: _add,
    UpdateTask: _update,
    CompleteTask: _complete,
    RemoveTask: _remove,
}


class CommandDispatcher:
    def __init__(self, task_store: TaskRepo) -> None:
        self._store = task_store

    def dispatch(self, command: Command) -> DispatchOutcome:
        handler = HANDLERS.get(type(command))
        if handler is None:
            logger.warning("Unknown command kind %s; ignoring", type(command).__name__)
            return DispatchOutcome(command=command, skipped=True)

        try:
            task_id = handler(self._store, command)
        except TaskStoreError as e:
            err = DispatchError(command, e)
            logger.warning("%s", err)
            return DispatchOutcome(command=command, task_id=getattr(command, "id", None), error=err)

        logger.info("Dispatched %s task_id=%s", type(command).__name__, task_id)
        return DispatchOutcome(command=command, task_id=task_id)

    def dispatch_all(self, commands: Iterable[Command]) -> list[DispatchOutcome]:
        return [self.dispatch(cmd) for cmd in commands]
