# src/task_planner/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, TypedDict

DEFAULT_PRIORITY: Final[int] = 2

# SQLite INTEGER is a signed 64-bit value.
PRIORITY_MIN: Final[int] = -(2**63)
PRIORITY_MAX: Final[int] = 2**63 - 1

# Whitelist of fields callers may set on create/update.
TASK_INPUT_FIELDS: Final[frozenset[str]] = frozenset({"name", "priority", "completed", "deleted"})


class TaskInput(TypedDict, total=False):
    name: str
    priority: int
    completed: bool
    deleted: bool


@dataclass(slots=True)
class Task:
    id: str
    name: str
    priority: int = DEFAULT_PRIORITY
    completed: bool = False
    deleted: bool = False
    created_at: float = 0.0
    updated_at: float = 0.0

    def to_prompt_dict(self) -> dict[str, Any]:
        """The subset of fields shown to the assistant."""
        return {
            "id": self.id,
            "name": self.name,
            "priority": self.priority,
            "completed": self.completed,
            "deleted": self.deleted,
        }
