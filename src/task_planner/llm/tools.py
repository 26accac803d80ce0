# src/task_planner/llm/tools.py

"""
Function descriptors the assistant may call.

Every nested type is expanded to primitives: the assistant never sees a
reference to a composite record type.
"""

from __future__ import annotations

from typing import Any, Final

_NAME = {"type": "string", "description": "The name of the task."}
_PRIORITY = {
    "type": "integer",
    "description": "The priority of the task, 1 (top) to 3 (bottom). Lower numbers are more urgent.",
}
_COMPLETED = {"type": "boolean", "description": "Whether the task is marked as completed."}
_DELETED = {"type": "boolean", "description": "Whether the task is marked as deleted."}
_ID = {"type": "string", "description": "The ID of the task, as given in the task list."}


def _function(name: str, description: str, properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


TASK_TOOLS: Final[list[dict[str, Any]]] = [
    _function(
        "addTask",
        "Adds a new task to the database.",
        {"name": _NAME, "priority": _PRIORITY, "completed": _COMPLETED, "deleted": _DELETED},
        ["name"],
    ),
    _function(
        "updateTask",
        "Updates a task in the database. Only pass the fields that change.",
        {"id": _ID, "name": _NAME, "priority": _PRIORITY, "completed": _COMPLETED, "deleted": _DELETED},
        ["id"],
    ),
    _function(
        "completeTask",
        "Marks a task as completed in the database.",
        {"id": _ID},
        ["id"],
    ),
    _function(
        "removeTask",
        "Soft deletes a task in the database.",
        {"id": _ID},
        ["id"],
    ),
]


def tool_names() -> list[str]:
    return [t["function"]["name"] for t in TASK_TOOLS]
