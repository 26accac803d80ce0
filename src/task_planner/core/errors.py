# src/task_planner/core/errors.py

"""
Error taxonomy.

Store, assistant and decode failures are raised as typed exceptions and
propagate to the orchestrator, which turns them into a TurnResult status.
Only per-call decode/dispatch errors are isolated so the rest of a batch runs.
"""

from __future__ import annotations

from typing import Any


class TaskPlannerError(Exception):
    """Base class for every error raised by task_planner."""


# ---- task store ----


class TaskStoreError(TaskPlannerError):
    """A task store operation failed."""


class TaskNotFoundError(TaskStoreError, LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskValidationError(TaskStoreError, ValueError):
    """Input rejected by the store (empty name, unknown field, bad type)."""


# ---- remote assistant ----


class ConnectivityError(TaskPlannerError):
    """
    Network/auth failure talking to the assistant service.

    retryable=True means the same call may succeed later (timeouts, rate limits, 5xx).
    """

    def __init__(self, message: str, *, retryable: bool) -> None:
        super().__init__(message)
        self.retryable = retryable


class RunFailed(TaskPlannerError):
    """A run reached a failure-class terminal status (failed/cancelled/expired/incomplete)."""

    def __init__(self, run_id: str, status: str, detail: str | None = None) -> None:
        msg = f"Run {run_id} ended with status {status}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.run_id = run_id
        self.status = status
        self.detail = detail


class PollTimeoutError(TaskPlannerError, TimeoutError):
    def __init__(self, run_id: str, attempts: int) -> None:
        super().__init__(f"Run {run_id} not terminal after {attempts} polls")
        self.run_id = run_id
        self.attempts = attempts


# ---- actions ----


class DecodeError(TaskPlannerError):
    """A single tool call could not be turned into a Command."""

    def __init__(self, call_id: str, name: str, reason: str) -> None:
        super().__init__(f"Cannot decode tool call {call_id} ({name}): {reason}")
        self.call_id = call_id
        self.name = name
        self.reason = reason


class UnknownActionError(DecodeError):
    def __init__(self, call_id: str, name: str) -> None:
        super().__init__(call_id, name, "unknown function name")


class DispatchError(TaskPlannerError):
    """A decoded command failed against the task store."""

    def __init__(self, command: Any, cause: Exception) -> None:
        super().__init__(f"{type(command).__name__} failed: {cause}")
        self.command = command
        self.cause = cause
