# src/task_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols and small value types instead of concrete
implementations. The OpenAI SDK objects never leak past llm/assistant.py,
which keeps the assistant swappable and makes testing easier.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol


class RunStatus(StrEnum):
    """Remote run lifecycle status."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    CANCELLING = "cancelling"
    REQUIRES_ACTION = "requires_action"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    INCOMPLETE = "incomplete"
    UNKNOWN = "unknown"

    @classmethod
    def from_api(cls, raw: str | None) -> RunStatus:
        if not raw:
            return cls.UNKNOWN
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_failure(self) -> bool:
        return self in _FAILURE_STATUSES

    @property
    def is_terminal(self) -> bool:
        """Terminal for polling purposes (requires_action included)."""
        return self in (RunStatus.REQUIRES_ACTION, RunStatus.COMPLETED) or self.is_failure


_FAILURE_STATUSES = frozenset(
    {RunStatus.FAILED, RunStatus.CANCELLED, RunStatus.EXPIRED, RunStatus.INCOMPLETE}
)


@dataclass(slots=True, frozen=True)
class ToolCall:
    """A function call requested by the assistant: {id, function: {name, arguments}}."""

    id: str
    name: str
    arguments: str


@dataclass(slots=True, frozen=True)
class RunSnapshot:
    id: str
    status: RunStatus
    tool_calls: tuple[ToolCall, ...] = field(default_factory=tuple)
    last_error: str | None = None


@dataclass(slots=True, frozen=True)
class ToolOutput:
    tool_call_id: str
    output: str


class TaskRepo(Protocol):
    """What the core needs from the task store."""

    def create(self, task_input: Mapping[str, Any]) -> Any: ...
    def update(self, task_id: str, fields: Mapping[str, Any]) -> Any: ...
    def list_tasks(self, *, only_pending: bool = False, include_deleted: bool = False) -> list[Any]: ...
    def purge(self, *, completed_only: bool = False) -> int: ...


class AssistantService(Protocol):
    """
    Hosted assistant (threads + runs) as seen by the core.

    Implementations raise ConnectivityError for transport/auth failures.
    """

    async def create_assistant(
            self,
            *,
            name: str,
            instructions: str,
            model: str,
            tools: Sequence[Mapping[str, Any]],
    ) -> str: ...

    async def create_thread(self) -> str: ...

    async def add_user_message(self, thread_id: str, content: str) -> str: ...

    async def create_run(self, thread_id: str, *, assistant_id: str, instructions: str) -> RunSnapshot: ...

    async def retrieve_run(self, thread_id: str, run_id: str) -> RunSnapshot: ...

    async def submit_tool_outputs(
            self,
            thread_id: str,
            run_id: str,
            outputs: Sequence[ToolOutput],
    ) -> RunSnapshot: ...
