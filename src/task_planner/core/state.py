# src/task_planner/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_store import TaskStore
from .ports import AssistantService


@dataclass
class AppState:
    """Everything a turn needs, wired once by cli/bootstrap.py."""

    settings: Any
    task_store: TaskStore
    assistant: AssistantService
    offline: bool = False

    # Filled in by provisioning (one assistant + one thread per invocation).
    assistant_id: str | None = None
    thread_id: str | None = None
