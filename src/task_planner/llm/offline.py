# src/task_planner/llm/offline.py

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..core.ports import RunSnapshot, RunStatus, ToolOutput

logger = logging.getLogger(__name__)


class OfflineAssistantService:
    """
    Offline deterministic assistant used when no OpenAI API key is configured.

    Behavior:
    - assistants/threads/messages get local ids
    - every run completes immediately without tool calls,
      so a turn ends as "no_action" and the task store is left untouched
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.messages: list[tuple[str, str]] = []

    def _next(self, prefix: str) -> str:
        return f"{prefix}_offline_{next(self._ids)}"

    async def create_assistant(
            self,
            *,
            name: str,
            instructions: str,
            model: str,
            tools: Sequence[Mapping[str, Any]],
    ) -> str:
        logger.warning(
            "Offline demo mode: no OpenAI API key configured. "
            "Set TASK_PLANNER_OPENAI_API_KEY (or OPENAI_API_KEY) to enable real responses."
        )
        return self._next("asst")

    async def create_thread(self) -> str:
        return self._next("thread")

    async def add_user_message(self, thread_id: str, content: str) -> str:
        self.messages.append((thread_id, content))
        return self._next("msg")

    async def create_run(self, thread_id: str, *, assistant_id: str, instructions: str) -> RunSnapshot:
        return RunSnapshot(id=self._next("run"), status=RunStatus.COMPLETED)

    async def retrieve_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        return RunSnapshot(id=run_id, status=RunStatus.COMPLETED)

    async def submit_tool_outputs(
            self,
            thread_id: str,
            run_id: str,
            outputs: Sequence[ToolOutput],
    ) -> RunSnapshot:
        return RunSnapshot(id=run_id, status=RunStatus.COMPLETED)
