# src/task_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (task store + assistant),
- provisions the assistant and the per-invocation thread,
- builds the Orchestrator for a turn.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.orchestrator import Orchestrator
from ..core.persona import MISSION_STATEMENT
from ..core.poller import RunPoller
from ..core.ports import AssistantService
from ..core.state import AppState
from ..llm.assistant import OpenAIAssistantService
from ..llm.offline import OfflineAssistantService
from ..llm.tools import TASK_TOOLS
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, assistant: AssistantService | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    settings and assistant are injectable so tests never read global config
    or reach the network. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    offline = False
    if assistant is None:
        try:
            assistant = OpenAIAssistantService(settings)
        except RuntimeError as e:
            logger.warning("%s Falling back to offline mode.", e)
            assistant = OfflineAssistantService()
            offline = True

    return AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_db_path),
        assistant=assistant,
        offline=offline,
    )


async def provision(state: AppState) -> AppState:
    """
    Make sure the state has an assistant and a thread.

    An existing assistant is reused when TASK_PLANNER_ASSISTANT_ID is set;
    the thread is always new (no persistence across invocations).
    """
    settings = state.settings

    if state.assistant_id is None:
        configured = getattr(settings, "assistant_id", None)
        if configured and not state.offline:
            logger.info("Reusing assistant %s", configured)
            state.assistant_id = configured
        else:
            state.assistant_id = await state.assistant.create_assistant(
                name=getattr(settings, "assistant_name", "Task Planner"),
                instructions=MISSION_STATEMENT,
                model=getattr(settings, "assistant_model", "gpt-4-1106-preview"),
                tools=TASK_TOOLS,
            )

    if state.thread_id is None:
        state.thread_id = await state.assistant.create_thread()

    return state


def build_orchestrator(state: AppState, **poller_kwargs) -> Orchestrator:
    if state.assistant_id is None or state.thread_id is None:
        raise RuntimeError("State is not provisioned; call provision() first.")

    return Orchestrator(
        assistant=state.assistant,
        task_store=state.task_store,
        poller=RunPoller.from_settings(state.assistant, state.settings, **poller_kwargs),
        assistant_id=state.assistant_id,
        thread_id=state.thread_id,
        submit_tool_outputs=bool(getattr(state.settings, "submit_tool_outputs", True)),
    )
