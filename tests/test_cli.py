# tests/test_cli.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from task_planner import config
from task_planner.cli.bootstrap import build_orchestrator, create_initial_state, provision
from task_planner.cli.main import build_parser, main, run_once
from task_planner.core.orchestrator import TurnStatus
from task_planner.core.persona import DEFAULT_USER_MESSAGE, MISSION_STATEMENT
from task_planner.core.ports import RunStatus
from task_planner.llm.offline import OfflineAssistantService
from task_planner.llm.tools import TASK_TOOLS, tool_names

from .fakes import FakeAssistant, SleepRecorder, tool_call


def test_parser_defaults_and_flags() -> None:
    parser = build_parser()

    defaults = parser.parse_args([])
    assert defaults.truncate is False
    assert defaults.message == DEFAULT_USER_MESSAGE

    args = parser.parse_args(["-t", "-m", "Walk the dog"])
    assert args.truncate is True
    assert args.message == "Walk the dog"


def test_tool_schema_covers_the_four_commands() -> None:
    assert tool_names() == ["addTask", "updateTask", "completeTask", "removeTask"]
    for tool in TASK_TOOLS:
        params = tool["function"]["parameters"]
        assert params["type"] == "object"
        for prop in params["properties"].values():
            assert prop["type"] in {"string", "integer", "boolean"}
            assert prop["description"]


def test_missing_api_key_falls_back_to_offline(settings) -> None:
    state = create_initial_state(settings=settings)

    assert state.offline is True
    assert isinstance(state.assistant, OfflineAssistantService)


@pytest.mark.asyncio
async def test_provision_creates_assistant_and_thread(settings) -> None:
    assistant = FakeAssistant()
    state = create_initial_state(settings=settings, assistant=assistant)

    await provision(state)

    assert state.assistant_id == "asst_1"
    assert state.thread_id == "thread_2"
    created = assistant.assistants[0]
    assert created["instructions"] == MISSION_STATEMENT
    assert created["model"] == "test-model"
    assert created["tools"] == TASK_TOOLS


@pytest.mark.asyncio
async def test_provision_reuses_configured_assistant(settings) -> None:
    settings.assistant_id = "asst_existing"
    assistant = FakeAssistant()
    state = create_initial_state(settings=settings, assistant=assistant)

    await provision(state)

    assert state.assistant_id == "asst_existing"
    assert assistant.calls == ["create_thread"]


def test_build_orchestrator_requires_provisioning(settings) -> None:
    state = create_initial_state(settings=settings, assistant=FakeAssistant())
    with pytest.raises(RuntimeError):
        build_orchestrator(state)


@pytest.mark.asyncio
async def test_truncate_empties_store_before_message(settings, sleeper: SleepRecorder) -> None:
    seen_counts: list[int] = []
    assistant = FakeAssistant(script=[RunStatus.COMPLETED])
    state = create_initial_state(settings=settings, assistant=assistant)
    state.task_store.create({"name": "old 1"})
    state.task_store.create({"name": "old 2"})

    original = assistant.add_user_message

    async def spy(thread_id: str, content: str) -> str:
        seen_counts.append(state.task_store.count_tasks())
        return await original(thread_id, content)

    assistant.add_user_message = spy  # type: ignore[method-assign]

    result = await run_once(state, message="hi", truncate=True, sleep=sleeper)

    assert seen_counts == [0]
    assert "already has: []" in assistant.run_instructions[0]
    assert result.status is TurnStatus.NO_ACTION


@pytest.mark.asyncio
async def test_run_once_without_truncate_keeps_tasks(settings, sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(tool_calls=[tool_call("addTask", {"name": "Gym", "priority": 1})])
    state = create_initial_state(settings=settings, assistant=assistant)
    state.task_store.create({"name": "Bread"})

    result = await run_once(state, message="gym, P1", sleep=sleeper)

    assert result.status is TurnStatus.APPLIED
    assert [t.name for t in state.task_store.list_tasks()] == ["Gym", "Bread"]


def test_main_offline_exits_zero(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("TASK_PLANNER_OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("TASK_PLANNER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASK_PLANNER_TASKS_DB_PATH", str(tmp_path / "tasks.sqlite3"))
    monkeypatch.setattr(config, "_SETTINGS", None)

    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        code = main(["--truncate", "--message", "nothing to do"])
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])

    assert code == 0
    assert "Tasks (0):" in capsys.readouterr().out
    assert (tmp_path / "task_planner.log").exists()
