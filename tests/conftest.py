# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_planner.tasks.task_store import TaskStore

from .fakes import SleepRecorder


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="task-planner-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        openai_api_key=None,
        openai_base_url=None,
        assistant_model="test-model",
        assistant_name="Task Planner",
        assistant_id=None,
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
        poll_interval_seconds=2.0,
        poll_backoff=1.0,
        poll_max_interval_seconds=2.0,
        poll_max_attempts=5,
        submit_tool_outputs=True,
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace) -> TaskStore:
    """Real SQLite store in tmp_path: its behaviour is part of what we test."""
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()
