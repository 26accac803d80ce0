# src/task_planner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app, built once and injected.
- No secrets required at import time.
- Every knob has a TASK_PLANNER_* variable; the OpenAI key also honours OPENAI_API_KEY.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASK_PLANNER"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- OpenAI Assistants ----
    openai_api_key: Optional[str]
    openai_base_url: Optional[str]
    assistant_model: str
    assistant_name: str
    assistant_id: Optional[str]
    connect_timeout_seconds: float
    read_timeout_seconds: float

    # ---- Run polling ----
    poll_interval_seconds: float
    poll_backoff: float
    poll_max_interval_seconds: float
    poll_max_attempts: int

    # ---- Turn behaviour ----
    submit_tool_outputs: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-planner") or "task-planner"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task_planner"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        openai_api_key = _first_env(_k("OPENAI_API_KEY"), "OPENAI_API_KEY", default=None)
        openai_base_url = _first_env(_k("OPENAI_BASE_URL"), "OPENAI_BASE_URL", default=None)
        assistant_model = _env(_k("ASSISTANT_MODEL"), "gpt-4-1106-preview")
        assistant_name = _env(_k("ASSISTANT_NAME"), "Task Planner")
        assistant_id = _first_env(_k("ASSISTANT_ID"), default=None)

        connect_timeout_seconds = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout_seconds = _env_float(_k("READ_TIMEOUT_SECONDS"), 30.0)

        poll_interval_seconds = _env_float(_k("POLL_INTERVAL_SECONDS"), 2.0)
        poll_backoff = _env_float(_k("POLL_BACKOFF"), 1.5)
        poll_max_interval_seconds = _env_float(_k("POLL_MAX_INTERVAL_SECONDS"), 10.0)
        poll_max_attempts = _env_int(_k("POLL_MAX_ATTEMPTS"), 60)

        submit_tool_outputs = _env_bool(_k("SUBMIT_TOOL_OUTPUTS"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            openai_api_key=openai_api_key,
            openai_base_url=openai_base_url,
            assistant_model=assistant_model,
            assistant_name=assistant_name,
            assistant_id=assistant_id,
            connect_timeout_seconds=connect_timeout_seconds,
            read_timeout_seconds=max(read_timeout_seconds, connect_timeout_seconds),
            poll_interval_seconds=max(0.0, poll_interval_seconds),
            poll_backoff=max(1.0, poll_backoff),
            poll_max_interval_seconds=max(poll_interval_seconds, poll_max_interval_seconds),
            poll_max_attempts=max(1, poll_max_attempts),
            submit_tool_outputs=submit_tool_outputs,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Return the process settings, reading the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
