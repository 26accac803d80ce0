# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASK_PLANNER_APP_NAME": "App display name (default: task-planner).",
    "TASK_PLANNER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "TASK_PLANNER_DATA_DIR": "Local data directory, also holds task_planner.log (default: .local/task_planner).",
    "TASK_PLANNER_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # OpenAI Assistants
    "TASK_PLANNER_OPENAI_API_KEY": "OpenAI API key; OPENAI_API_KEY is used when unset. Without a key the app runs offline.",
    "TASK_PLANNER_OPENAI_BASE_URL": "Optional API base URL (OPENAI_BASE_URL also honoured).",
    "TASK_PLANNER_ASSISTANT_MODEL": "Model for a newly created assistant (default: gpt-4-1106-preview).",
    "TASK_PLANNER_ASSISTANT_NAME": "Name for a newly created assistant (default: Task Planner).",
    "TASK_PLANNER_ASSISTANT_ID": "Reuse this assistant instead of creating one per run.",
    "TASK_PLANNER_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "TASK_PLANNER_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 30).",
    # Run polling
    "TASK_PLANNER_POLL_INTERVAL_SECONDS": "First delay between run polls (default: 2).",
    "TASK_PLANNER_POLL_BACKOFF": "Delay multiplier after each poll; 1 keeps it fixed (default: 1.5).",
    "TASK_PLANNER_POLL_MAX_INTERVAL_SECONDS": "Upper bound for the poll delay (default: 10).",
    "TASK_PLANNER_POLL_MAX_ATTEMPTS": "Polls before giving up on a run (default: 60).",
    # Turn behaviour
    "TASK_PLANNER_SUBMIT_TOOL_OUTPUTS": "Report dispatch results back to the run (true/false, default: true).",
}
