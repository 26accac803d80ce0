# src/task_planner/core/persona.py

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Final

from ..tasks.task_models import Task

MISSION_STATEMENT: Final[str] = """
You are an expert task planning assistant who helps people organize the tasks in the various parts of their lives.
Human users will chat with you to keep track of their tasks, each of which can be given a priority and a status of completed or not.
You will need to keep track of the tasks and their attributes in order to respond to the user's requests.
Assume that the user might just be giving you a list of items to create. Unless a multi-line or comma-separated list is given, assume that each new line or element is a new Task to create.
They could also be asking you to update an existing item.
If the user indicates a priority, please translate this to the priority number, where 1 means top priority and 3 means bottom priority. If they did not give one, assume priority 2.
Do not ask for the task list; use the tasks passed to you with each request.
""".strip()

DEFAULT_USER_MESSAGE: Final[str] = (
    "I need to go buy bread from the store, then go to the gym. "
    "I also need to do my taxes, which is a P1."
)


def build_turn_message(user_message: str) -> str:
    """Wrap the raw user text with instructions for this turn."""
    return f"""This is the message the user just sent:

{user_message.strip()}

Please use the functions provided to update the tasks as appropriate.
If the user says they have already done a task that you recognize in the user's tasks, call the function to mark it completed.
"""


def build_run_instructions(tasks: Iterable[Task]) -> str:
    """Run-level instructions: the current task snapshot plus the no-duplicates rule."""
    snapshot = json.dumps([t.to_prompt_dict() for t in tasks], ensure_ascii=False)
    return (
        f"These are the tasks that the user already has: {snapshot}. "
        "Please update them as appropriate, do not make duplicates."
    )
