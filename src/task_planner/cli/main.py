# src/task_planner/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, optionally truncates the task store,
provisions an assistant + thread, then runs a single turn with the user's
message and prints the resulting task list.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from collections.abc import Sequence

from ..cli.bootstrap import build_orchestrator, create_initial_state, provision
from ..config import get_settings
from ..core.errors import ConnectivityError, TaskStoreError
from ..core.orchestrator import TurnResult
from ..core.persona import DEFAULT_USER_MESSAGE
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-planner",
        description="Update your task list from a natural-language message.",
    )
    parser.add_argument(
        "-t",
        "--truncate",
        action="store_true",
        help="Truncate the database before running",
    )
    parser.add_argument(
        "-m",
        "--message",
        default=DEFAULT_USER_MESSAGE,
        help="The message to send from the user",
    )
    return parser


async def run_once(state: AppState, *, message: str, truncate: bool = False, **poller_kwargs) -> TurnResult:
    """Truncate (optional), provision, and run one turn."""
    if truncate:
        state.task_store.purge()

    await provision(state)
    orchestrator = build_orchestrator(state, **poller_kwargs)
    return await orchestrator.run_turn(message)


def _print_tasks(state: AppState) -> None:
    tasks = state.task_store.list_tasks()
    print(f"Tasks ({len(tasks)}):")
    for t in tasks:
        mark = "x" if t.completed else " "
        print(f"  [{mark}] P{t.priority} {t.name}  ({t.id})")


async def _amain(state: AppState, args: argparse.Namespace) -> int:
    try:
        result = await run_once(state, message=args.message, truncate=args.truncate)
    except ConnectivityError as e:
        logger.error("Could not reach the assistant: %s", e)
        return 1
    except TaskStoreError:
        logger.exception("Task store failure")
        return 1
    finally:
        close = getattr(state.assistant, "close", None)
        if close is not None:
            with contextlib.suppress(Exception):
                await close()

    logger.info("Turn finished: %s", result.status.value)
    _print_tasks(state)
    return 0 if result.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    return asyncio.run(_amain(state, args))


if __name__ == "__main__":
    sys.exit(main())
