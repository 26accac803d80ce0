# src/task_planner/core/orchestrator.py

"""
Turn orchestration.

One turn:
1. snapshot current tasks,
2. append the user message to the thread,
3. create a run whose instructions embed the snapshot,
4. poll the run until it is terminal,
5. decode every tool call and dispatch the commands in order,
6. hand tool outputs back to the run if it is waiting for them.

Errors from the assistant are not swallowed here: they end the turn with an
explicit TurnStatus so the caller can decide what to do. Per-call decode and
dispatch failures are isolated and only downgrade the turn to "partial".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import StrEnum

from .actions import DecodeResult, decode_tool_calls
from .dispatcher import CommandDispatcher, DispatchOutcome
from .errors import ConnectivityError, DecodeError, PollTimeoutError, RunFailed
from .persona import build_run_instructions, build_turn_message
from .poller import RunPoller
from .ports import AssistantService, RunStatus, TaskRepo, ToolCall, ToolOutput

logger = logging.getLogger(__name__)


class TurnStatus(StrEnum):
    APPLIED = "applied"
    PARTIAL = "partial"
    NO_ACTION = "no_action"
    RUN_FAILED = "run_failed"
    TIMED_OUT = "timed_out"
    CONNECTIVITY_ERROR = "connectivity_error"


@dataclass(slots=True)
class TurnResult:
    status: TurnStatus
    run_id: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    decode_errors: list[DecodeError] = field(default_factory=list)
    outcomes: list[DispatchOutcome] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status in (TurnStatus.APPLIED, TurnStatus.NO_ACTION)


class Orchestrator:
    def __init__(
            self,
            *,
            assistant: AssistantService,
            task_store: TaskRepo,
            poller: RunPoller,
            assistant_id: str,
            thread_id: str,
            submit_tool_outputs: bool = True,
    ) -> None:
        self._assistant = assistant
        self._store = task_store
        self._poller = poller
        self._dispatcher = CommandDispatcher(task_store)
        self.assistant_id = assistant_id
        self.thread_id = thread_id
        self._submit_outputs = submit_tool_outputs

    async def run_turn(self, user_message: str) -> TurnResult:
        tasks = self._store.list_tasks()
        logger.info("Starting turn with %d existing task(s)", len(tasks))

        run_id: str | None = None
        try:
            message_id = await self._assistant.add_user_message(
                self.thread_id, build_turn_message(user_message)
            )
            logger.info("Created message %s", message_id)

            run = await self._assistant.create_run(
                self.thread_id,
                assistant_id=self.assistant_id,
                instructions=build_run_instructions(tasks),
            )
            run_id = run.id
            logger.info("Created run %s (status=%s)", run_id, run.status.value)

            final = await self._poller.wait_for_run(self.thread_id, run_id)
        except RunFailed as e:
            logger.error("Run failed, no actions applied: %s", e)
            return TurnResult(status=TurnStatus.RUN_FAILED, run_id=run_id, error=e)
        except PollTimeoutError as e:
            logger.error("Gave up waiting for run: %s", e)
            return TurnResult(status=TurnStatus.TIMED_OUT, run_id=run_id, error=e)
        except ConnectivityError as e:
            logger.error("Assistant unreachable (retryable=%s): %s", e.retryable, e)
            return TurnResult(status=TurnStatus.CONNECTIVITY_ERROR, run_id=run_id, error=e)

        calls = list(final.tool_calls)
        if not calls:
            logger.info("No actions required.")
            return TurnResult(status=TurnStatus.NO_ACTION, run_id=run_id)

        logger.info("Actions: %s", ", ".join(f"{c.name}({c.id})" for c in calls))

        decoded = decode_tool_calls(calls)
        decode_errors = [d.error for d in decoded if d.error is not None]

        outcomes: list[DispatchOutcome] = []
        by_call: dict[str, DispatchOutcome] = {}
        for item in decoded:
            if item.command is None:
                continue
            outcome = self._dispatcher.dispatch(item.command)
            outcomes.append(outcome)
            by_call[item.call.id] = outcome

        all_ok = not decode_errors and all(o.ok for o in outcomes)
        result = TurnResult(
            status=TurnStatus.APPLIED if all_ok else TurnStatus.PARTIAL,
            run_id=run_id,
            tool_calls=calls,
            decode_errors=decode_errors,
            outcomes=outcomes,
        )
        logger.info(
            "Turn %s: %d call(s), %d dispatched ok, %d decode error(s)",
            result.status.value,
            len(calls),
            sum(1 for o in outcomes if o.ok),
            len(decode_errors),
        )

        if self._submit_outputs and final.status is RunStatus.REQUIRES_ACTION:
            await self._submit(run_id, decoded, by_call)

        return result

    async def _submit(
            self,
            run_id: str,
            decoded: list[DecodeResult],
            by_call: dict[str, DispatchOutcome],
    ) -> None:
        """Report per-call results back to a run waiting in requires_action."""
        outputs: list[ToolOutput] = []
        for item in decoded:
            outcome = by_call.get(item.call.id)
            if outcome is not None:
                payload = outcome.as_tool_output()
            else:
                payload = {"ok": False, "task_id": None, "error": item.error.reason if item.error else None}
            outputs.append(ToolOutput(tool_call_id=item.call.id, output=json.dumps(payload)))

        try:
            run = await self._assistant.submit_tool_outputs(self.thread_id, run_id, outputs)
        except ConnectivityError as e:
            # The task store is already updated; the run will expire on its own.
            logger.warning("Submitting tool outputs for run %s failed: %s", run_id, e)
            return
        logger.info("Submitted %d tool output(s); run %s is %s", len(outputs), run_id, run.status.value)
