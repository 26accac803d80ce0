# src/task_planner/core/poller.py

"""
Run poller.

Drives a remote run from creation to a terminal status:
- queued / in_progress / cancelling / unknown -> sleep, then poll again
- requires_action / completed              -> return the attached tool calls
- failed / cancelled / expired / incomplete -> raise RunFailed

The loop is bounded (max_attempts) and the delay grows by `backoff` after each
wait, capped at max_interval_seconds. The poller only observes; dispatching
the returned calls is the orchestrator's job.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .errors import ConnectivityError, PollTimeoutError, RunFailed
from .ports import AssistantService, RunSnapshot, ToolCall

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class RunPoller:
    def __init__(
            self,
            assistant: AssistantService,
            *,
            interval_seconds: float = 2.0,
            backoff: float = 1.5,
            max_interval_seconds: float = 10.0,
            max_attempts: int = 60,
            sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._assistant = assistant
        self._interval = max(0.0, float(interval_seconds))
        self._backoff = max(1.0, float(backoff))
        self._max_interval = max(self._interval, float(max_interval_seconds))
        self._max_attempts = max(1, int(max_attempts))
        self._sleep = sleep

    @classmethod
    def from_settings(cls, assistant: AssistantService, settings, **kwargs) -> RunPoller:
        return cls(
            assistant,
            interval_seconds=settings.poll_interval_seconds,
            backoff=settings.poll_backoff,
            max_interval_seconds=settings.poll_max_interval_seconds,
            max_attempts=settings.poll_max_attempts,
            **kwargs,
        )

    async def wait_for_actions(self, thread_id: str, run_id: str) -> list[ToolCall]:
        """
        Poll until the run is terminal and return its tool calls (possibly empty).

        Raises RunFailed, PollTimeoutError, or a non-retryable ConnectivityError.
        """
        snapshot = await self.wait_for_run(thread_id, run_id)
        return list(snapshot.tool_calls)

    async def wait_for_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        """Like wait_for_actions, but returns the terminal snapshot itself."""
        delay = self._interval

        for attempt in range(1, self._max_attempts + 1):
            try:
                snapshot = await self._assistant.retrieve_run(thread_id, run_id)
            except ConnectivityError as e:
                if not e.retryable:
                    raise
                logger.warning(
                    "Polling run %s failed (attempt %d/%d): %s",
                    run_id,
                    attempt,
                    self._max_attempts,
                    e,
                )
            else:
                status = snapshot.status
                logger.info("Run %s status: %s (attempt %d)", run_id, status.value, attempt)

                if status.is_failure:
                    logger.error("Run %s failed: %s", run_id, snapshot.last_error or status.value)
                    raise RunFailed(run_id, status.value, snapshot.last_error)

                if status.is_terminal:
                    # Whatever is attached is returned, even under "completed".
                    logger.info("Run %s returned %d tool call(s)", run_id, len(snapshot.tool_calls))
                    return snapshot

            if attempt == self._max_attempts:
                break

            logger.debug("Trying run %s again in %.1f seconds...", run_id, delay)
            await self._sleep(delay)
            delay = min(delay * self._backoff, self._max_interval)

        logger.error("Run %s still not terminal after %d polls", run_id, self._max_attempts)
        raise PollTimeoutError(run_id, self._max_attempts)
