# tests/test_run_poller.py

from __future__ import annotations

import pytest

from task_planner.core.errors import ConnectivityError, PollTimeoutError, RunFailed
from task_planner.core.poller import RunPoller
from task_planner.core.ports import RunStatus

from .fakes import FakeAssistant, SleepRecorder, tool_call

Q = RunStatus.QUEUED
P = RunStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_keeps_polling_non_terminal_with_fixed_delay(sleeper: SleepRecorder) -> None:
    calls = [tool_call("addTask", {"name": "a"}, "c1")]
    assistant = FakeAssistant(script=[Q, P, P, RunStatus.REQUIRES_ACTION], tool_calls=calls)
    poller = RunPoller(assistant, interval_seconds=2.0, backoff=1.0, sleep=sleeper)

    result = await poller.wait_for_actions("thread", "run_1")

    assert result == calls
    assert assistant.retrieve_count == 4
    # one wait after each non-terminal observation
    assert sleeper.delays == [2.0, 2.0, 2.0]


@pytest.mark.asyncio
async def test_backoff_grows_and_is_capped(sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(script=[Q, Q, Q, Q, Q, RunStatus.COMPLETED])
    poller = RunPoller(assistant, interval_seconds=2.0, backoff=2.0, max_interval_seconds=10.0, sleep=sleeper)

    await poller.wait_for_actions("thread", "run_1")

    assert sleeper.delays == [2.0, 4.0, 8.0, 10.0, 10.0]


@pytest.mark.asyncio
async def test_requires_action_returns_calls_in_reported_order(sleeper: SleepRecorder) -> None:
    calls = [
        tool_call("addTask", {"name": "bread"}, "c1"),
        tool_call("addTask", {"name": "gym"}, "c2"),
        tool_call("completeTask", {"id": "t1"}, "c3"),
    ]
    assistant = FakeAssistant(script=[RunStatus.REQUIRES_ACTION], tool_calls=calls)

    result = await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1")

    assert [c.id for c in result] == ["c1", "c2", "c3"]
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_completed_without_calls_returns_empty(sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(script=[P, RunStatus.COMPLETED])

    assert await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1") == []


@pytest.mark.asyncio
async def test_completed_with_attached_calls_returns_them(sleeper: SleepRecorder) -> None:
    calls = [tool_call("removeTask", {"id": "t1"})]
    assistant = FakeAssistant(script=[RunStatus.COMPLETED], tool_calls=calls)

    assert await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1") == calls


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status", [RunStatus.FAILED, RunStatus.CANCELLED, RunStatus.EXPIRED, RunStatus.INCOMPLETE]
)
async def test_failure_statuses_raise_run_failed(status: RunStatus, sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(script=[Q, status], last_error="server_error: boom")

    with pytest.raises(RunFailed) as ei:
        await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1")

    assert ei.value.status == status.value
    assert ei.value.detail == "server_error: boom"
    assert assistant.retrieve_count == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(script=[P])
    poller = RunPoller(assistant, backoff=1.0, max_attempts=4, sleep=sleeper)

    with pytest.raises(PollTimeoutError) as ei:
        await poller.wait_for_actions("thread", "run_1")

    assert ei.value.attempts == 4
    assert assistant.retrieve_count == 4
    # no pointless sleep after the last attempt
    assert len(sleeper.delays) == 3


@pytest.mark.asyncio
async def test_unknown_status_is_polled_again(sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(script=[RunStatus.UNKNOWN, RunStatus.COMPLETED])

    assert await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1") == []
    assert assistant.retrieve_count == 2


@pytest.mark.asyncio
async def test_retryable_connectivity_error_is_retried(sleeper: SleepRecorder) -> None:
    calls = [tool_call("addTask", {"name": "a"})]
    assistant = FakeAssistant(
        script=[ConnectivityError("timeout", retryable=True), RunStatus.REQUIRES_ACTION],
        tool_calls=calls,
    )

    result = await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1")

    assert result == calls
    assert len(sleeper.delays) == 1


@pytest.mark.asyncio
async def test_permanent_connectivity_error_propagates(sleeper: SleepRecorder) -> None:
    assistant = FakeAssistant(script=[ConnectivityError("bad key", retryable=False)])

    with pytest.raises(ConnectivityError):
        await RunPoller(assistant, sleep=sleeper).wait_for_actions("thread", "run_1")

    assert assistant.retrieve_count == 1
    assert sleeper.delays == []


def test_from_settings_uses_poll_knobs(settings) -> None:
    poller = RunPoller.from_settings(FakeAssistant(), settings)

    assert poller._interval == settings.poll_interval_seconds
    assert poller._max_attempts == settings.poll_max_attempts
