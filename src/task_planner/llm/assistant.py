# src/task_planner/llm/assistant.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Mapping, Sequence
from typing import Any, TypeVar

import httpx
import openai
from openai import AsyncOpenAI

from ..core.errors import ConnectivityError
from ..core.ports import RunSnapshot, RunStatus, ToolCall, ToolOutput

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"AuthenticationError", "PermissionDeniedError", "UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"RateLimitError", "TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    # APITimeoutError is a subclass of APIConnectionError.
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return True
    return exc.__class__.__name__ in {"APIConnectionError", "APITimeoutError", "ConnectTimeout", "ReadTimeout"}


def _is_server_error(exc: Exception) -> bool:
    if isinstance(exc, openai.InternalServerError):
        return True
    status = getattr(exc, "status_code", None)
    return isinstance(status, int) and status >= 500


def to_connectivity_error(what: str, exc: Exception) -> ConnectivityError:
    """Classify an SDK/transport exception as retryable or permanent."""
    if _is_auth_error(exc):
        return ConnectivityError(
            f"{what}: authentication failed. Check your API key (TASK_PLANNER_OPENAI_API_KEY).",
            retryable=False,
        )
    if _is_rate_limit_error(exc):
        return ConnectivityError(f"{what}: rate-limited ({exc})", retryable=True)
    if _is_connection_error(exc):
        return ConnectivityError(f"{what}: network/timeout error ({exc})", retryable=True)
    if _is_server_error(exc):
        return ConnectivityError(f"{what}: server error ({exc})", retryable=True)
    return ConnectivityError(f"{what}: {exc.__class__.__name__}: {exc}", retryable=False)


def _snapshot(run: Any) -> RunSnapshot:
    """Convert an SDK Run object into a RunSnapshot."""
    calls: list[ToolCall] = []
    required = getattr(run, "required_action", None)
    submit = getattr(required, "submit_tool_outputs", None) if required is not None else None
    for tc in getattr(submit, "tool_calls", None) or []:
        fn = getattr(tc, "function", None)
        calls.append(
            ToolCall(
                id=str(getattr(tc, "id", "")),
                name=str(getattr(fn, "name", "") or ""),
                arguments=str(getattr(fn, "arguments", "") or ""),
            )
        )

    last_error = getattr(run, "last_error", None)
    detail = None
    if last_error is not None:
        code = getattr(last_error, "code", None)
        message = getattr(last_error, "message", None)
        detail = f"{code}: {message}" if code else (message or None)

    return RunSnapshot(
        id=str(run.id),
        status=RunStatus.from_api(getattr(run, "status", None)),
        tool_calls=tuple(calls),
        last_error=detail,
    )


class OpenAIAssistantService:
    """
    AssistantService backed by the OpenAI Assistants (beta threads/runs) API.

    - No secrets required at import time; the client is built in __init__.
    - Automatic SDK retries are disabled: the run poller owns retry policy.
    - Every SDK/transport failure is re-raised as ConnectivityError.
    """

    def __init__(self, settings: Any, *, client: AsyncOpenAI | None = None) -> None:
        if client is None:
            api_key = getattr(settings, "openai_api_key", None)
            if not api_key or not str(api_key).strip():
                raise RuntimeError("OpenAI API key is not set. Set TASK_PLANNER_OPENAI_API_KEY in your .env.")

            connect_s = float(getattr(settings, "connect_timeout_seconds", 5.0))
            read_s = float(getattr(settings, "read_timeout_seconds", 30.0))
            client = AsyncOpenAI(
                api_key=str(api_key),
                base_url=getattr(settings, "openai_base_url", None) or None,
                timeout=httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s),
                max_retries=0,
            )
        self._client = client

    async def _call(self, what: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except (openai.OpenAIError, httpx.HTTPError) as e:
            err = to_connectivity_error(what, e)
            logger.warning("%s", err)
            raise err from e

    async def create_assistant(
            self,
            *,
            name: str,
            instructions: str,
            model: str,
            tools: Sequence[Mapping[str, Any]],
    ) -> str:
        logger.info("Creating assistant %r (model=%s)...", name, model)
        assistant = await self._call(
            "create assistant",
            self._client.beta.assistants.create(
                name=name,
                instructions=instructions,
                model=model,
                tools=[dict(t) for t in tools],
            ),
        )
        logger.info("Created assistant %s with name %s.", assistant.id, assistant.name)
        return str(assistant.id)

    async def create_thread(self) -> str:
        thread = await self._call("create thread", self._client.beta.threads.create())
        logger.info("Created thread %s", thread.id)
        return str(thread.id)

    async def add_user_message(self, thread_id: str, content: str) -> str:
        message = await self._call(
            "create message",
            self._client.beta.threads.messages.create(thread_id=thread_id, role="user", content=content),
        )
        return str(message.id)

    async def create_run(self, thread_id: str, *, assistant_id: str, instructions: str) -> RunSnapshot:
        run = await self._call(
            "create run",
            self._client.beta.threads.runs.create(
                thread_id=thread_id,
                assistant_id=assistant_id,
                instructions=instructions,
            ),
        )
        return _snapshot(run)

    async def retrieve_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        run = await self._call(
            "retrieve run",
            self._client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id),
        )
        return _snapshot(run)

    async def submit_tool_outputs(
            self,
            thread_id: str,
            run_id: str,
            outputs: Sequence[ToolOutput],
    ) -> RunSnapshot:
        run = await self._call(
            "submit tool outputs",
            self._client.beta.threads.runs.submit_tool_outputs(
                run_id=run_id,
                thread_id=thread_id,
                tool_outputs=[{"tool_call_id": o.tool_call_id, "output": o.output} for o in outputs],
            ),
        )
        return _snapshot(run)

    async def close(self) -> None:
        await self._client.close()
