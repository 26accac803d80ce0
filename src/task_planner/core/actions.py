# src/task_planner/core/actions.py

"""
Action decoding.

Turns a raw ToolCall (function name + JSON-encoded arguments) into a typed
Command. Decoding is pure: it never touches the store, and each call is
decoded independently so one bad payload cannot sink its siblings.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from .errors import DecodeError, UnknownActionError
from .ports import ToolCall
from ..tasks.task_models import PRIORITY_MAX, PRIORITY_MIN

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "priority", "completed", "deleted")


@dataclass(slots=True, frozen=True)
class AddTask:
    name: str
    priority: int | None = None
    completed: bool | None = None
    deleted: bool | None = None

    def task_input(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        for key in ("priority", "completed", "deleted"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(slots=True, frozen=True)
class UpdateTask:
    id: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class CompleteTask:
    id: str


@dataclass(slots=True, frozen=True)
class RemoveTask:
    id: str


Command = AddTask | UpdateTask | CompleteTask | RemoveTask


@dataclass(slots=True, frozen=True)
class DecodeResult:
    call: ToolCall
    command: Command | None = None
    error: DecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.command is not None


# ---- field helpers ----


def _parse_arguments(call: ToolCall) -> dict[str, Any]:
    raw = call.arguments if call.arguments is not None else ""
    if not raw.strip():
        # Some models send "" for functions without parameters.
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(call.id, call.name, f"malformed JSON arguments ({e.msg})") from e
    if not isinstance(args, dict):
        raise DecodeError(call.id, call.name, "arguments must be a JSON object")
    return args


def _require_id(call: ToolCall, args: dict[str, Any]) -> str:
    raw = args.get("id")
    # JSON numbers are accepted: the model sometimes drops the quotes.
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if not isinstance(raw, str) or not raw.strip():
        raise DecodeError(call.id, call.name, "missing required field 'id'")
    return raw.strip()


def _check_field(call: ToolCall, key: str, value: Any) -> Any:
    if key == "name":
        if not isinstance(value, str) or not value.strip():
            raise DecodeError(call.id, call.name, "'name' must be a non-empty string")
        return value.strip()
    if key == "priority":
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(call.id, call.name, "'priority' must be an integer")
        if not PRIORITY_MIN <= value <= PRIORITY_MAX:
            raise DecodeError(call.id, call.name, f"'priority' {value} is out of range")
        return value
    if not isinstance(value, bool):
        raise DecodeError(call.id, call.name, f"'{key}' must be a boolean")
    return value


def _collect_fields(call: ToolCall, source: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in source.items():
        if key not in UPDATABLE_FIELDS:
            if key != "id":
                logger.debug("Ignoring unknown field %r in %s call %s", key, call.name, call.id)
            continue
        if value is None:
            continue
        out[key] = _check_field(call, key, value)
    return out


# ---- per-function decoders ----


def _decode_add(call: ToolCall, args: dict[str, Any]) -> AddTask:
    fields = _collect_fields(call, args)
    if "name" not in fields:
        # absent and null both end up here
        raise DecodeError(call.id, call.name, "missing required field 'name'")
    return AddTask(
        name=fields["name"],
        priority=fields.get("priority"),
        completed=fields.get("completed"),
        deleted=fields.get("deleted"),
    )


def _decode_update(call: ToolCall, args: dict[str, Any]) -> UpdateTask:
    task_id = _require_id(call, args)
    updates = args.get("updates")
    if updates is None:
        updates = {k: v for k, v in args.items() if k != "id"}
    elif not isinstance(updates, dict):
        raise DecodeError(call.id, call.name, "'updates' must be an object")

    fields = _collect_fields(call, updates)
    if not fields:
        raise DecodeError(call.id, call.name, "no updatable fields given")
    return UpdateTask(id=task_id, fields=fields)


def _decode_complete(call: ToolCall, args: dict[str, Any]) -> CompleteTask:
    return CompleteTask(id=_require_id(call, args))


def _decode_remove(call: ToolCall, args: dict[str, Any]) -> RemoveTask:
    return RemoveTask(id=_require_id(call, args))


DECODERS: dict[str, Callable[[ToolCall, dict[str, Any]], Command]] = {
    "addTask": _decode_add,
    "updateTask": _decode_update,
    "completeTask": _decode_complete,
    "removeTask": _decode_remove,
}


def decode_tool_call(call: ToolCall) -> Command:
    """Decode one tool call. Raises DecodeError (or UnknownActionError)."""
    decoder = DECODERS.get(call.name)
    if decoder is None:
        raise UnknownActionError(call.id, call.name)
    return decoder(call, _parse_arguments(call))


def decode_tool_calls(calls: Iterable[ToolCall]) -> list[DecodeResult]:
    """Decode every call independently, preserving order."""
    results: list[DecodeResult] = []
    for call in calls:
        try:
            command = decode_tool_call(call)
        except DecodeError as e:
            logger.warning("%s", e)
            results.append(DecodeResult(call=call, error=e))
            continue
        logger.debug("Decoded tool call %s -> %r", call.id, command)
        results.append(DecodeResult(call=call, command=command))
    return results
