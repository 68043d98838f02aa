from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

from jsonschema import Draft202012Validator

from libs.core.errors import GatewayError, InputValidationError, UnknownToolError
from libs.core.models import ToolContract
from libs.framework.envelope import Envelope, wrap_result

tool_input_type = dict[str, Any]


class HandlerResult(Protocol):
    """Anything with ``value`` and ``error`` attributes, e.g. ``CoreResult``."""

    value: Any
    error: Optional[GatewayError]


ToolHandler = Callable[[tool_input_type], Awaitable[HandlerResult]]


@dataclass(frozen=True)
class Tool:
    contract: ToolContract
    handler: ToolHandler


@dataclass(frozen=True)
class ToolCall:
    tool_name: str
    status: str
    duration_ms: int
    envelope: Optional[Envelope] = None
    error: Optional[GatewayError] = None

    @property
    def error_code(self) -> Optional[str]:
        return self.error.error_code if self.error is not None else None

    @classmethod
    def completed(cls, tool_name: str, envelope: Envelope, started_at: float) -> "ToolCall":
        return cls(tool_name, "completed", _elapsed_ms(started_at), envelope=envelope)

    @classmethod
    def failed(cls, tool_name: str, error: GatewayError, started_at: float) -> "ToolCall":
        return cls(tool_name, "failed", _elapsed_ms(started_at), error=error)


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        name = tool.contract.name
        if name in self._tools:
            raise ValueError(f"tool already registered: {name}")
        self._tools[name] = tool

    def list_contracts(self) -> list[ToolContract]:
        return [tool.contract for tool in self._tools.values()]

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    async def call(self, name: str, arguments: tool_input_type | None) -> ToolCall:
        started_at = time.monotonic()
        tool = self.get(name)
        if tool is None:
            return ToolCall.failed(name, UnknownToolError(name), started_at)
        payload = arguments if arguments is not None else {}
        try:
            validate_schema(tool.contract.input_schema, payload, "input")
        except InputValidationError as exc:
            return ToolCall.failed(name, exc, started_at)
        result = await tool.handler(prune_unknown(tool.contract.input_schema, payload))
        if result.error is not None:
            return ToolCall.failed(name, result.error, started_at)
        return ToolCall.completed(name, wrap_result(result.value), started_at)


def validate_schema(schema: dict[str, Any] | None, payload: Any, label: str) -> None:
    if not schema:
        return
    validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
    errors = sorted(validator.iter_errors(payload), key=lambda err: list(map(str, err.path)))
    if errors:
        messages = "; ".join(
            f"{'/'.join(map(str, err.path)) or '<root>'}: {err.message}" for err in errors[:5]
        )
        raise InputValidationError(f"{label} schema validation failed: {messages}")


def prune_unknown(schema: dict[str, Any], payload: Any) -> Any:
    """Drop properties the schema does not declare, recursing into nested objects.

    Objects that allow ``additionalProperties`` (maps) are forwarded as-is.
    """
    if isinstance(payload, list):
        items = schema.get("items")
        if isinstance(items, dict):
            return [prune_unknown(items, item) for item in payload]
        return payload
    if not isinstance(payload, dict):
        return payload
    properties = schema.get("properties")
    if not isinstance(properties, dict) or "additionalProperties" in schema:
        return payload
    return {
        key: prune_unknown(properties[key], value)
        for key, value in payload.items()
        if key in properties
    }


def _elapsed_ms(started_at: float) -> int:
    return int(max(0.0, time.monotonic() - started_at) * 1000)
