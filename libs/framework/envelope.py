from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from mcp import types


@dataclass(frozen=True)
class Envelope:
    text: str
    structured: Any

    def to_mcp(self) -> types.CallToolResult:
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=self.text)],
            structuredContent=structured_content(self.structured),
            isError=False,
        )


def wrap_result(value: Any) -> Envelope:
    """Build the text/structured pair returned for a successful tool call.

    Strings are passed through untouched; everything else is rendered as
    indented JSON with keys in the order they were received.
    """
    if isinstance(value, str):
        text = value
    else:
        text = json.dumps(value, indent=2, ensure_ascii=False)
    return Envelope(text=text, structured=value)


def structured_content(value: Any) -> dict[str, Any] | None:
    # MCP only carries objects as structuredContent.
    if value is None:
        return None
    if isinstance(value, dict):
        return value
    return {"result": value}


def advertised_output_schema(schema: dict[str, Any]) -> dict[str, Any]:
    if schema.get("type") == "object":
        return schema
    return {"type": "object", "properties": {"result": schema}, "required": ["result"]}


def error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        isError=True,
    )
