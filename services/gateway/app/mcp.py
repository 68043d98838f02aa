from __future__ import annotations

from typing import Any

import anyio
from anyio.abc import TaskStatus
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from mcp.server.transport_security import TransportSecuritySettings
from prometheus_client import Counter, Histogram
from starlette.types import Receive, Scope, Send

from libs.core.config import GatewaySettings
from libs.core.errors import InputValidationError, UnknownToolError
from libs.framework.envelope import advertised_output_schema, error_result
from libs.framework.tool_runtime import ToolRegistry
from libs.tools.core_client import CoreClient
from libs.tools.opsorch_tools import build_registry

SERVER_NAME = "opsorch-mcp"
SERVER_VERSION = "1.0.0"

tool_calls_total = Counter(
    "opsorch_mcp_tool_calls_total", "MCP tool calls handled", ["tool", "status"]
)
tool_call_duration_seconds = Histogram(
    "opsorch_mcp_tool_call_duration_seconds", "MCP tool call latency", ["tool"]
)


def _mcp_tool(registry: ToolRegistry) -> list[types.Tool]:
    return [
        types.Tool(
            name=contract.name,
            title=contract.title,
            description=contract.description,
            inputSchema=contract.input_schema,
            outputSchema=advertised_output_schema(contract.output_schema),
            annotations=types.ToolAnnotations(title=contract.title, readOnlyHint=True, openWorldHint=True),
        )
        for contract in registry.list_contracts()
    ]


def build_server(settings: GatewaySettings, logger: Any, *, transport: Any = None) -> Server:
    """Build an MCP server bound to a fresh tool registry and Core client."""
    registry = build_registry(CoreClient(settings, logger, transport=transport))
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return _mcp_tool(registry)

    # Arguments are validated by the registry so failures keep their error classes.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        call = await registry.call(name, arguments)
        tool_label = name if registry.get(name) is not None else "unknown"
        tool_calls_total.labels(tool=tool_label, status=call.status).inc()
        tool_call_duration_seconds.labels(tool=tool_label).observe(call.duration_ms / 1000.0)
        if call.error is not None:
            # Core failures were already logged by the client.
            if isinstance(call.error, (InputValidationError, UnknownToolError)):
                logger.warning(
                    "tool_call_rejected",
                    tool_name=name,
                    error=str(call.error),
                    error_code=call.error_code,
                )
            return error_result(str(call.error))
        return call.envelope.to_mcp()

    return server


def security_settings(settings: GatewaySettings) -> TransportSecuritySettings:
    protect = bool(settings.allow_hosts or settings.allow_origins)
    return TransportSecuritySettings(
        enable_dns_rebinding_protection=protect,
        allowed_hosts=list(settings.allow_hosts),
        allowed_origins=list(settings.allow_origins),
    )


class PerRequestMCPEndpoint:
    """ASGI endpoint answering each HTTP request with its own MCP server.

    Nothing survives between requests: the server, tool registry and Core
    client are built for the request and dropped when the response is sent.
    """

    def __init__(self, settings: GatewaySettings, logger: Any, *, transport: Any = None) -> None:
        self.settings = settings
        self.logger = logger
        self.security = security_settings(settings)
        self._transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        server = build_server(self.settings, self.logger, transport=self._transport)
        http_transport = StreamableHTTPServerTransport(
            mcp_session_id=None,
            is_json_response_enabled=True,
            security_settings=self.security,
        )

        async def run_server(*, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
            async with http_transport.connect() as (read_stream, write_stream):
                task_status.started()
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=True,
                )

        async with anyio.create_task_group() as task_group:
            await task_group.start(run_server)
            await http_transport.handle_request(scope, receive, send)
            await http_transport.terminate()
