from __future__ import annotations

from typing import Any, Iterable

from libs.core.contracts import TOOL_CONTRACTS
from libs.core.models import ToolContract
from libs.framework.tool_runtime import Tool, ToolHandler, ToolRegistry
from libs.tools.core_client import CoreClient, CoreResult


def core_handler(client: CoreClient, contract: ToolContract) -> ToolHandler:
    async def handle(payload: dict[str, Any]) -> CoreResult:
        return await client.execute(
            contract.render_path(payload),
            contract.method,
            contract.request_body(payload),
        )

    return handle


def register_opsorch_tools(
    registry: ToolRegistry,
    *,
    client: CoreClient,
    contracts: Iterable[ToolContract] = TOOL_CONTRACTS,
) -> None:
    for contract in contracts:
        registry.register(Tool(contract=contract, handler=core_handler(client, contract)))


def build_registry(client: CoreClient) -> ToolRegistry:
    registry = ToolRegistry()
    register_opsorch_tools(registry, client=client)
    return registry
