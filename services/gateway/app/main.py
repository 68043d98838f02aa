from __future__ import annotations

import sys
from typing import Any

import anyio
import uvicorn
from fastapi import FastAPI
from mcp.server.stdio import stdio_server
from prometheus_client import make_asgi_app

from libs.core import logging as core_logging
from libs.core import tracing
from libs.core.config import GatewaySettings
from services.gateway.app.mcp import SERVER_VERSION, PerRequestMCPEndpoint, build_server

MCP_PATH = "/mcp"


def create_app(settings: GatewaySettings, logger: Any, *, transport: Any = None) -> FastAPI:
    app = FastAPI(title="OpsOrch MCP Gateway", version=SERVER_VERSION)
    app.state.gateway_settings = settings
    app.add_route(
        MCP_PATH,
        PerRequestMCPEndpoint(settings, logger, transport=transport),
        methods=["POST"],
    )
    app.mount("/metrics", make_asgi_app())

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


async def run_stdio(settings: GatewaySettings, logger: Any) -> None:
    server = build_server(settings, logger)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("gateway_stdio_ready")
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("gateway_stdio_closed")


async def run_http(settings: GatewaySettings, logger: Any) -> None:
    app = create_app(settings, logger)
    config = uvicorn.Config(
        app,
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level,
        log_config=None,
    )
    core_logging.log_event(
        logger,
        "gateway_http_listening",
        {
            "url": f"http://localhost:{settings.http_port}{MCP_PATH}",
            "port": settings.http_port,
            "allow_origins": settings.allow_origins,
            "allow_hosts": settings.allow_hosts,
        },
    )
    await uvicorn.Server(config).serve()


async def serve(settings: GatewaySettings, logger: Any) -> None:
    async with anyio.create_task_group() as task_group:
        task_group.start_soon(run_stdio, settings, logger)
        if settings.http_enabled:
            task_group.start_soon(run_http, settings, logger)


def main() -> None:
    settings = GatewaySettings.from_env()
    core_logging.configure_logging(core_logging.SERVICE_NAME, settings.log_level)
    logger = core_logging.get_logger()
    try:
        tracing.configure_tracing(core_logging.SERVICE_NAME, settings.otlp_endpoint)
        anyio.run(serve, settings, logger)
    except KeyboardInterrupt:
        pass
    except Exception as exc:  # noqa: BLE001
        logger.error("gateway_start_failed", error=str(exc), error_type=exc.__class__.__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
