from __future__ import annotations

import logging
import sys
from typing import Any, Dict

import structlog

SERVICE_NAME = "opsorch-mcp"


def configure_logging(service_name: str = SERVICE_NAME, level: str = "info") -> None:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    # stdout carries the stdio MCP transport; logs must stay on stderr.
    logging.basicConfig(level=numeric_level, stream=sys.stderr, format="%(message)s", force=True)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(default=str),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
    logger = structlog.get_logger(service=service_name)
    logger.debug("logging_configured", level=level)


def log_event(logger: structlog.BoundLogger, event_type: str, payload: Dict[str, Any]) -> None:
    logger.info(event_type, **payload)


def get_logger(service_name: str = SERVICE_NAME) -> structlog.BoundLogger:
    return structlog.get_logger(service=service_name)
