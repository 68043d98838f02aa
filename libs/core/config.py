from __future__ import annotations

import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CORE_URL = "http://localhost:8080"
# Core enforces bearer auth even in demo setups, so a token is always sent.
DEFAULT_CORE_TOKEN = "demo"
DEFAULT_CORE_TIMEOUT_MS = 15000
DEFAULT_HTTP_PORT = 7070
DEFAULT_HTTP_HOST = "0.0.0.0"
LOG_LEVELS = ("debug", "info", "warning", "error")


def _parse_optional_int(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_log_level(value: str | None) -> str:
    normalized = (value or "").strip().lower()
    if normalized == "warn":
        return "warning"
    if normalized in LOG_LEVELS:
        return normalized
    return "info"


def resolve_core_timeout_ms(value: str | None) -> int:
    parsed = _parse_optional_int(value)
    if parsed is None or parsed <= 0:
        return DEFAULT_CORE_TIMEOUT_MS
    return parsed


def resolve_http_port(value: str | None) -> int:
    if value is None or value.strip() == "":
        return DEFAULT_HTTP_PORT
    parsed = _parse_optional_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


class GatewaySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    core_url: str = DEFAULT_CORE_URL
    core_token: str = DEFAULT_CORE_TOKEN
    core_timeout_ms: int = Field(default=DEFAULT_CORE_TIMEOUT_MS, gt=0)
    log_level: str = "info"
    http_host: str = DEFAULT_HTTP_HOST
    http_port: int = Field(default=DEFAULT_HTTP_PORT, ge=0)
    allow_origins: List[str] = Field(default_factory=list)
    allow_hosts: List[str] = Field(default_factory=list)
    otlp_endpoint: Optional[str] = None

    @property
    def core_timeout_s(self) -> float:
        return self.core_timeout_ms / 1000.0

    @property
    def http_enabled(self) -> bool:
        return self.http_port > 0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewaySettings":
        env = os.environ if environ is None else environ
        return cls(
            core_url=env.get("OPSORCH_CORE_URL") or DEFAULT_CORE_URL,
            core_token=env.get("OPSORCH_CORE_TOKEN") or DEFAULT_CORE_TOKEN,
            core_timeout_ms=resolve_core_timeout_ms(env.get("OPSORCH_CORE_TIMEOUT_MS")),
            log_level=parse_log_level(env.get("OPSORCH_LOG_LEVEL")),
            http_host=env.get("MCP_HTTP_HOST") or DEFAULT_HTTP_HOST,
            http_port=resolve_http_port(env.get("MCP_HTTP_PORT")),
            allow_origins=_parse_csv(env.get("MCP_HTTP_ALLOW_ORIGINS")),
            allow_hosts=_parse_csv(env.get("MCP_HTTP_ALLOW_HOSTS")),
            otlp_endpoint=env.get("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
        )
