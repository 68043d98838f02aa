"""One-shot HTTP pipeline to OpsOrch Core.

Every tool call goes through ``CoreClient.execute``: it performs exactly one
request (no retries), bounds it by the configured timeout, and returns a
``CoreResult`` holding either the parsed JSON payload or a classified error.
Failures are logged once, at error level, where they are classified.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Optional

import anyio
import httpx
import structlog

from libs.core import tracing
from libs.core.config import GatewaySettings
from libs.core.errors import (
    CoreError,
    CoreTimeoutError,
    GatewayError,
    SerializationError,
    TransportError,
)
from libs.core.models import HttpMethod


def normalize_path(path: str) -> str:
    if not path:
        raise ValueError("path must be a non-empty string")
    return path if path.startswith("/") else f"/{path}"


def build_url(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + normalize_path(path)


@dataclass(frozen=True)
class CoreRequest:
    path: str
    method: HttpMethod
    body: Optional[dict[str, Any]] = None

    @classmethod
    def build(cls, path: str, method: str | HttpMethod, body: Optional[dict[str, Any]] = None) -> "CoreRequest":
        resolved = HttpMethod(method.upper() if isinstance(method, str) else method)
        if resolved == HttpMethod.get:
            body = None
        return cls(path=normalize_path(path), method=resolved, body=body)


@dataclass(frozen=True)
class CoreResponse:
    status_code: int
    reason: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class CoreResult:
    value: Any = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


def _error_message(response: CoreResponse) -> str:
    try:
        data = json.loads(response.text) if response.text else None
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message") is not None:
        return str(data["message"])
    return response.reason


class CoreClient:
    def __init__(
        self,
        settings: GatewaySettings,
        logger: Any = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger if logger is not None else structlog.get_logger(service="opsorch-mcp")
        self._transport = transport

    def url_for(self, path: str) -> str:
        return build_url(self.settings.core_url, path)

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.settings.core_token}",
        }

    async def execute(
        self,
        path: str,
        method: str | HttpMethod,
        body: Optional[dict[str, Any]] = None,
    ) -> CoreResult:
        request = CoreRequest.build(path, method, body)
        started_at = time.monotonic()
        self.logger.debug(
            "core_request_started",
            method=request.method.value,
            path=request.path,
            body=request.body,
        )
        with tracing.core_request_span(request.method.value, request.path) as span:
            try:
                response = await self._send(request)
            except TransportError as exc:
                return self._failure(request, started_at, exc, span)

            tracing.set_span_attributes(span, {"http.response.status_code": response.status_code})
            if not response.ok:
                error = CoreError(response.status_code, _error_message(response))
                return self._failure(request, started_at, error, span, status_code=response.status_code)

            if not response.text:
                payload = None
            else:
                try:
                    payload = json.loads(response.text)
                except ValueError as exc:
                    error = SerializationError(
                        f"invalid_json: Core {response.status_code} response is not JSON: {exc}",
                        status_code=response.status_code,
                    )
                    return self._failure(request, started_at, error, span, status_code=response.status_code)

            self.logger.info(
                "core_request_succeeded",
                method=request.method.value,
                path=request.path,
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started_at),
            )
            self.logger.debug(
                "core_response_payload",
                method=request.method.value,
                path=request.path,
                response=payload,
            )
            return CoreResult(value=payload)

    async def _send(self, request: CoreRequest) -> CoreResponse:
        timeout_s = self.settings.core_timeout_s
        content = None
        if request.body is not None:
            content = json.dumps(request.body).encode("utf-8")
        try:
            with anyio.fail_after(timeout_s):
                async with httpx.AsyncClient(transport=self._transport, timeout=timeout_s) as client:
                    response = await client.request(
                        request.method.value,
                        self.url_for(request.path),
                        headers=self.headers(),
                        content=content,
                    )
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise CoreTimeoutError(
                f"core_request_timed_out: no response within {self.settings.core_timeout_ms}ms"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"core_transport_error: {exc.__class__.__name__}: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise TransportError(f"core_request_error: {exc.__class__.__name__}: {exc}") from exc
        return CoreResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            text=response.text,
        )

    def _failure(
        self,
        request: CoreRequest,
        started_at: float,
        error: GatewayError,
        span: Any,
        *,
        status_code: int | None = None,
    ) -> CoreResult:
        self.logger.error(
            "core_request_failed",
            method=request.method.value,
            path=request.path,
            status_code=status_code,
            duration_ms=_elapsed_ms(started_at),
            error=str(error),
            error_code=error.error_code,
        )
        tracing.record_failure(span, str(error))
        return CoreResult(error=error)


def _elapsed_ms(started_at: float) -> int:
    return int(max(0.0, time.monotonic() - started_at) * 1000)
