"""OpenTelemetry spans around Core calls.

The gateway always talks to the OpenTelemetry API. Spans leave the process only
when an OTLP endpoint is configured; otherwise the API's no-op provider stays
installed.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping
from urllib.parse import urlparse, urlunparse

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

TRACER_NAME = "opsorch-mcp"
OTLP_TRACES_PATH = "/v1/traces"
_SCALARS = (bool, int, float, str)

_provider_installed = False


def configure_tracing(service_name: str, endpoint: str | None = None) -> bool:
    global _provider_installed
    if _provider_installed:
        return True
    traces_url = otlp_traces_url(endpoint)
    if traces_url is None:
        return False
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=traces_url)))
    trace.set_tracer_provider(provider)
    _provider_installed = True
    structlog.get_logger(service=service_name).info("tracing_configured", endpoint=traces_url)
    return True


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def start_span(name: str, *, attributes: Mapping[str, Any] | None = None) -> Iterator[trace.Span]:
    with get_tracer().start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        set_span_attributes(span, attributes)
        try:
            yield span
        except Exception as exc:
            record_failure(span, str(exc), exc)
            raise


def core_request_span(method: str, path: str):
    return start_span(
        "core_client.request",
        attributes={"http.request.method": method, "url.path": path},
    )


def record_failure(span: Any, message: str, exc: BaseException | None = None) -> None:
    if exc is not None:
        span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, message))


def set_span_attributes(span: Any, attributes: Mapping[str, Any] | None) -> None:
    for key, value in (attributes or {}).items():
        normalized = span_attribute_value(value)
        if key and normalized is not None:
            span.set_attribute(key, normalized)


def span_attribute_value(value: Any) -> Any:
    # OTel only accepts scalars and homogeneous scalar sequences.
    if value is None or isinstance(value, _SCALARS):
        return value
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, _SCALARS)] or None
    return str(value)


def otlp_traces_url(endpoint: str | None) -> str | None:
    raw = (endpoint or "").strip()
    if not raw:
        return None
    parsed = urlparse(raw)
    if not (parsed.scheme and parsed.netloc) or parsed.path.endswith(OTLP_TRACES_PATH):
        return raw
    return urlunparse(parsed._replace(path=parsed.path.rstrip("/") + OTLP_TRACES_PATH))
