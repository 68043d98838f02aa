from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest
import structlog

from libs.core.config import GatewaySettings
from libs.core.contracts import TOOL_CONTRACTS, lookup_contract
from libs.core.errors import CoreError, InputValidationError, UnknownToolError
from libs.framework.tool_runtime import Tool, ToolRegistry, prune_unknown, validate_schema
from libs.tools.core_client import CoreClient
from libs.tools.opsorch_tools import build_registry


class _Recorder:
    def __init__(self, responses: dict[str, tuple[int, Any]] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, payload = self.responses.get(request.url.path, (200, []))
        return httpx.Response(status_code, json=payload)

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None


def _registry(recorder: _Recorder) -> ToolRegistry:
    client = CoreClient(
        GatewaySettings(core_url="http://core.test"),
        structlog.get_logger(),
        transport=httpx.MockTransport(recorder),
    )
    return build_registry(client)


def _call(recorder: _Recorder, name: str, arguments: dict[str, Any] | None):
    return asyncio.run(_registry(recorder).call(name, arguments))


def test_registry_lists_every_contract_in_order() -> None:
    registry = _registry(_Recorder())
    assert [contract.name for contract in registry.list_contracts()] == [
        contract.name for contract in TOOL_CONTRACTS
    ]


def test_register_rejects_duplicates() -> None:
    registry = _registry(_Recorder())
    contract = lookup_contract("health")
    assert contract is not None
    with pytest.raises(ValueError):
        registry.register(Tool(contract=contract, handler=registry.get("health").handler))


def test_unknown_tool_fails_without_network() -> None:
    recorder = _Recorder()
    call = _call(recorder, "delete-everything", {})
    assert call.status == "failed"
    assert isinstance(call.error, UnknownToolError)
    assert str(call.error) == "unknown_tool:delete-everything"
    assert call.error_code == "contract.tool_not_found"
    assert recorder.requests == []


def test_missing_required_field_fails_without_network() -> None:
    recorder = _Recorder()
    call = _call(recorder, "query-logs", {"end": "2024-01-01T01:00:00Z"})
    assert isinstance(call.error, InputValidationError)
    assert "start" in str(call.error)
    assert call.error_code == "contract.input_invalid"
    assert recorder.requests == []


def test_invalid_date_time_is_rejected() -> None:
    recorder = _Recorder()
    call = _call(
        recorder,
        "query-logs",
        {"start": "yesterday", "end": "2024-01-01T01:00:00Z"},
    )
    assert isinstance(call.error, InputValidationError)
    assert recorder.requests == []


def test_non_positive_limit_is_rejected() -> None:
    recorder = _Recorder()
    call = _call(recorder, "query-incidents", {"limit": 0})
    assert isinstance(call.error, InputValidationError)
    assert recorder.requests == []


def test_metric_query_requires_step_and_metric_name() -> None:
    recorder = _Recorder()
    window = {"start": "2024-01-01T00:00:00Z", "end": "2024-01-01T01:00:00Z"}
    assert isinstance(_call(recorder, "query-metrics", window).error, InputValidationError)
    call = _call(recorder, "query-metrics", {**window, "step": 60, "expression": {"aggregation": "avg"}})
    assert isinstance(call.error, InputValidationError)
    assert recorder.requests == []


def test_empty_id_is_rejected() -> None:
    recorder = _Recorder()
    assert isinstance(_call(recorder, "get-incident", {"id": ""}).error, InputValidationError)
    assert isinstance(_call(recorder, "get-team", {}).error, InputValidationError)
    assert recorder.requests == []


def test_unknown_capability_is_rejected() -> None:
    recorder = _Recorder()
    call = _call(recorder, "list-providers", {"capability": "billing"})
    assert isinstance(call.error, InputValidationError)
    assert recorder.requests == []


def test_list_providers_uses_capability_path() -> None:
    recorder = _Recorder({"/providers/incident": (200, {"providers": ["pagerduty"]})})
    call = _call(recorder, "list-providers", {"capability": "incident"})
    assert call.status == "completed"
    assert call.envelope.structured == {"providers": ["pagerduty"]}
    assert recorder.requests[0].method == "GET"
    assert recorder.requests[0].url.path == "/providers/incident"


def test_query_teams_empty_result_is_empty_list() -> None:
    recorder = _Recorder()
    call = _call(recorder, "query-teams", {})
    assert call.status == "completed"
    assert call.error is None
    assert call.envelope.text == "[]"
    assert call.envelope.structured == []
    assert recorder.requests[0].method == "POST"
    assert recorder.requests[0].url.path == "/teams/query"
    assert recorder.body() == {}


def test_undeclared_fields_are_dropped_before_forwarding() -> None:
    recorder = _Recorder()
    call = _call(
        recorder,
        "query-teams",
        {
            "name": "velocity",
            "bogus": 1,
            "scope": {"service": "checkout", "cluster": "eu-1"},
            "metadata": {"anything": {"goes": True}},
        },
    )
    assert call.status == "completed"
    assert recorder.body() == {
        "name": "velocity",
        "scope": {"service": "checkout"},
        "metadata": {"anything": {"goes": True}},
    }


def test_describe_metrics_sends_scope_as_body() -> None:
    recorder = _Recorder({"/metrics/describe": (200, {"metrics": []})})
    call = _call(recorder, "describe-metrics", {"scope": {"service": "api"}})
    assert call.envelope.structured == {"metrics": []}
    assert recorder.body() == {"service": "api"}

    _call(recorder, "describe-metrics", {})
    assert recorder.body() == {}


def test_path_identifiers_are_url_encoded() -> None:
    recorder = _Recorder({"/teams/team/a b": (200, {"id": "team/a b", "name": "A"})})
    call = _call(recorder, "get-team", {"id": "team/a b"})
    assert recorder.requests[0].url.raw_path == b"/teams/team%2Fa%20b"
    assert recorder.requests[0].content == b""
    assert call.status == "completed"


def test_get_tools_hit_expected_paths() -> None:
    recorder = _Recorder()
    _call(recorder, "get-incident-timeline", {"id": "inc-1"})
    _call(recorder, "get-team-members", {"id": "team-velocity"})
    _call(recorder, "get-deployment", {"id": "deploy-1"})
    _call(recorder, "get-ticket", {"id": "TCK-9"})
    _call(recorder, "health", None)
    assert [(r.method, r.url.path) for r in recorder.requests] == [
        ("GET", "/incidents/inc-1/timeline"),
        ("GET", "/teams/team-velocity/members"),
        ("GET", "/deployments/deploy-1"),
        ("GET", "/tickets/TCK-9"),
        ("GET", "/health"),
    ]


def test_core_failure_is_returned_as_failed_call() -> None:
    recorder = _Recorder({"/teams/missing": (404, {"message": "Team not found"})})
    call = _call(recorder, "get-team", {"id": "missing"})
    assert call.status == "failed"
    assert call.envelope is None
    assert isinstance(call.error, CoreError)
    assert str(call.error) == "Core 404: Team not found"
    assert call.error_code == "runtime.http_error"


def test_validate_schema_skips_empty_schema() -> None:
    validate_schema({}, {"anything": 1}, "input")
    with pytest.raises(InputValidationError, match="output schema validation failed"):
        validate_schema({"type": "object", "required": ["id"]}, {}, "output")


def test_prune_unknown_recurses_into_arrays() -> None:
    schema = {
        "type": "object",
        "properties": {
            "filters": {
                "type": "array",
                "items": {"type": "object", "properties": {"field": {"type": "string"}}},
            }
        },
    }
    assert prune_unknown(schema, {"filters": [{"field": "a", "x": 1}], "y": 2}) == {
        "filters": [{"field": "a"}]
    }


def test_handler_exception_becomes_failed_call() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("boom")

    client = CoreClient(
        GatewaySettings(core_url="http://core.test"),
        structlog.get_logger(),
        transport=httpx.MockTransport(handler),
    )
    call = asyncio.run(build_registry(client).call("health", {}))
    assert call.status == "failed"
    assert call.error_code == "runtime.transport_error"
