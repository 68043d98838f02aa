from __future__ import annotations

from typing import Dict, Tuple

from . import schemas
from .models import BodyMode, HttpMethod, ToolContract


def _query(
    name: str, title: str, description: str, path: str, input_schema: dict, output_schema: dict
) -> ToolContract:
    return ToolContract(
        name=name,
        title=title,
        description=description,
        method=HttpMethod.post,
        path=path,
        input_schema=input_schema,
        output_schema=output_schema,
        body=BodyMode.payload,
    )


def _get(
    name: str, title: str, description: str, path: str, input_schema: dict, output_schema: dict
) -> ToolContract:
    return ToolContract(
        name=name,
        title=title,
        description=description,
        method=HttpMethod.get,
        path=path,
        input_schema=input_schema,
        output_schema=output_schema,
    )


TOOL_CONTRACTS: Tuple[ToolContract, ...] = (
    # Incidents
    _query(
        "query-incidents",
        "Query Incidents",
        "Search incidents via POST /incidents/query using scope, status, or metadata filters "
        "when you need a targeted list to inspect.",
        "/incidents/query",
        schemas.INCIDENT_QUERY,
        schemas.array_of(schemas.INCIDENT),
    ),
    _get(
        "get-incident",
        "Get Incident",
        "Retrieve the full incident payload with GET /incidents/{id}.",
        "/incidents/{id}",
        schemas.ID_INPUT,
        schemas.INCIDENT,
    ),
    _get(
        "get-incident-timeline",
        "Get Incident Timeline",
        "Read the chronological audit trail for an incident through GET /incidents/{id}/timeline.",
        "/incidents/{id}/timeline",
        schemas.ID_INPUT,
        schemas.array_of(schemas.TIMELINE_ENTRY),
    ),
    # Alerts
    _query(
        "query-alerts",
        "Query Alerts",
        "Search normalized alert signals via POST /alerts/query for upstream detectors.",
        "/alerts/query",
        schemas.ALERT_QUERY,
        schemas.array_of(schemas.ALERT),
    ),
    # Logs
    _query(
        "query-logs",
        "Query Logs",
        "Pull scoped telemetry through POST /logs/query to gather evidence or validate "
        "hypotheses. Requires an ISO-8601 start and end.",
        "/logs/query",
        schemas.LOG_QUERY,
        schemas.array_of(schemas.LOG_ENTRY),
    ),
    # Metrics
    _query(
        "query-metrics",
        "Query Metrics",
        "Fetch normalized metric time series with POST /metrics/query to confirm trends or "
        "mitigation impact. Requires start, end and step (seconds).",
        "/metrics/query",
        schemas.METRIC_QUERY,
        schemas.array_of(schemas.METRIC_SERIES),
    ),
    ToolContract(
        name="describe-metrics",
        title="Describe Metrics",
        description="List available metrics with POST /metrics/describe to discover what "
        "metrics are exposed by the provider.",
        method=HttpMethod.post,
        path="/metrics/describe",
        input_schema=schemas.DESCRIBE_METRICS_INPUT,
        output_schema=schemas.METRIC_DESCRIPTORS,
        body=BodyMode.scope,
    ),
    # Tickets
    _query(
        "query-tickets",
        "Query Tickets",
        "Search the ticket provider via POST /tickets/query when you need downstream work "
        "items tied to an incident.",
        "/tickets/query",
        schemas.TICKET_QUERY,
        schemas.array_of(schemas.TICKET),
    ),
    _get(
        "get-ticket",
        "Get Ticket",
        "Retrieve the authoritative ticket record with GET /tickets/{id}.",
        "/tickets/{id}",
        schemas.ID_INPUT,
        schemas.TICKET,
    ),
    # Deployments
    _query(
        "query-deployments",
        "Query Deployments",
        "Search deployments via POST /deployments/query by status, version, environment or "
        "scope to correlate releases with incidents.",
        "/deployments/query",
        schemas.DEPLOYMENT_QUERY,
        schemas.array_of(schemas.DEPLOYMENT),
    ),
    _get(
        "get-deployment",
        "Get Deployment",
        "Retrieve a single deployment record with GET /deployments/{id}.",
        "/deployments/{id}",
        schemas.ID_INPUT,
        schemas.DEPLOYMENT,
    ),
    # Services
    _query(
        "query-services",
        "Query Services",
        "Look up service metadata by name, ID, or tags via POST /services/query to find "
        "owners or environments.",
        "/services/query",
        schemas.SERVICE_QUERY,
        schemas.array_of(schemas.SERVICE),
    ),
    # Teams
    _query(
        "query-teams",
        "Query Teams",
        "Search teams by name, tags or scope via POST /teams/query to find who owns a service.",
        "/teams/query",
        schemas.TEAM_QUERY,
        schemas.array_of(schemas.TEAM),
    ),
    _get(
        "get-team",
        "Get Team",
        "Retrieve a team record with GET /teams/{id}.",
        "/teams/{id}",
        schemas.ID_INPUT,
        schemas.TEAM,
    ),
    _get(
        "get-team-members",
        "Get Team Members",
        "List the members of a team and their roles with GET /teams/{id}/members.",
        "/teams/{id}/members",
        schemas.ID_INPUT,
        schemas.array_of(schemas.TEAM_MEMBER),
    ),
    # Providers
    _get(
        "list-providers",
        "List Capability Providers",
        "Inspect which back-end connectors are available for a capability via "
        "GET /providers/{capability}.",
        "/providers/{capability}",
        schemas.PROVIDERS_INPUT,
        schemas.PROVIDERS,
    ),
    _get(
        "health",
        "Core Health",
        "Check that OpsOrch Core is reachable and healthy via GET /health.",
        "/health",
        schemas.EMPTY_INPUT,
        schemas.HEALTH,
    ),
)

_CONTRACTS_BY_NAME: Dict[str, ToolContract] = {}
for _contract in TOOL_CONTRACTS:
    if _contract.name in _CONTRACTS_BY_NAME:
        raise ValueError(f"duplicate tool contract: {_contract.name}")
    _CONTRACTS_BY_NAME[_contract.name] = _contract


def lookup_contract(name: str) -> ToolContract | None:
    return _CONTRACTS_BY_NAME.get(name)


def list_contracts() -> list[ToolContract]:
    return list(TOOL_CONTRACTS)
