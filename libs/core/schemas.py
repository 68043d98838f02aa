"""JSON Schema fragments shared by the tool contracts.

Input fragments describe what an agent may send; output fragments describe the
normalized records Core returns. Fields mirror Core's REST payloads (camelCase).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

Schema = Dict[str, Any]

STRING: Schema = {"type": "string"}
DATE_TIME: Schema = {"type": "string", "format": "date-time"}
POSITIVE_INT: Schema = {"type": "integer", "exclusiveMinimum": 0}
STRING_LIST: Schema = {"type": "array", "items": {"type": "string"}}
STRING_MAP: Schema = {"type": "object", "additionalProperties": {"type": "string"}}
ANY_MAP: Schema = {"type": "object", "additionalProperties": True}

CAPABILITIES = ("incident", "alert", "log", "metric", "ticket", "service")


def object_schema(
    properties: Dict[str, Schema],
    required: Iterable[str] = (),
    *,
    description: str | None = None,
) -> Schema:
    schema: Schema = {"type": "object", "properties": properties}
    required_fields = list(required)
    if required_fields:
        schema["required"] = required_fields
    if description:
        schema["description"] = description
    return schema


def array_of(item_schema: Schema) -> Schema:
    return {"type": "array", "items": item_schema}


QUERY_SCOPE = object_schema(
    {
        "service": STRING,
        "team": STRING,
        "environment": STRING,
    },
    description="Narrow results to a service, team and/or environment.",
)

ID_INPUT = object_schema({"id": {"type": "string", "minLength": 1}}, ["id"])

# -- inputs -----------------------------------------------------------------

INCIDENT_QUERY = object_schema(
    {
        "query": STRING,
        "statuses": STRING_LIST,
        "severities": STRING_LIST,
        "scope": QUERY_SCOPE,
        "limit": POSITIVE_INT,
        "metadata": ANY_MAP,
    }
)

ALERT_QUERY = object_schema(
    {
        "query": STRING,
        "statuses": STRING_LIST,
        "severities": STRING_LIST,
        "scope": QUERY_SCOPE,
        "limit": POSITIVE_INT,
        "metadata": ANY_MAP,
    }
)

LOG_FILTER = object_schema(
    {"field": STRING, "operator": STRING, "value": STRING},
    ["field", "operator", "value"],
)

LOG_QUERY = object_schema(
    {
        "expression": object_schema(
            {
                "search": STRING,
                "filters": array_of(LOG_FILTER),
                "severityIn": STRING_LIST,
            }
        ),
        "start": DATE_TIME,
        "end": DATE_TIME,
        "scope": QUERY_SCOPE,
        "limit": POSITIVE_INT,
        "metadata": ANY_MAP,
        "providers": STRING_LIST,
    },
    ["start", "end"],
)

METRIC_FILTER = object_schema(
    {"label": STRING, "operator": STRING, "value": STRING},
    ["label", "operator", "value"],
)

METRIC_QUERY = object_schema(
    {
        "expression": object_schema(
            {
                "metricName": STRING,
                "aggregation": STRING,
                "filters": array_of(METRIC_FILTER),
                "groupBy": STRING_LIST,
            },
            ["metricName"],
        ),
        "start": DATE_TIME,
        "end": DATE_TIME,
        "step": POSITIVE_INT,
        "scope": QUERY_SCOPE,
        "metadata": ANY_MAP,
    },
    ["start", "end", "step"],
)

DESCRIBE_METRICS_INPUT = object_schema({"scope": QUERY_SCOPE})

TICKET_QUERY = object_schema(
    {
        "query": STRING,
        "statuses": STRING_LIST,
        "assignees": STRING_LIST,
        "reporter": STRING,
        "scope": QUERY_SCOPE,
        "limit": POSITIVE_INT,
        "metadata": ANY_MAP,
    }
)

DEPLOYMENT_QUERY = object_schema(
    {
        "query": STRING,
        "statuses": STRING_LIST,
        "versions": STRING_LIST,
        "environments": STRING_LIST,
        "scope": QUERY_SCOPE,
        "limit": POSITIVE_INT,
        "metadata": ANY_MAP,
    }
)

SERVICE_QUERY = object_schema(
    {
        "ids": STRING_LIST,
        "name": STRING,
        "tags": STRING_MAP,
        "limit": POSITIVE_INT,
        "scope": QUERY_SCOPE,
        "metadata": ANY_MAP,
    }
)

TEAM_QUERY = object_schema(
    {
        "name": STRING,
        "tags": STRING_MAP,
        "scope": QUERY_SCOPE,
        "limit": POSITIVE_INT,
        "metadata": ANY_MAP,
    }
)

PROVIDERS_INPUT = object_schema(
    {"capability": {"type": "string", "enum": list(CAPABILITIES)}},
    ["capability"],
)

EMPTY_INPUT = object_schema({})

# -- outputs ----------------------------------------------------------------

INCIDENT = object_schema(
    {
        "id": STRING,
        "title": STRING,
        "description": STRING,
        "status": STRING,
        "severity": STRING,
        "service": STRING,
        "createdAt": DATE_TIME,
        "updatedAt": DATE_TIME,
        "fields": ANY_MAP,
        "metadata": ANY_MAP,
    },
    ["id", "title", "status", "severity", "createdAt", "updatedAt"],
)

TIMELINE_ENTRY = object_schema(
    {
        "id": STRING,
        "incidentId": STRING,
        "at": DATE_TIME,
        "kind": STRING,
        "body": STRING,
        "actor": ANY_MAP,
        "metadata": ANY_MAP,
    },
    ["id", "incidentId", "at", "kind", "body"],
)

ALERT = object_schema(
    {
        "id": STRING,
        "title": STRING,
        "description": STRING,
        "status": STRING,
        "severity": STRING,
        "service": STRING,
        "createdAt": DATE_TIME,
        "updatedAt": DATE_TIME,
        "fields": ANY_MAP,
        "metadata": ANY_MAP,
    },
    ["id", "title", "status", "severity", "createdAt", "updatedAt"],
)

LOG_ENTRY = object_schema(
    {
        "timestamp": DATE_TIME,
        "message": STRING,
        "severity": STRING,
        "service": STRING,
        "labels": STRING_MAP,
        "fields": ANY_MAP,
        "metadata": ANY_MAP,
    },
    ["timestamp", "message"],
)

METRIC_SERIES = object_schema(
    {
        "name": STRING,
        "service": STRING,
        "labels": ANY_MAP,
        "points": array_of(
            object_schema({"timestamp": DATE_TIME, "value": {"type": "number"}}, ["timestamp", "value"])
        ),
        "metadata": ANY_MAP,
    },
    ["name", "points"],
)

METRIC_DESCRIPTORS = object_schema(
    {
        "metrics": array_of(
            object_schema(
                {
                    "name": STRING,
                    "type": STRING,
                    "description": STRING,
                    "labels": STRING_LIST,
                    "unit": STRING,
                    "metadata": ANY_MAP,
                },
                ["name", "type", "description"],
            )
        )
    },
    ["metrics"],
)

TICKET = object_schema(
    {
        "id": STRING,
        "key": STRING,
        "title": STRING,
        "description": STRING,
        "status": STRING,
        "assignees": STRING_LIST,
        "reporter": STRING,
        "createdAt": DATE_TIME,
        "updatedAt": DATE_TIME,
        "fields": ANY_MAP,
        "metadata": ANY_MAP,
    },
    ["id", "title", "status", "createdAt", "updatedAt"],
)

DEPLOYMENT = object_schema(
    {
        "id": STRING,
        "service": STRING,
        "environment": STRING,
        "version": STRING,
        "status": STRING,
        "startedAt": DATE_TIME,
        "finishedAt": DATE_TIME,
        "url": STRING,
        "actor": ANY_MAP,
        "fields": ANY_MAP,
        "metadata": ANY_MAP,
    },
    ["id", "status", "startedAt", "finishedAt"],
)

SERVICE = object_schema(
    {"id": STRING, "name": STRING, "tags": STRING_MAP, "metadata": ANY_MAP},
    ["id", "name"],
)

TEAM = object_schema(
    {
        "id": STRING,
        "name": STRING,
        "parent": STRING,
        "tags": STRING_MAP,
        "metadata": ANY_MAP,
    },
    ["id", "name"],
)

TEAM_MEMBER = object_schema(
    {
        "id": STRING,
        "name": STRING,
        "email": STRING,
        "handle": STRING,
        "role": STRING,
        "metadata": ANY_MAP,
    },
    ["id", "name", "email", "handle", "role"],
)

PROVIDERS = object_schema({"providers": STRING_LIST}, ["providers"])

HEALTH = object_schema({"status": STRING})
