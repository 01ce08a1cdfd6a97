import json
from pathlib import Path
from typing import Any

from mission_tools.models.catalog import Catalog, ToolDefinition

MISSION_ID = "5f0c4f5e-0b55-4a43-a5a6-2f5b2b1f2c10"

EXPECTED_TOOL_NAMES = [
    "mission_create",
    "mission_list",
    "mission_get",
    "mission_update",
    "mission_delete",
    "mission_metric_create",
    "mission_metric_list",
    "mission_metric_get",
    "mission_metric_update",
    "mission_metric_delete",
    "metric_checkin_create",
    "metric_checkin_list",
    "metric_checkin_get",
    "metric_checkin_update",
    "metric_checkin_delete",
]


def _json_body(schema: dict[str, Any]) -> dict[str, Any]:
    return {"required": True, "content": {"application/json": {"schema": schema}}}


def _schema_ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def get_sample_openapi() -> dict[str, Any]:
    """OpenAPI document shaped like the one published by the mission API."""
    return {
        "openapi": "3.1.0",
        "info": {"title": "Mission API", "version": "v1"},
        "paths": {
            "/api/missions": {
                "post": {
                    "summary": "Create a mission.",
                    "requestBody": _json_body(_schema_ref("CreateMissionRequest")),
                },
                "get": {
                    "summary": "List missions.",
                    "parameters": [
                        {"$ref": "#/components/parameters/Search"},
                        {
                            "name": "status",
                            "in": "query",
                            "schema": _schema_ref("MissionStatus"),
                        },
                        {"$ref": "#/components/parameters/Page"},
                        {"$ref": "#/components/parameters/PageSize"},
                    ],
                },
            },
            "/api/missions/{id}": {
                "parameters": [{"$ref": "#/components/parameters/Id"}],
                "get": {"summary": "Get a mission."},
                "patch": {
                    "summary": "Update a mission.",
                    "requestBody": {"$ref": "#/components/requestBodies/PatchMission"},
                },
                "put": {
                    "summary": "Replace a mission.",
                    "requestBody": {"$ref": "#/components/requestBodies/PatchMission"},
                },
                "delete": {"summary": "Delete a mission."},
            },
            "/api/missions/{id}/progress": {
                "get": {"summary": "Get the progress of a mission."},
            },
            "/api/mission-metrics": {
                "post": {
                    "description": "Create a metric for a mission.",
                    "requestBody": _json_body(_schema_ref("CreateMissionMetricRequest")),
                },
                "get": {
                    "summary": "List mission metrics.",
                    "parameters": [
                        {
                            "name": "missionId",
                            "in": "query",
                            "required": True,
                            "schema": {"type": "string", "format": "uuid"},
                        },
                        {"$ref": "#/components/parameters/Page"},
                        {"$ref": "#/components/parameters/PageSize"},
                    ],
                },
            },
            "/api/mission-metrics/{id}": {
                "get": {"summary": "Get a mission metric."},
                "patch": {
                    "summary": "Update a mission metric.",
                    "requestBody": _json_body(_schema_ref("PatchMissionMetricRequest")),
                },
                "delete": {},
            },
            "/api/metric-checkins": {
                "post": {
                    "summary": "Register a metric check-in.",
                    "requestBody": _json_body(_schema_ref("CreateMetricCheckinRequest")),
                },
                "get": {"summary": "List metric check-ins."},
            },
            "/api/metric-checkins/{checkinId}": {
                "get": {"summary": "Get a metric check-in."},
                "patch": {
                    "summary": "Correct a metric check-in.",
                    "requestBody": _json_body(_schema_ref("PatchMetricCheckinRequest")),
                },
                "delete": {"summary": "Delete a metric check-in."},
            },
        },
        "components": {
            "schemas": {
                "MissionStatus": {
                    "type": "string",
                    "enum": ["Planned", "Active", "Completed", "Cancelled"],
                    "x-enumNames": ["Planned", "Active", "Completed", "Cancelled"],
                },
                "MissionScopeType": {
                    "type": "string",
                    "enum": ["Organization", "Workspace", "Team", "Collaborator"],
                },
                "MetricType": {
                    "type": "string",
                    "enum": ["Qualitative", "Quantitative"],
                },
                "CreateMissionRequest": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "description": {"type": ["string", "null"]},
                        "startDate": {"type": "string", "format": "date-time"},
                        "endDate": {"type": "string", "format": "date-time"},
                        "status": _schema_ref("MissionStatus"),
                        "scopeType": _schema_ref("MissionScopeType"),
                        "scopeId": {"type": "string", "format": "uuid"},
                    },
                    "required": [
                        "name",
                        "startDate",
                        "endDate",
                        "status",
                        "scopeType",
                        "scopeId",
                    ],
                },
                "PatchMissionRequest": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "description": {"type": ["string", "null"]},
                        "status": {
                            "anyOf": [_schema_ref("MissionStatus"), {"type": "null"}]
                        },
                    },
                    "required": ["name"],
                },
                "MetricBase": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "required": ["name"],
                },
                "CreateMissionMetricRequest": {
                    "allOf": [
                        _schema_ref("MetricBase"),
                        {
                            "type": "object",
                            "properties": {
                                "missionId": {"type": "string", "format": "uuid"},
                                "type": _schema_ref("MetricType"),
                            },
                            "required": ["missionId", "type"],
                        },
                    ]
                },
                "PatchMissionMetricRequest": _schema_ref("MetricBase"),
                "CreateMetricCheckinRequest": {
                    "type": "object",
                    "properties": {
                        "missionMetricId": {"type": "string", "format": "uuid"},
                        "value": {"type": ["number", "null"]},
                        "checkinDate": {"type": "string", "format": "date-time"},
                        "note": {"type": "string", "nullable": True},
                        "confidenceLevel": {"type": "integer"},
                    },
                },
                "PatchMetricCheckinRequest": {
                    "type": "object",
                    "properties": {
                        "value": {"type": ["number", "null"]},
                        "note": {"type": ["string", "null"]},
                    },
                },
            },
            "parameters": {
                "Id": {
                    "name": "id",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "string", "format": "uuid"},
                },
                "Search": {
                    "name": "search",
                    "in": "query",
                    "description": "Filter on the name.",
                    "schema": {"type": "string"},
                },
                "Page": {
                    "name": "page",
                    "in": "query",
                    "schema": {"type": "integer", "format": "int32"},
                },
                "PageSize": {
                    "name": "pageSize",
                    "in": "query",
                    "schema": {"type": "integer", "format": "int32"},
                },
            },
            "requestBodies": {
                "PatchMission": _json_body(_schema_ref("PatchMissionRequest")),
            },
        },
    }


def get_tool(catalog: Catalog, name: str) -> ToolDefinition:
    return next(tool for tool in catalog.tools if tool.name == name)


def make_tool(name: str, input_schema: dict[str, Any], **overrides) -> ToolDefinition:
    params = {
        "name": name,
        "description": f"{name} description",
        "inputSchema": input_schema,
    }
    params.update(overrides)
    return ToolDefinition.model_validate(params)


def get_mission_payload(**overrides) -> dict[str, Any]:
    payload = {
        "name": "Grow the user base",
        "startDate": "2026-01-01T00:00:00Z",
        "endDate": "2026-03-31T00:00:00Z",
        "status": "Planned",
        "scopeType": "Team",
        "scopeId": "0c5d7a1e-2f77-4a7e-9d8e-2c8f7b6f0e11",
    }
    payload.update(overrides)
    return payload


def write_raw_catalog(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data))
