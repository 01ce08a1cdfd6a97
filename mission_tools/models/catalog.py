from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .schema import ObjectSchema

CATALOG_VERSION = 1


class ToolResource(str, Enum):
    MISSION = "mission"
    MISSION_METRIC = "mission_metric"
    METRIC_CHECKIN = "metric_checkin"


class ToolVerb(str, Enum):
    CREATE = "create"
    GET = "get"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"


# Collection route of every resource, the item route appends one `{param}` segment.
RESOURCE_ROUTES: Mapping[ToolResource, str] = MappingProxyType(
    {
        ToolResource.MISSION: "/api/missions",
        ToolResource.MISSION_METRIC: "/api/mission-metrics",
        ToolResource.METRIC_CHECKIN: "/api/metric-checkins",
    }
)


class ToolAction(BaseModel):
    """Domain operation a tool name is dispatched to."""

    model_config = ConfigDict(frozen=True)

    resource: ToolResource
    verb: ToolVerb

    @property
    def tool_name(self) -> str:
        return f"{self.resource.value}_{self.verb.value}"

    @property
    def collection_route(self) -> str:
        return RESOURCE_ROUTES[self.resource]

    @classmethod
    def from_tool_name(cls, tool_name: str) -> "ToolAction | None":
        return DOMAIN_ACTIONS.get(tool_name)


DOMAIN_ACTIONS: Mapping[str, ToolAction] = MappingProxyType(
    {
        action.tool_name: action
        for action in (
            ToolAction(resource=resource, verb=verb)
            for resource in ToolResource
            for verb in ToolVerb
        )
    }
)


class ToolDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(min_length=1)
    input_schema: ObjectSchema = Field(alias="inputSchema")

    @field_validator("input_schema")
    @classmethod
    def validate_object_input(cls, value: ObjectSchema) -> ObjectSchema:
        if "object" not in value.types:
            raise ValueError("inputSchema must be of type 'object'")
        return value

    @property
    def action(self) -> ToolAction | None:
        return ToolAction.from_tool_name(self.name)


class Catalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = CATALOG_VERSION
    tools: tuple[ToolDefinition, ...] = ()

    @model_validator(mode="after")
    def validate_unique_names(self) -> Self:
        seen: set[str] = set()
        duplicated = []
        for tool in self.tools:
            if tool.name in seen:
                duplicated.append(tool.name)
            seen.add(tool.name)
        if duplicated:
            raise ValueError(f"Duplicated tool names in catalog: {duplicated}")
        return self

    @property
    def tool_names(self) -> list[str]:
        return [tool.name for tool in self.tools]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CatalogDiff(BaseModel):
    identical: bool
    details: str = ""
