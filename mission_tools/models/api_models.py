from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .catalog import ToolDefinition
from .schema import ObjectSchema

T = TypeVar("T")


class HealthState(BaseModel):
    status: Literal["OK", "ERROR"]
    tools: int = Field(default=0, description="Number of tools loaded at startup.")


class ToolList(BaseModel):
    tools: list[ToolDefinition]


class ToolField(BaseModel):
    path: str = Field(
        description="Dot-path of the field inside the tool arguments.",
        examples=["payload.name"],
    )
    required: bool = Field(
        description="Whether the field must be present and not null."
    )
    types: list[str] = Field(default=[], examples=[["string"], ["string", "null"]])
    format: str | None = Field(default=None, examples=["uuid", "date-time"])
    description: str | None = None
    enum: list[Any] | None = None
    metadata: dict[str, Any] = Field(
        default={},
        description="Advisory annotations, e.g. enum labels or defaults. Not enforced.",
    )


class ToolHelp(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    required: list[str] = Field(description="Top-level required argument names.")
    input_schema: ObjectSchema = Field(alias="inputSchema")
    fields: list[ToolField]
    example: dict[str, Any] = Field(
        default={},
        description="Arguments accepted by the tool, with placeholder values.",
        examples=[{"id": "00000000-0000-0000-0000-000000000001"}],
    )


class ToolCallRequest(BaseModel):
    arguments: dict[str, Any] | None = Field(
        default=None,
        description="Tool arguments, validated against the tool inputSchema.",
        examples=[{"id": "5f0c4f5e-0b55-4a43-a5a6-2f5b2b1f2c10"}],
    )


class ToolCallResult(BaseModel):
    name: str
    result: Any = None


class ResponseMessages(BaseModel):
    info: list[str] = []
    warning: list[str] = []
    error: list[str] = []


class ApiResponse(BaseModel, Generic[T]):
    data: T
    messages: ResponseMessages = ResponseMessages()


HealthzResponse = ApiResponse[HealthState]
ToolListResponse = ApiResponse[ToolList]
ToolHelpResponse = ApiResponse[ToolHelp]
ToolCallResponse = ApiResponse[ToolCallResult]
