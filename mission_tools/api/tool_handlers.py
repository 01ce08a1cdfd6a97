import logging
from types import MappingProxyType
from typing import Any, Mapping

from fastapi import HTTPException, status

from ..actions.base import DomainActions
from ..catalog.arguments import validate_arguments
from ..exceptions import DomainActionError, ToolArgumentError, UnknownToolError
from ..models.api_models import ToolCallResult, ToolField, ToolHelp, ToolList
from ..models.catalog import ToolDefinition
from ..models.schema import (
    MAX_SCHEMA_DEPTH,
    ArraySchema,
    ObjectSchema,
    SchemaNode,
    join_path,
)
from ..tool_map import ToolMap

logger = logging.getLogger(__name__)


def _get_tool(tool_name: str, tool_map: ToolMap) -> ToolDefinition:
    try:
        return tool_map[tool_name]
    except KeyError as error:
        raise UnknownToolError(tool_name) from error


def _flatten_fields(schema: ObjectSchema, prefix: str = "", depth: int = 0) -> list[ToolField]:
    fields: list[ToolField] = []
    if depth > MAX_SCHEMA_DEPTH:
        return fields

    required = schema.required_names
    for name, child in schema.property_items():
        path = join_path(prefix, name)
        fields.append(
            ToolField(
                path=path,
                required=name in required,
                types=list(child.types),
                format=child.format,
                description=child.description,
                enum=child.enum,
                metadata=child.metadata,
            )
        )
        if isinstance(child, ObjectSchema):
            fields.extend(_flatten_fields(child, prefix=path, depth=depth + 1))
    return fields


# placeholder values for the help examples, by format then by type
EXAMPLE_FORMAT_VALUES: Mapping[str, Any] = MappingProxyType(
    {
        "uuid": "00000000-0000-0000-0000-000000000001",
        "date-time": "2026-01-01T00:00:00Z",
        "date": "2026-01-01",
        "email": "user@example.com",
    }
)
EXAMPLE_TYPE_VALUES: Mapping[str, Any] = MappingProxyType(
    {"string": "string", "integer": 1, "number": 1.0, "boolean": True}
)


def _example_value(schema: SchemaNode, depth: int) -> Any:
    metadata = schema.metadata
    if metadata.get("default") is not None:
        return metadata["default"]
    if schema.enum:
        return schema.enum[0]
    members = [
        member
        for member in (schema.any_of or []) + (schema.one_of or [])
        if "null" not in member.types
    ]
    if members:
        return _example_value(members[0], depth + 1)

    match schema:
        case ObjectSchema():
            return _build_example(schema, depth + 1)
        case ArraySchema(items=None):
            return []
        case ArraySchema():
            if depth > MAX_SCHEMA_DEPTH:
                return []
            return [_example_value(schema.items, depth + 1)]

    if schema.format in EXAMPLE_FORMAT_VALUES:
        return EXAMPLE_FORMAT_VALUES[schema.format]
    for schema_type in schema.types:
        if schema_type in EXAMPLE_TYPE_VALUES:
            return EXAMPLE_TYPE_VALUES[schema_type]
    return None


def _build_example(schema: ObjectSchema, depth: int = 0) -> dict[str, Any]:
    """Arguments with every required field and every field that has a default."""
    example: dict[str, Any] = {}
    if depth > MAX_SCHEMA_DEPTH:
        return example

    required = schema.required_names
    for name, child in schema.property_items():
        if name in required or child.metadata.get("default") is not None:
            example[name] = _example_value(child, depth)
    return example


def list_tools(tool_map: ToolMap) -> ToolList:
    logger.debug(f"Listing {len(tool_map)} tools")
    return ToolList(tools=list(tool_map.values()))


def get_tool_help(tool_name: str, tool_map: ToolMap) -> ToolHelp:
    logger.info(f"Retrieving help for tool: {tool_name}")
    try:
        tool = _get_tool(tool_name, tool_map)
    except UnknownToolError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ToolHelp(
        name=tool.name,
        description=tool.description,
        required=tool.input_schema.required_names,
        input_schema=tool.input_schema,
        fields=_flatten_fields(tool.input_schema),
        example=_build_example(tool.input_schema),
    )


def call_tool(
    tool_name: str,
    arguments: dict[str, Any] | None,
    tool_map: ToolMap,
    domain_actions: DomainActions,
) -> ToolCallResult:
    logger.info(f"Calling tool: {tool_name}")
    try:
        tool = _get_tool(tool_name, tool_map)
        validate_arguments(tool, arguments)
        action = tool.action
        if action is None:
            # listed in the catalog but without a domain operation behind it
            raise UnknownToolError(tool_name)
        result = domain_actions.execute(action, arguments or {})
        logger.info(f"Tool {tool_name} called successfully")
        return ToolCallResult(name=tool_name, result=result)

    except UnknownToolError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    except ToolArgumentError as e:
        logger.warning(str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )

    except DomainActionError as e:
        logger.error(f"Domain action for tool {tool_name} failed: {str(e)}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
