from typing import Any

from ..exceptions import ToolArgumentError
from ..models.catalog import ToolDefinition
from ..models.schema import MAX_SCHEMA_DEPTH, ObjectSchema, SchemaNode, join_path


def validate_arguments(tool: ToolDefinition, arguments: Any) -> None:
    """Reject a tool call whose arguments miss a required field.

    Only the object/required shape is enforced, recursing into every
    object-typed property present in the arguments. Types, formats and enum
    values are advisory and left to the domain API.
    """
    _validate_node(
        tool_name=tool.name,
        schema=tool.input_schema,
        value={} if arguments is None else arguments,
        path="",
        depth=0,
    )


def _validate_node(
    tool_name: str, schema: SchemaNode, value: Any, path: str, depth: int
) -> None:
    if depth > MAX_SCHEMA_DEPTH:
        raise ToolArgumentError(
            tool_name, path, f"arguments nested deeper than {MAX_SCHEMA_DEPTH} levels"
        )

    match schema:
        case ObjectSchema():
            required = schema.required_names
            if not isinstance(value, dict):
                if required:
                    location = path or "arguments"
                    raise ToolArgumentError(
                        tool_name, path, f"object expected at '{location}'"
                    )
                return

            for name in required:
                if value.get(name) is None:
                    missing = join_path(path, name)
                    raise ToolArgumentError(
                        tool_name, missing, f"required parameter missing: {missing}"
                    )

            for name, child in schema.property_items():
                if isinstance(child, ObjectSchema) and value.get(name) is not None:
                    _validate_node(
                        tool_name=tool_name,
                        schema=child,
                        value=value[name],
                        path=join_path(path, name),
                        depth=depth + 1,
                    )
        case _:
            return
