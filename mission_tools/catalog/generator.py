import logging
import re
from types import MappingProxyType
from typing import Any, Mapping

from ..exceptions import ResolutionError
from ..models.catalog import (
    RESOURCE_ROUTES,
    Catalog,
    ToolAction,
    ToolDefinition,
    ToolVerb,
)
from ..models.schema import ObjectSchema, SchemaNode, ScalarSchema, with_annotations
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)

ID_SCHEMA: Mapping[str, Any] = MappingProxyType({"type": "string", "format": "uuid"})
PAGINATION_DEFAULTS: Mapping[str, int] = MappingProxyType({"page": 1, "pageSize": 10})

COLLECTION_VERBS: Mapping[str, ToolVerb] = MappingProxyType(
    {"post": ToolVerb.CREATE, "get": ToolVerb.LIST}
)
ITEM_VERBS: Mapping[str, ToolVerb] = MappingProxyType(
    {
        "get": ToolVerb.GET,
        "put": ToolVerb.UPDATE,
        "patch": ToolVerb.UPDATE,
        "delete": ToolVerb.DELETE,
    }
)

DEFAULT_DESCRIPTIONS: Mapping[ToolVerb, str] = MappingProxyType(
    {
        ToolVerb.CREATE: "Create a {label}.",
        ToolVerb.GET: "Get a {label} by id.",
        ToolVerb.LIST: "List {label} records, optionally filtered.",
        ToolVerb.UPDATE: "Update a {label}.",
        ToolVerb.DELETE: "Delete a {label}.",
    }
)


def classify(path: str, method: str) -> ToolAction | None:
    """Map a route template and HTTP method to the CRUD action it implements."""
    path = path.rstrip("/")
    method = method.lower()
    for resource, route in RESOURCE_ROUTES.items():
        if path == route:
            verb = COLLECTION_VERBS.get(method)
        elif re.fullmatch(re.escape(route) + r"/\{[^/{}]+\}", path):
            verb = ITEM_VERBS.get(method)
        else:
            continue
        return ToolAction(resource=resource, verb=verb) if verb else None

    return None


def default_description(action: ToolAction) -> str:
    label = action.resource.value.replace("_", " ")
    return DEFAULT_DESCRIPTIONS[action.verb].format(label=label)


def _object_schema(
    properties: dict[str, Any], required: list[str]
) -> ObjectSchema:
    data: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        data["required"] = required
    data["additionalProperties"] = False
    return ObjectSchema.model_validate(data)


class CatalogGenerator:
    """Builds one tool per recognised CRUD operation of an OpenAPI document."""

    def generate(self, document: dict[str, Any]) -> Catalog:
        resolver = ReferenceResolver(document)
        tools: list[ToolDefinition] = []
        seen: set[str] = set()
        for path, method, operation, path_parameters in resolver.iter_operations():
            action = classify(path, method)
            if action is None:
                logger.debug(f"Skipping {method.upper()} {path}, not a tool action")
                continue

            if action.tool_name in seen:
                logger.warning(
                    f"Ignoring {method.upper()} {path}, {action.tool_name} is "
                    "already generated from an earlier operation"
                )
                continue

            tool = ToolDefinition(
                name=action.tool_name,
                description=self._description(action, operation),
                input_schema=self._input_schema(
                    resolver=resolver,
                    action=action,
                    operation=operation,
                    path_parameters=path_parameters,
                    label=f"{method.upper()} {path}",
                ),
            )
            logger.debug(f"Generated tool {tool.name} from {method.upper()} {path}")
            seen.add(tool.name)
            tools.append(tool)

        logger.info(f"Generated {len(tools)} tools")
        return Catalog(tools=tuple(tools))

    def _description(self, action: ToolAction, operation: dict[str, Any]) -> str:
        for key in ("summary", "description"):
            text = operation.get(key)
            if isinstance(text, str) and text.strip():
                return text.strip()
        return default_description(action)

    def _input_schema(
        self,
        resolver: ReferenceResolver,
        action: ToolAction,
        operation: dict[str, Any],
        path_parameters: list[Any],
        label: str,
    ) -> ObjectSchema:
        match action.verb:
            case ToolVerb.CREATE:
                return self._body_schema(resolver, operation, label)
            case ToolVerb.GET | ToolVerb.DELETE:
                return _object_schema({"id": dict(ID_SCHEMA)}, ["id"])
            case ToolVerb.LIST:
                return self._query_schema(resolver, operation, path_parameters, label)
            case ToolVerb.UPDATE:
                payload = self._body_schema(resolver, operation, label)
                return _object_schema(
                    {"id": dict(ID_SCHEMA), "payload": payload.to_json()},
                    ["id", "payload"],
                )

    def _query_schema(
        self,
        resolver: ReferenceResolver,
        operation: dict[str, Any],
        path_parameters: list[Any],
        label: str,
    ) -> ObjectSchema:
        parameters: dict[str, dict[str, Any]] = {}
        operation_parameters = operation.get("parameters", [])
        if not isinstance(operation_parameters, list):
            raise ResolutionError("'parameters' must be a list", operation=label)
        # operation level parameters override the path level ones with the same name
        for raw in [*path_parameters, *operation_parameters]:
            parameter = resolver.resolve_component(raw, "parameters", label)
            if parameter.get("in") != "query":
                continue
            name = parameter.get("name")
            if not isinstance(name, str) or not name:
                raise ResolutionError("query parameter without a name", operation=label)
            parameters[name] = parameter

        properties: dict[str, Any] = {}
        required: list[str] = []
        for name, parameter in parameters.items():
            schema = self._parameter_schema(resolver, parameter, label)
            if name in PAGINATION_DEFAULTS:
                schema = with_annotations(schema, default=PAGINATION_DEFAULTS[name])
            elif parameter.get("required") is True:
                required.append(name)
            properties[name] = schema.to_json()

        return _object_schema(properties, required)

    def _parameter_schema(
        self, resolver: ReferenceResolver, parameter: dict[str, Any], label: str
    ) -> SchemaNode:
        if "schema" in parameter:
            schema = resolver.resolve_schema(parameter["schema"], label)
        else:
            schema = ScalarSchema(type="string")
        description = parameter.get("description")
        if description and not schema.description:
            schema = with_annotations(schema, description=description)
        return schema

    def _body_schema(
        self, resolver: ReferenceResolver, operation: dict[str, Any], label: str
    ) -> ObjectSchema:
        if "requestBody" not in operation:
            raise ResolutionError("write operation without a requestBody", operation=label)
        body = resolver.resolve_component(
            operation["requestBody"], "requestBodies", label
        )
        content = resolver.plain_object(body.get("content"), "content", label)
        media = next(
            (
                value
                for media_type, value in content.items()
                if media_type.split(";")[0].strip() == "application/json"
            ),
            None,
        )
        if media is None:
            raise ResolutionError(
                "requestBody has no application/json content", operation=label
            )
        media = resolver.plain_object(media, "application/json", label)
        if "schema" not in media:
            raise ResolutionError(
                "requestBody has no application/json schema", operation=label
            )

        schema = resolver.resolve_schema(media["schema"], label)
        if not isinstance(schema, ObjectSchema) and schema.types:
            raise ResolutionError(
                f"requestBody schema must be an object, got {list(schema.types)}",
                operation=label,
            )

        data = schema.to_json()
        data.setdefault("type", "object")
        data.setdefault("properties", {})
        if data.get("additionalProperties") is None:
            data["additionalProperties"] = False
        body_schema = ObjectSchema.model_validate(data)
        if body_schema.required is None:
            required = [
                name
                for name, prop in body_schema.property_items()
                if not prop.is_nullable
            ]
            if required:
                body_schema = ObjectSchema.model_validate({**data, "required": required})
        return body_schema


def generate_catalog(document: dict[str, Any]) -> Catalog:
    return CatalogGenerator().generate(document)
