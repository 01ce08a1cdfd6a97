"""Dereferencing of ``$ref`` pointers inside an OpenAPI document.

The document is turned once into a ``jsonref`` view where every reference
object is a lazy proxy. Proxies are never resolved implicitly: each hop is
looked up explicitly so that unsupported pointers, chains and cycles can be
reported with the pointer and the operation that used them.
"""

import logging
from typing import Any, Iterator
from urllib.parse import unquote

import jsonref  # type: ignore
from pydantic import ValidationError

from ..exceptions import ResolutionError
from ..models.schema import MAX_SCHEMA_DEPTH, SchemaNode, parse_schema

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "patch")
# keys holding nested schemas, everything else is copied as plain data
SCHEMA_KEYWORDS = ("allOf", "anyOf", "oneOf", "properties", "items")


def _plain(value: Any) -> Any:
    """Deep copy of ``value`` where unresolved references stay as ``$ref`` objects."""
    if isinstance(value, jsonref.JsonRef):
        return dict(value.__reference__)
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _merge_all_of(base: dict[str, Any], members: list[dict[str, Any]]) -> dict[str, Any]:
    merged = dict(base)
    properties: dict[str, Any] = dict(merged.get("properties", {}))
    required: list[str] = list(merged.get("required", []))
    for member in members:
        for name, schema in member.get("properties", {}).items():
            properties.setdefault(name, schema)
        for name in member.get("required", []):
            if name not in required:
                required.append(name)
        for key, item in member.items():
            if key not in ("properties", "required"):
                merged.setdefault(key, item)

    if properties:
        merged["properties"] = properties
        merged.setdefault("type", "object")
    if required:
        merged["required"] = required
    return merged


class ReferenceResolver:
    def __init__(self, document: dict[str, Any]) -> None:
        if not isinstance(document, dict):
            raise ResolutionError("OpenAPI document must be a JSON object")
        self._document = jsonref.JsonRef.replace_refs(document)
        # pointer -> fully inlined schema data
        self._schemas: dict[str, dict[str, Any]] = {}

    def _follow(self, reference: str, section: str, operation: str) -> Any:
        prefix = f"#/components/{section}/"
        if not reference.startswith(prefix):
            raise ResolutionError(
                f"unsupported reference, expected a '{prefix}...' pointer",
                pointer=reference,
                operation=operation,
            )
        # walked by hand, a bare JsonRef has no document to load the pointer from
        target: Any = self._document
        for part in reference[2:].split("/"):
            part = unquote(part).replace("~1", "/").replace("~0", "~")
            if isinstance(target, jsonref.JsonRef) or not isinstance(target, dict):
                target = None
                break
            target = target.get(part)
        if target is None:
            raise ResolutionError(
                "unresolvable reference", pointer=reference, operation=operation
            )
        return target

    def _follow_chain(
        self, reference: str, trail: tuple[str, ...], operation: str
    ) -> tuple[Any, tuple[str, ...]] | None:
        """Follow a schema reference through references to references.

        Returns the first schema that is not itself a reference along with every
        pointer visited, or ``None`` when the chain leads back into ``trail``.
        """
        chain = [reference]
        target = self._follow(reference, "schemas", operation)
        while isinstance(target, jsonref.JsonRef):
            next_reference = target.__reference__["$ref"]
            if next_reference in chain:
                raise ResolutionError(
                    "circular reference", pointer=next_reference, operation=operation
                )
            if next_reference in trail:
                return None
            chain.append(next_reference)
            target = self._follow(next_reference, "schemas", operation)
        return target, tuple(chain)

    def resolve(self, reference: str, operation: str = "") -> SchemaNode:
        """Dereference a ``#/components/schemas/<Name>`` pointer."""
        return self.resolve_schema(jsonref.JsonRef({"$ref": reference}), operation)

    def resolve_schema(self, raw: Any, operation: str = "") -> SchemaNode:
        data = self._to_node(raw, operation, (), 0)
        try:
            return parse_schema(data)
        except ValidationError as error:
            raise ResolutionError(
                f"malformed schema: {error}", operation=operation
            ) from error

    def _to_node(
        self, value: Any, operation: str, trail: tuple[str, ...], depth: int
    ) -> dict[str, Any]:
        if depth > MAX_SCHEMA_DEPTH:
            raise ResolutionError(
                f"schema nesting exceeds the maximum depth of {MAX_SCHEMA_DEPTH}",
                pointer=trail[-1] if trail else "",
                operation=operation,
            )

        if isinstance(value, jsonref.JsonRef):
            reference = value.__reference__["$ref"]
            if reference in trail:
                # recursive schema, the nested occurrence stays a reference
                return {"$ref": reference}
            if reference not in self._schemas:
                chain = self._follow_chain(reference, trail, operation)
                if chain is None:
                    return {"$ref": reference}
                target, chain_references = chain
                self._schemas[reference] = self._to_node(
                    target, operation, trail + chain_references, depth + 1
                )
            return self._schemas[reference]

        if not isinstance(value, dict):
            raise ResolutionError(
                f"schema must be a JSON object, got {type(value).__name__}",
                pointer=trail[-1] if trail else "",
                operation=operation,
            )

        node: dict[str, Any] = {}
        for key, item in value.items():
            match key:
                case "properties":
                    properties = self.plain_object(item, "properties", operation)
                    node[key] = {
                        name: self._to_node(schema, operation, trail, depth + 1)
                        for name, schema in properties.items()
                    }
                case "items":
                    node[key] = self._to_node(item, operation, trail, depth + 1)
                case "anyOf" | "oneOf":
                    node[key] = [
                        self._to_node(member, operation, trail, depth + 1)
                        for member in self._plain_list(item, key, operation)
                    ]
                case "allOf":
                    continue
                case _:
                    node[key] = _plain(item)

        if "allOf" in value:
            members = [
                self._to_node(member, operation, trail, depth + 1)
                for member in self._plain_list(value["allOf"], "allOf", operation)
            ]
            node = _merge_all_of(node, members)
        return node

    def _plain_list(self, value: Any, what: str, operation: str) -> list[Any]:
        if isinstance(value, jsonref.JsonRef) or not isinstance(value, list):
            raise ResolutionError(f"'{what}' must be a list", operation=operation)
        return value

    def plain_object(self, value: Any, what: str, operation: str = "") -> dict[str, Any]:
        if isinstance(value, jsonref.JsonRef):
            raise ResolutionError(
                f"references are not supported for {what}",
                pointer=value.__reference__["$ref"],
                operation=operation,
            )
        if not isinstance(value, dict):
            raise ResolutionError(f"'{what}' must be a JSON object", operation=operation)
        return value

    def resolve_component(
        self, value: Any, section: str, operation: str = ""
    ) -> dict[str, Any]:
        """Follow a (possibly chained) reference to a parameter or request body."""
        seen: list[str] = []
        while isinstance(value, jsonref.JsonRef):
            reference = value.__reference__["$ref"]
            if reference in seen:
                raise ResolutionError(
                    "circular reference", pointer=reference, operation=operation
                )
            seen.append(reference)
            value = self._follow(reference, section, operation)
        return self.plain_object(value, section, operation)

    def iter_operations(
        self,
    ) -> Iterator[tuple[str, str, dict[str, Any], list[Any]]]:
        """Yield ``(path, method, operation, path_parameters)`` in declaration order."""
        if "paths" not in self._document:
            raise ResolutionError("OpenAPI document has no 'paths'")
        paths = self.plain_object(self._document["paths"], "paths")
        for path, item in paths.items():
            path_item = self.plain_object(item, f"paths.{path}")
            shared_parameters = path_item.get("parameters", [])
            for method, operation in path_item.items():
                if method not in HTTP_METHODS:
                    continue
                label = f"{method.upper()} {path}"
                yield (
                    path,
                    method,
                    self.plain_object(operation, "operation", label),
                    self._plain_list(shared_parameters, "parameters", label),
                )
