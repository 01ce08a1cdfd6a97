"""JSON-Schema nodes shared by catalog generation, storage and validation.

Only the subset needed to describe tool inputs is modelled explicitly
(object/array/scalar types, properties, required, items, enum, format).
Anything else found in a schema (``default``, ``title``, vendor ``x-``
annotations such as enum labels...) is kept as extra data and written back
untouched.
"""

from typing import Annotated, Any, ClassVar, Literal, Self, TypeAlias, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    SerializerFunctionWrapHandler,
    Tag,
    TypeAdapter,
    model_serializer,
    model_validator,
)

SchemaType: TypeAlias = Literal[
    "object", "array", "string", "integer", "number", "boolean", "null"
]

# Hard limit for any recursive walk over schemas or argument payloads.
MAX_SCHEMA_DEPTH = 16


def join_path(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


class BaseSchema(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    kind: ClassVar[str] = "scalar"

    type: SchemaType | list[SchemaType] | None = None
    format: str | None = None
    description: str | None = None
    enum: list[Any] | None = None
    any_of: list["SchemaNode"] | None = Field(default=None, alias="anyOf")
    one_of: list["SchemaNode"] | None = Field(default=None, alias="oneOf")

    @property
    def types(self) -> tuple[str, ...]:
        if self.type is None:
            return ()
        if isinstance(self.type, list):
            return tuple(self.type)
        return (self.type,)

    @property
    def metadata(self) -> dict[str, Any]:
        """Annotations that are not part of the modelled subset."""
        return dict(self.model_extra or {})

    @property
    def is_nullable(self) -> bool:
        if "null" in self.types or self.metadata.get("nullable") is True:
            return True
        members = (self.any_of or []) + (self.one_of or [])
        return any("null" in member.types for member in members)

    @model_serializer(mode="wrap")
    def serialize_keywords(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        # unset modelled keywords are dropped, extra keywords are written as found
        extra = self.model_extra or {}
        return {
            key: value
            for key, value in handler(self).items()
            if value is not None or key in extra
        }

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ObjectSchema(BaseSchema):
    kind: ClassVar[str] = "object"

    properties: dict[str, "SchemaNode"] | None = None
    required: list[str] | None = None
    additional_properties: bool | dict[str, Any] | None = Field(
        default=None, alias="additionalProperties"
    )

    @model_validator(mode="after")
    def validate_unique_required(self) -> Self:
        names = self.required or []
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicated names in required list: {names}")
        return self

    @property
    def required_names(self) -> list[str]:
        return list(self.required or [])

    def property_items(self) -> list[tuple[str, "SchemaNode"]]:
        return list((self.properties or {}).items())

    def get_property(self, name: str) -> "SchemaNode | None":
        return (self.properties or {}).get(name)

    def undeclared_required(self) -> list[str]:
        properties = self.properties or {}
        return [name for name in self.required_names if name not in properties]


class ArraySchema(BaseSchema):
    kind: ClassVar[str] = "array"

    items: "SchemaNode | None" = None


class ScalarSchema(BaseSchema):
    pass


def _schema_kind(value: Any) -> str:
    if isinstance(value, BaseSchema):
        return value.kind
    if not isinstance(value, dict):
        return "scalar"

    raw_type = value.get("type")
    types = raw_type if isinstance(raw_type, list) else [raw_type]
    if "object" in types:
        return "object"
    if "array" in types:
        return "array"
    if raw_type is None and "properties" in value:
        return "object"
    if raw_type is None and "items" in value:
        return "array"
    return "scalar"


SchemaNode: TypeAlias = Annotated[
    Union[
        Annotated[ObjectSchema, Tag("object")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[ScalarSchema, Tag("scalar")],
    ],
    Discriminator(_schema_kind),
]

BaseSchema.model_rebuild()
ObjectSchema.model_rebuild()
ArraySchema.model_rebuild()
ScalarSchema.model_rebuild()

_schema_adapter: TypeAdapter[SchemaNode] = TypeAdapter(SchemaNode)


def parse_schema(data: Any) -> SchemaNode:
    return _schema_adapter.validate_python(data)


def with_annotations(node: SchemaNode, **annotations: Any) -> SchemaNode:
    """Return a copy of ``node`` with the given keys set (aliases allowed)."""
    return parse_schema({**node.to_json(), **annotations})
