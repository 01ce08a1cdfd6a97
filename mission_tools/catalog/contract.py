import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence, TypeAlias

from ..models.catalog import ToolDefinition
from ..models.schema import ObjectSchema, join_path

logger = logging.getLogger(__name__)

# tool name -> dot-paths that must be declared required in its inputSchema,
# tools without dot-paths only have to be present
RequiredFieldContract: TypeAlias = Mapping[str, Sequence[str]]

REQUIRED_FIELD_CONTRACT: RequiredFieldContract = MappingProxyType(
    {
        "mission_create": (
            "name",
            "startDate",
            "endDate",
            "status",
            "scopeType",
            "scopeId",
        ),
        "mission_list": (),
        "mission_get": ("id",),
        "mission_update": ("id", "payload", "payload.name"),
        "mission_delete": ("id",),
        "mission_metric_create": ("missionId", "name", "type"),
        "mission_metric_list": (),
        "mission_metric_get": ("id",),
        "mission_metric_update": ("id", "payload", "payload.name"),
        "mission_metric_delete": ("id",),
        "metric_checkin_create": ("missionMetricId", "checkinDate", "confidenceLevel"),
        "metric_checkin_list": (),
        "metric_checkin_get": ("id",),
        "metric_checkin_update": ("id", "payload"),
        "metric_checkin_delete": ("id",),
    }
)


class ContractValidator:
    """Checks generated tools against the fixed required-field contract."""

    def __init__(self, contract: RequiredFieldContract = REQUIRED_FIELD_CONTRACT) -> None:
        self.contract = contract

    def validate_required_fields(self, tools: Iterable[ToolDefinition]) -> list[str]:
        """Return one message per violation, an empty list means the tools are valid."""
        by_name = {tool.name: tool for tool in tools}
        errors: list[str] = []
        for tool_name, dot_paths in self.contract.items():
            tool = by_name.get(tool_name)
            if tool is None:
                errors.append(f"required tool missing from catalog: {tool_name}")
                continue

            for dot_path in dot_paths:
                error = self._check_path(
                    schema=tool.input_schema,
                    segments=dot_path.split("."),
                    prefix="",
                    tool_name=tool_name,
                    dot_path=dot_path,
                )
                if error:
                    errors.append(error)

        if errors:
            logger.debug(f"Contract validation found {len(errors)} errors")
        return errors

    def _check_path(
        self,
        schema: ObjectSchema,
        segments: list[str],
        prefix: str,
        tool_name: str,
        dot_path: str,
    ) -> str | None:
        name, rest = segments[0], segments[1:]
        current = join_path(prefix, name)
        child = schema.get_property(name)
        if child is None:
            return (
                f"{tool_name}: required field '{dot_path}' is missing, "
                f"'{current}' is not a declared property"
            )
        if name not in schema.required_names:
            return (
                f"{tool_name}: required field '{dot_path}' is missing, "
                f"'{current}' is not in the required list"
            )
        if not rest:
            return None

        if not isinstance(child, ObjectSchema):
            return (
                f"{tool_name}: required field '{dot_path}' is missing, "
                f"'{current}' is not an object schema"
            )
        return self._check_path(
            schema=child,
            segments=rest,
            prefix=current,
            tool_name=tool_name,
            dot_path=dot_path,
        )


def validate_required_fields(tools: Iterable[ToolDefinition]) -> list[str]:
    return ContractValidator().validate_required_fields(tools)
