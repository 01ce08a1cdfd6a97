import logging
from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from ..exceptions import ToolArgumentError
from ..models.catalog import ToolAction, ToolResource, ToolVerb

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


def parse_id(action: ToolAction, arguments: dict[str, Any]) -> UUID:
    try:
        return UUID(str(arguments["id"]))
    except (KeyError, ValueError) as error:
        raise ToolArgumentError(action.tool_name, "id", "id must be a UUID") from error


def list_filters(arguments: dict[str, Any]) -> dict[str, Any]:
    """Query string for a list call, pagination always set."""
    filters = {name: value for name, value in arguments.items() if value is not None}
    filters.setdefault("page", DEFAULT_PAGE)
    filters.setdefault("pageSize", DEFAULT_PAGE_SIZE)
    return filters


class DomainActions(ABC):
    """Backend that performs the CRUD operation a validated tool call maps to."""

    def execute(self, action: ToolAction, arguments: dict[str, Any]) -> Any:
        logger.info(f"Executing {action.tool_name}")
        match action.verb:
            case ToolVerb.CREATE:
                return self.create(action.resource, arguments)
            case ToolVerb.GET:
                return self.get(action.resource, parse_id(action, arguments))
            case ToolVerb.LIST:
                return self.list(action.resource, list_filters(arguments))
            case ToolVerb.UPDATE:
                return self.update(
                    action.resource, parse_id(action, arguments), arguments["payload"]
                )
            case ToolVerb.DELETE:
                return self.delete(action.resource, parse_id(action, arguments))

    @abstractmethod
    def create(self, resource: ToolResource, payload: dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def get(self, resource: ToolResource, item_id: UUID) -> Any:
        pass

    @abstractmethod
    def list(self, resource: ToolResource, filters: dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def update(
        self, resource: ToolResource, item_id: UUID, payload: dict[str, Any]
    ) -> Any:
        pass

    @abstractmethod
    def delete(self, resource: ToolResource, item_id: UUID) -> Any:
        pass
