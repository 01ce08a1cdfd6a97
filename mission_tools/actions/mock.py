import logging
from typing import Any
from uuid import UUID, uuid4

from ..exceptions import DomainActionError
from ..models.catalog import ToolResource
from .base import DomainActions

logger = logging.getLogger(__name__)

PAGINATION_KEYS = ("page", "pageSize")


class MockDomainActions(DomainActions):
    """In-memory backend, for development and tests."""

    def __init__(self) -> None:
        self._items: dict[ToolResource, dict[UUID, dict[str, Any]]] = {
            resource: {} for resource in ToolResource
        }
        logger.info("MockDomainActions initialized.")

    def _get_item(self, resource: ToolResource, item_id: UUID) -> dict[str, Any]:
        try:
            return self._items[resource][item_id]
        except KeyError as error:
            raise DomainActionError(
                f"{resource.value} {item_id} not found", status_code=404
            ) from error

    def create(self, resource: ToolResource, payload: dict[str, Any]) -> Any:
        item_id = uuid4()
        item = {**payload, "id": str(item_id)}
        self._items[resource][item_id] = item
        logger.info(f"Created {resource.value} {item_id}")
        return item

    def get(self, resource: ToolResource, item_id: UUID) -> Any:
        return self._get_item(resource, item_id)

    def list(self, resource: ToolResource, filters: dict[str, Any]) -> Any:
        try:
            page = int(filters["page"])
            page_size = int(filters["pageSize"])
        except (TypeError, ValueError) as error:
            raise DomainActionError(
                f"invalid pagination: {error}", status_code=400
            ) from error
        if page < 1 or page_size < 1:
            raise DomainActionError(
                "page and pageSize must be positive", status_code=400
            )

        criteria = {
            key: value for key, value in filters.items() if key not in PAGINATION_KEYS
        }
        matching = [
            item
            for item in self._items[resource].values()
            if all(item.get(key) == value for key, value in criteria.items())
        ]
        start = (page - 1) * page_size
        return {
            "items": matching[start : start + page_size],
            "total": len(matching),
            "page": page,
            "pageSize": page_size,
        }

    def update(
        self, resource: ToolResource, item_id: UUID, payload: dict[str, Any]
    ) -> Any:
        item = self._get_item(resource, item_id)
        item.update({key: value for key, value in payload.items() if key != "id"})
        logger.info(f"Updated {resource.value} {item_id}")
        return item

    def delete(self, resource: ToolResource, item_id: UUID) -> Any:
        self._get_item(resource, item_id)
        del self._items[resource][item_id]
        logger.info(f"Deleted {resource.value} {item_id}")
        return {"deleted": True}
