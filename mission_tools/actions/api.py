import logging
from typing import Any
from uuid import UUID

from ..client import ApiClient
from ..models.catalog import RESOURCE_ROUTES, ToolResource
from ..settings import Settings
from .base import DomainActions

logger = logging.getLogger(__name__)


class ApiDomainActions(DomainActions):
    """Dispatches tool calls to the REST endpoints of the mission API."""

    def __init__(self, settings: Settings, client: ApiClient | None = None) -> None:
        self.client = client or ApiClient(settings=settings)

    def _item_route(self, resource: ToolResource, item_id: UUID) -> str:
        return f"{RESOURCE_ROUTES[resource]}/{item_id}"

    def create(self, resource: ToolResource, payload: dict[str, Any]) -> Any:
        return self.client.request("POST", RESOURCE_ROUTES[resource], json=payload)

    def get(self, resource: ToolResource, item_id: UUID) -> Any:
        return self.client.request("GET", self._item_route(resource, item_id))

    def list(self, resource: ToolResource, filters: dict[str, Any]) -> Any:
        return self.client.request("GET", RESOURCE_ROUTES[resource], params=filters)

    def update(
        self, resource: ToolResource, item_id: UUID, payload: dict[str, Any]
    ) -> Any:
        return self.client.request(
            "PATCH", self._item_route(resource, item_id), json=payload
        )

    def delete(self, resource: ToolResource, item_id: UUID) -> Any:
        self.client.request("DELETE", self._item_route(resource, item_id))
        return {"deleted": True}
