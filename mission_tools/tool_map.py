import logging
from types import MappingProxyType
from typing import Iterable, Mapping, TypeAlias

from fastapi import Request

from .models.catalog import ToolDefinition
from .storage.catalog_store import CatalogStore

logger = logging.getLogger(__name__)

# read-only, built once at startup and shared by every request
ToolMap: TypeAlias = Mapping[str, ToolDefinition]


def build_tool_map(tools: Iterable[ToolDefinition]) -> ToolMap:
    return MappingProxyType({tool.name: tool for tool in tools})


def load_tool_map(store: CatalogStore) -> ToolMap:
    tool_map = build_tool_map(store.load_tools_or_raise())
    logger.info(f"Tool map ready with {len(tool_map)} tools")
    return tool_map


def get_tool_map(request: Request) -> ToolMap:
    return request.app.state.tool_map
