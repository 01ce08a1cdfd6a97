from fastapi import APIRouter, Depends

from ..actions.base import DomainActions
from ..actions.utils import get_domain_actions
from ..models.api_models import (
    ResponseMessages,
    ToolCallRequest,
    ToolCallResponse,
    ToolHelpResponse,
    ToolListResponse,
)
from ..tool_map import ToolMap, get_tool_map
from . import tool_handlers as handlers

router = APIRouter(prefix="/tools")


@router.get("", response_model_exclude_none=True)
def list_tools(tool_map: ToolMap = Depends(get_tool_map)) -> ToolListResponse:
    """List every tool of the loaded catalog."""
    return ToolListResponse(data=handlers.list_tools(tool_map))


@router.get("/{tool_name}", response_model_exclude_none=True)
def get_tool_help(
    tool_name: str,
    tool_map: ToolMap = Depends(get_tool_map),
) -> ToolHelpResponse:
    """Describe a tool and the fields it accepts."""
    return ToolHelpResponse(data=handlers.get_tool_help(tool_name, tool_map))


@router.post("/{tool_name}/call")
def call_tool(
    tool_name: str,
    request: ToolCallRequest,
    tool_map: ToolMap = Depends(get_tool_map),
    domain_actions: DomainActions = Depends(get_domain_actions),
) -> ToolCallResponse:
    """Validate the arguments and run the domain operation behind a tool."""
    result = handlers.call_tool(
        tool_name=tool_name,
        arguments=request.arguments,
        tool_map=tool_map,
        domain_actions=domain_actions,
    )
    return ToolCallResponse(
        data=result,
        messages=ResponseMessages(info=[f"Tool {tool_name} called successfully."]),
    )
