from fastapi import APIRouter, Depends

from ..models.api_models import HealthState, HealthzResponse
from ..tool_map import ToolMap, get_tool_map

router = APIRouter()


@router.get("/healthz")
def healthz(tool_map: ToolMap = Depends(get_tool_map)) -> HealthzResponse:
    # the app does not start without a valid catalog, so this is always OK
    return HealthzResponse(data=HealthState(status="OK", tools=len(tool_map)))
