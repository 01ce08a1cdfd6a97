import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import (
    DomainActionError,
    MissionToolsError,
    ToolArgumentError,
    UnknownToolError,
)
from ..models.api_models import ApiResponse, ResponseMessages

logger = logging.getLogger(__name__)


def _format_validation_error(error: dict[str, Any]) -> str:
    if error.get("type", "") == "json_invalid":
        loc = error.get("loc", [])
        position = loc[1] if len(loc) > 1 else "unknown position"
        ctx_error = error.get("ctx", {}).get("error", "Unknown JSON error")
        return f"Invalid JSON at position {position}: {ctx_error}"

    loc = " -> ".join(str(item) for item in error.get("loc", [])[1:])
    error_msg = f"Validation error at {loc}: {error.get('msg', '')}"
    if error.get("input") is not None:
        error_msg += f". Received value: '{error['input']}'"
    return error_msg


def _error_response(status_code: int, errors: list[str]) -> JSONResponse:
    api_response: ApiResponse[None] = ApiResponse(
        data=None,
        messages=ResponseMessages(error=errors),
    )
    return JSONResponse(
        status_code=status_code,
        content=api_response.model_dump(exclude_none=True),
    )


def _status_for(exc: MissionToolsError) -> int:
    match exc:
        case UnknownToolError():
            return status.HTTP_404_NOT_FOUND
        case ToolArgumentError():
            return status.HTTP_422_UNPROCESSABLE_ENTITY
        case DomainActionError():
            return exc.status_code
        case _:
            return status.HTTP_500_INTERNAL_SERVER_ERROR


async def http_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    # Needed because of https://github.com/encode/starlette/discussions/2416
    if not isinstance(exc, StarletteHTTPException):
        raise Exception(f"Unable to handle {exc}")
    return _error_response(exc.status_code, [str(exc.detail)])


async def validation_exception_handler(
    _request: Request, exc: Exception
) -> JSONResponse:
    if not isinstance(exc, RequestValidationError):
        raise Exception(f"Unable to handle {exc}")
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        [_format_validation_error(error) for error in exc.errors()],
    )


async def mission_tools_exception_handler(
    _request: Request, exc: Exception
) -> JSONResponse:
    """Errors that escaped the handlers, rendered with the same envelope."""
    if not isinstance(exc, MissionToolsError):
        raise Exception(f"Unable to handle {exc}")
    status_code = _status_for(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Unhandled error: {exc}")
    return _error_response(status_code, [str(exc)])
