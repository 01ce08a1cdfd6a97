import logging
from pathlib import Path

import toml
from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import base_router, tool_router
from .api.exceptions import (
    http_exception_handler,
    mission_tools_exception_handler,
    validation_exception_handler,
)
from .exceptions import MissionToolsError
from .settings import Settings, configure_logging, get_settings
from .storage.catalog_store import CatalogStore
from .tool_map import ToolMap, load_tool_map

LOGGER = logging.getLogger(__name__)

PYPROJECT_PATH = Path(__file__).parent.parent / "pyproject.toml"


def get_project_metadata(path: Path = PYPROJECT_PATH) -> tuple[str, str]:
    try:
        with open(path, "r") as pyproject_file:
            pyproject_data = toml.load(pyproject_file)
    except FileNotFoundError:
        LOGGER.debug(f"No {path}, using default project metadata")
        return "Mission tools API", "0.0.0"

    metadata = pyproject_data["tool"]["poetry"]
    return metadata["description"], metadata["version"]


def use_route_names_as_operation_ids(app: FastAPI) -> None:
    """
    Simplify operation IDs so that generated API clients have simpler function
    names.

    Should be called only after all routes have been added.
    """
    for route in app.routes:
        if isinstance(route, APIRoute):
            route.operation_id = route.name


def create_app(settings: Settings | None = None, tool_map: ToolMap | None = None) -> FastAPI:
    if not settings:
        settings = get_settings()
    configure_logging(settings)

    if tool_map is None:
        # fails hard, the app must never serve a catalog that breaks the contract
        tool_map = load_tool_map(CatalogStore(settings.catalog_path))

    title, version = get_project_metadata()
    app = FastAPI(
        title=title,
        servers=[
            {
                "url": f"http://{settings.address}:{settings.port}",
                "description": "Local direct development server.",
            },
        ],
        version=version,
    )
    app.state.tool_map = tool_map

    # Top-level API router
    api_router = APIRouter(prefix="/v1")

    api_router.include_router(base_router.router)
    api_router.include_router(tool_router.router, tags=["tool"])

    app.include_router(api_router)

    # Custom exception handlers
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(MissionToolsError, mission_tools_exception_handler)

    use_route_names_as_operation_ids(app)

    return app


app = create_app()
