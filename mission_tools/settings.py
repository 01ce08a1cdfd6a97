import logging
from pathlib import Path
from typing import Literal
from uuid import UUID

from pydantic import AnyHttpUrl, PositiveInt
from pydantic_settings import BaseSettings

log = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "catalog" / "generated" / "tool-catalog.json"


class Settings(BaseSettings):
    log_level: str = "info"
    port: int = 8000
    address: str = "127.0.0.1"
    api_base_url: AnyHttpUrl = AnyHttpUrl("http://127.0.0.1:8080")
    openapi_path: str = "/openapi/v1.json"
    # handed as-is to requests, there are no retries on top of it
    http_timeout_seconds: PositiveInt = 30
    user_agent: str = "mission-tools"
    catalog_path: Path = DEFAULT_CATALOG_PATH
    domain_actions_type: Literal["mock", "api"] = "mock"
    tenant_id: UUID | None = None


def get_settings() -> Settings:
    global settings
    if not settings:
        log.info("Loading config settings from the environment...")
        settings = Settings()

    return settings


settings: Settings | None = None


def configure_logging(settings: Settings) -> None:
    try:
        level = getattr(logging, settings.log_level.upper())
    except AttributeError:
        level = logging.INFO

    logging.basicConfig(level=level)
    # this is needed mostly for the tests, as you can't change the loglevel with basicConfig once it has
    # been changed once
    logging.root.setLevel(level=level)
    log.debug("Got settings: %r", settings)
