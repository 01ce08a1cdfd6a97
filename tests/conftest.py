import logging
from pathlib import Path
from typing import Any, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import mission_tools.settings
from mission_tools.actions.utils import get_domain_actions
from mission_tools.catalog.generator import CatalogGenerator
from mission_tools.main import create_app
from mission_tools.models.catalog import Catalog
from mission_tools.settings import Settings
from mission_tools.storage.catalog_store import CatalogStore
from tests.helpers import get_sample_openapi

logger = logging.getLogger(__name__)


@pytest.fixture
def openapi_document() -> dict[str, Any]:
    return get_sample_openapi()


@pytest.fixture
def catalog_path(tmp_path: Path) -> Path:
    return tmp_path / "generated" / "tool-catalog.json"


@pytest.fixture
def settings(catalog_path: Path) -> Settings:
    settings = Settings(
        log_level="debug", catalog_path=catalog_path, domain_actions_type="mock"
    )
    mission_tools.settings.settings = settings
    return settings


@pytest.fixture
def catalog_store(catalog_path: Path) -> CatalogStore:
    return CatalogStore(catalog_path)


@pytest.fixture
def generated_catalog(openapi_document: dict[str, Any]) -> Catalog:
    return CatalogGenerator().generate(openapi_document)


@pytest.fixture
def app(
    settings: Settings, catalog_store: CatalogStore, generated_catalog: Catalog
) -> FastAPI:
    catalog_store.write(generated_catalog)
    app = create_app(settings=settings)
    # force creating new domain actions
    get_domain_actions(settings=settings, rebuild=True)
    return app


@pytest.fixture
def test_client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as client:
        yield client
