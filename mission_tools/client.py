import logging
from pathlib import Path
from typing import Any

import requests
import yaml

from .exceptions import DomainActionError, OpenApiFetchError
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "the mission API rejected the request"


def build_url(settings: Settings, path: str) -> str:
    return str(settings.api_base_url).rstrip("/") + "/" + path.lstrip("/")


def fetch_openapi(settings: Settings | None = None) -> dict[str, Any]:
    """Fetch the OpenAPI document published by the running API, single attempt."""
    if not settings:
        settings = get_settings()
    url = build_url(settings, settings.openapi_path)
    logger.info(f"Fetching OpenAPI document from {url}")
    response = None
    try:
        response = requests.get(
            url,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
            timeout=settings.http_timeout_seconds,
        )
        response.raise_for_status()
        document = response.json()
    except (requests.RequestException, ValueError) as error:
        if response is not None:
            logger.debug(f"response: {response.text}")
        raise OpenApiFetchError(
            f"Unable to fetch the OpenAPI document from {url}: {error}"
        ) from error

    if not isinstance(document, dict):
        raise OpenApiFetchError(f"OpenAPI document from {url} is not a JSON object")
    return document


def load_openapi_file(path: Path) -> dict[str, Any]:
    """Read a local OpenAPI document, JSON being a subset of YAML."""
    logger.info(f"Loading OpenAPI document from {path}")
    try:
        with open(path, "r", encoding="utf-8") as openapi_file:
            document = yaml.safe_load(openapi_file)
    except (OSError, yaml.YAMLError) as error:
        raise OpenApiFetchError(
            f"Unable to load the OpenAPI document from {path}: {error}"
        ) from error

    if not isinstance(document, dict):
        raise OpenApiFetchError(f"OpenAPI document at {path} is not a mapping")
    return document


def error_message_from_response(response: requests.Response) -> str:
    """Best message out of a problem-details body."""
    try:
        problem = response.json()
    except ValueError:
        return response.text.strip() or GENERIC_ERROR_MESSAGE
    if not isinstance(problem, dict):
        return GENERIC_ERROR_MESSAGE

    errors = problem.get("errors")
    if isinstance(errors, dict):
        messages = [
            str(message)
            for field_messages in errors.values()
            for message in (
                field_messages if isinstance(field_messages, list) else [field_messages]
            )
        ]
        if messages:
            return "; ".join(messages)

    for key in ("detail", "title"):
        if isinstance(problem.get(key), str) and problem[key].strip():
            return problem[key].strip()

    return GENERIC_ERROR_MESSAGE


class ApiClient:
    """Thin REST client for the mission API used to dispatch tool calls."""

    def __init__(
        self, settings: Settings, session: requests.Session | None = None
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": settings.user_agent})
        if settings.tenant_id:
            self.session.headers.update({"X-Tenant-Id": str(settings.tenant_id)})

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = build_url(self.settings, path)
        logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self.settings.http_timeout_seconds,
            )
        except requests.RequestException as error:
            raise DomainActionError(
                f"Unable to reach the mission API at {url}: {error}", status_code=502
            ) from error

        if not response.ok:
            message = error_message_from_response(response)
            logger.warning(f"{method} {url} failed with {response.status_code}: {message}")
            raise DomainActionError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise DomainActionError(
                f"The mission API answered {method} {url} with a non JSON body",
                status_code=502,
            ) from error
