from unittest.mock import MagicMock
from uuid import UUID

import pytest
import requests

import mission_tools.client
from mission_tools.actions.api import ApiDomainActions
from mission_tools.actions.base import list_filters, parse_id
from mission_tools.actions.mock import MockDomainActions
from mission_tools.actions.utils import get_domain_actions
from mission_tools.client import (
    GENERIC_ERROR_MESSAGE,
    ApiClient,
    error_message_from_response,
    fetch_openapi,
)
from mission_tools.exceptions import (
    DomainActionError,
    OpenApiFetchError,
    ToolArgumentError,
)
from mission_tools.models.catalog import DOMAIN_ACTIONS, ToolResource
from mission_tools.settings import Settings
from tests.helpers import MISSION_ID, get_mission_payload


def get_fake_response(
    status_code: int = 200, json_body=None, text: str = ""
) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if json_body is not None:
        response.json.return_value = json_body
        response.content = b"{}"
        response.text = "{}"
    else:
        response.json.side_effect = ValueError("no json")
        response.content = text.encode()
        response.text = text
    return response


class TestHelpers:
    def test_parse_id(self):
        action = DOMAIN_ACTIONS["mission_get"]

        assert parse_id(action, {"id": MISSION_ID}) == UUID(MISSION_ID)

    @pytest.mark.parametrize("arguments", [{}, {"id": "42"}])
    def test_parse_id_rejects_missing_or_malformed_ids(self, arguments):
        action = DOMAIN_ACTIONS["mission_get"]

        with pytest.raises(ToolArgumentError) as error:
            parse_id(action, arguments)

        assert error.value.path == "id"

    def test_list_filters_sets_pagination_and_drops_nulls(self):
        filters = list_filters({"search": None, "status": "Active"})

        assert filters == {"status": "Active", "page": 1, "pageSize": 10}


class TestMockDomainActions:
    def test_full_lifecycle(self):
        domain_actions = MockDomainActions()

        created = domain_actions.execute(
            DOMAIN_ACTIONS["mission_create"], get_mission_payload()
        )
        updated = domain_actions.execute(
            DOMAIN_ACTIONS["mission_update"],
            {"id": created["id"], "payload": {"name": "Renamed", "id": MISSION_ID}},
        )
        deleted = domain_actions.execute(
            DOMAIN_ACTIONS["mission_delete"], {"id": created["id"]}
        )

        assert updated["id"] == created["id"]
        assert updated["name"] == "Renamed"
        assert deleted == {"deleted": True}
        with pytest.raises(DomainActionError) as error:
            domain_actions.execute(DOMAIN_ACTIONS["mission_get"], {"id": created["id"]})
        assert error.value.status_code == 404

    def test_list_filters_on_fields(self):
        domain_actions = MockDomainActions()
        domain_actions.create(ToolResource.MISSION, get_mission_payload(status="Active"))
        domain_actions.create(ToolResource.MISSION, get_mission_payload())

        result = domain_actions.execute(
            DOMAIN_ACTIONS["mission_list"], {"status": "Active"}
        )

        assert result["total"] == 1
        assert result["items"][0]["status"] == "Active"

    def test_resources_are_kept_apart(self):
        domain_actions = MockDomainActions()
        domain_actions.create(ToolResource.MISSION, get_mission_payload())

        result = domain_actions.execute(DOMAIN_ACTIONS["mission_metric_list"], {})

        assert result["total"] == 0

    @pytest.mark.parametrize("filters", [{"page": 0}, {"pageSize": "many"}])
    def test_list_rejects_bad_pagination(self, filters):
        with pytest.raises(DomainActionError) as error:
            MockDomainActions().execute(DOMAIN_ACTIONS["mission_list"], filters)

        assert error.value.status_code == 400


class TestApiDomainActions:
    @pytest.fixture
    def client(self) -> MagicMock:
        return MagicMock(spec=ApiClient)

    @pytest.fixture
    def domain_actions(self, settings: Settings, client: MagicMock) -> ApiDomainActions:
        return ApiDomainActions(settings=settings, client=client)

    def test_create_posts_to_the_collection(
        self, domain_actions: ApiDomainActions, client: MagicMock
    ):
        payload = {"name": "Revenue", "missionId": MISSION_ID, "type": "Quantitative"}

        domain_actions.execute(DOMAIN_ACTIONS["mission_metric_create"], payload)

        client.request.assert_called_once_with(
            "POST", "/api/mission-metrics", json=payload
        )

    def test_update_patches_the_item_with_the_payload(
        self, domain_actions: ApiDomainActions, client: MagicMock
    ):
        client.request.return_value = {"id": MISSION_ID, "name": "Renamed"}

        result = domain_actions.execute(
            DOMAIN_ACTIONS["mission_update"],
            {"id": MISSION_ID, "payload": {"name": "Renamed"}},
        )

        assert result == {"id": MISSION_ID, "name": "Renamed"}
        client.request.assert_called_once_with(
            "PATCH", f"/api/missions/{MISSION_ID}", json={"name": "Renamed"}
        )

    def test_list_sends_filters_as_query(
        self, domain_actions: ApiDomainActions, client: MagicMock
    ):
        domain_actions.execute(DOMAIN_ACTIONS["metric_checkin_list"], {"page": 3})

        client.request.assert_called_once_with(
            "GET", "/api/metric-checkins", params={"page": 3, "pageSize": 10}
        )

    def test_delete_reports_deletion(
        self, domain_actions: ApiDomainActions, client: MagicMock
    ):
        client.request.return_value = None

        result = domain_actions.execute(
            DOMAIN_ACTIONS["metric_checkin_delete"], {"id": MISSION_ID}
        )

        assert result == {"deleted": True}
        client.request.assert_called_once_with(
            "DELETE", f"/api/metric-checkins/{MISSION_ID}"
        )


class TestGetDomainActions:
    def test_is_cached(self, settings: Settings):
        first = get_domain_actions(settings=settings, rebuild=True)

        assert get_domain_actions(settings=settings) is first
        assert isinstance(first, MockDomainActions)

    def test_builds_the_api_backend(self, settings: Settings):
        api_settings = settings.model_copy(update={"domain_actions_type": "api"})

        domain_actions = get_domain_actions(settings=api_settings, rebuild=True)

        assert isinstance(domain_actions, ApiDomainActions)
        get_domain_actions(settings=settings, rebuild=True)


class TestApiClient:
    @pytest.fixture
    def session(self) -> MagicMock:
        session = MagicMock(spec=requests.Session)
        session.headers = {}
        return session

    def test_sends_the_tenant_header(self, settings: Settings, session: MagicMock):
        tenant_settings = settings.model_copy(update={"tenant_id": UUID(MISSION_ID)})

        ApiClient(settings=tenant_settings, session=session)

        assert session.headers["X-Tenant-Id"] == MISSION_ID
        assert session.headers["User-Agent"] == "mission-tools"

    def test_returns_the_json_body(self, settings: Settings, session: MagicMock):
        session.request.return_value = get_fake_response(json_body={"id": MISSION_ID})

        result = ApiClient(settings=settings, session=session).request(
            "GET", f"/api/missions/{MISSION_ID}"
        )

        assert result == {"id": MISSION_ID}
        session.request.assert_called_once_with(
            "GET",
            f"http://127.0.0.1:8080/api/missions/{MISSION_ID}",
            params=None,
            json=None,
            timeout=30,
        )

    def test_no_content_returns_none(self, settings: Settings, session: MagicMock):
        session.request.return_value = get_fake_response(status_code=204)

        assert ApiClient(settings=settings, session=session).request("DELETE", "/x") is None

    def test_error_status_is_kept(self, settings: Settings, session: MagicMock):
        session.request.return_value = get_fake_response(
            status_code=400,
            json_body={
                "title": "One or more validation errors occurred.",
                "errors": {"Name": ["'Name' must not be empty."]},
            },
        )

        with pytest.raises(DomainActionError) as error:
            ApiClient(settings=settings, session=session).request("POST", "/x", json={})

        assert error.value.status_code == 400
        assert str(error.value) == "'Name' must not be empty."

    def test_connection_errors_are_bad_gateway(
        self, settings: Settings, session: MagicMock
    ):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(DomainActionError) as error:
            ApiClient(settings=settings, session=session).request("GET", "/x")

        assert error.value.status_code == 502

    def test_non_json_body_is_bad_gateway(self, settings: Settings, session: MagicMock):
        session.request.return_value = get_fake_response(text="<html></html>")

        with pytest.raises(DomainActionError) as error:
            ApiClient(settings=settings, session=session).request("GET", "/x")

        assert error.value.status_code == 502


@pytest.mark.parametrize(
    "response, expected_message",
    [
        (
            get_fake_response(404, {"title": "Not Found", "detail": "Mission missing."}),
            "Mission missing.",
        ),
        (get_fake_response(409, {"title": "Conflict"}), "Conflict"),
        (get_fake_response(500, ["unexpected"]), GENERIC_ERROR_MESSAGE),
        (get_fake_response(500, text="Internal Server Error"), "Internal Server Error"),
        (get_fake_response(500), GENERIC_ERROR_MESSAGE),
    ],
)
def test_error_message_from_response(response: MagicMock, expected_message: str):
    assert error_message_from_response(response) == expected_message


class TestFetchOpenapi:
    def test_returns_the_document(
        self, settings: Settings, monkeypatch: pytest.MonkeyPatch
    ):
        fake_get = MagicMock(return_value=get_fake_response(json_body={"paths": {}}))
        monkeypatch.setattr(mission_tools.client.requests, "get", fake_get)

        assert fetch_openapi(settings) == {"paths": {}}
        fake_get.assert_called_once_with(
            "http://127.0.0.1:8080/openapi/v1.json",
            headers={"User-Agent": "mission-tools", "Accept": "application/json"},
            timeout=30,
        )

    def test_http_errors_fail(self, settings: Settings, monkeypatch: pytest.MonkeyPatch):
        response = get_fake_response(status_code=503, text="unavailable")
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        monkeypatch.setattr(
            mission_tools.client.requests, "get", MagicMock(return_value=response)
        )

        with pytest.raises(OpenApiFetchError, match="503 Server Error"):
            fetch_openapi(settings)

    def test_connection_errors_fail(
        self, settings: Settings, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(
            mission_tools.client.requests,
            "get",
            MagicMock(side_effect=requests.ConnectionError("refused")),
        )

        with pytest.raises(OpenApiFetchError, match="refused"):
            fetch_openapi(settings)

    def test_non_object_documents_fail(
        self, settings: Settings, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(
            mission_tools.client.requests,
            "get",
            MagicMock(return_value=get_fake_response(json_body=["paths"])),
        )

        with pytest.raises(OpenApiFetchError, match="not a JSON object"):
            fetch_openapi(settings)
