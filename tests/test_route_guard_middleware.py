"""Integration tests for the route guard middleware.

Page routes are registered on the test app so an allowed navigation is
visible as a 200 carrying what the middleware stored on request.state.
"""

import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from app.core import rate_limit
from app.core.app_factory import create_app
from app.core.errors import AuthProviderError, MembershipStoreError

PAGES = ("/", "/login", "/dashboard", "/events", "/admin", "/admin/events")


def _add_pages(app: FastAPI) -> None:
    async def page(request: Request) -> dict:
        return {
            "subject_id": getattr(request.state, "subject_id", None),
            "is_admin": getattr(request.state, "is_admin", None),
        }

    for path in PAGES:
        app.add_api_route(path, page, methods=["GET"])


@pytest.fixture
def pages_client(app: FastAPI) -> TestClient:
    _add_pages(app)
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def unconfigured_client(monkeypatch) -> TestClient:
    monkeypatch.setattr("app.core.route_guard._config_error_logged", False)
    app = create_app()
    _add_pages(app)
    return TestClient(app, follow_redirects=False)


class TestRedirects:
    def test_anonymous_dashboard_goes_to_login(self, pages_client: TestClient) -> None:
        response = pages_client.get("/dashboard")

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_participant_admin_area_goes_to_dashboard(
        self, pages_client: TestClient, participant_headers
    ) -> None:
        response = pages_client.get("/admin/events", headers=participant_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

    def test_admin_dashboard_goes_to_admin(self, pages_client: TestClient, admin_headers) -> None:
        response = pages_client.get("/dashboard", headers=admin_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/admin"

    def test_query_string_is_ignored_for_matching(self, pages_client: TestClient) -> None:
        response = pages_client.get("/events?from=2026-01-01")

        assert response.status_code == 307
        assert response.headers["location"].startswith("/login")

    @pytest.mark.parametrize(
        ("path", "location"),
        [
            ("/dashboard?next=bookings", "/login?next=bookings"),
            ("/admin?tab=events&page=2", "/login?tab=events&page=2"),
        ],
    )
    def test_redirect_keeps_query_string(
        self, pages_client: TestClient, path: str, location: str
    ) -> None:
        response = pages_client.get(path)

        assert response.status_code == 307
        assert response.headers["location"] == location

    def test_role_redirect_keeps_query_string(
        self, pages_client: TestClient, participant_headers
    ) -> None:
        response = pages_client.get("/admin/events?page=3", headers=participant_headers)

        assert response.headers["location"] == "/dashboard?page=3"


class TestAllowed:
    def test_admin_reaches_admin_home(
        self, pages_client: TestClient, admin_headers, admin_id
    ) -> None:
        response = pages_client.get("/admin", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"subject_id": admin_id, "is_admin": True}

    def test_participant_reaches_dashboard(
        self, pages_client: TestClient, participant_headers, participant_id
    ) -> None:
        response = pages_client.get("/dashboard", headers=participant_headers)

        assert response.status_code == 200
        assert response.json() == {"subject_id": participant_id, "is_admin": False}

    def test_anonymous_public_page(self, pages_client: TestClient) -> None:
        response = pages_client.get("/login")

        assert response.status_code == 200
        assert response.json()["subject_id"] is None

    def test_session_cookie_is_accepted(self, pages_client: TestClient, admin_headers) -> None:
        token = admin_headers["Authorization"].removeprefix("Bearer ")
        pages_client.cookies.set("sb-access-token", token)

        response = pages_client.get("/admin")

        assert response.status_code == 200

    def test_exempt_paths_skip_the_guard(self, pages_client: TestClient, membership_store) -> None:
        assert pages_client.get("/health").status_code == 200
        assert pages_client.get("/api/get-ip").status_code == 200
        assert membership_store.calls == []


class TestAdminStatusLookups:
    def test_admin_status_is_cached_across_navigations(
        self, pages_client: TestClient, admin_headers, membership_store, admin_id
    ) -> None:
        pages_client.get("/admin", headers=admin_headers)
        pages_client.get("/admin/events", headers=admin_headers)

        assert membership_store.calls == [admin_id]

    def test_store_outage_denies_admin_area_then_recovers(
        self, pages_client: TestClient, admin_headers, membership_store
    ) -> None:
        membership_store.fail_with = MembershipStoreError(
            code="membership_store_unreachable", message="timeout"
        )

        response = pages_client.get("/admin", headers=admin_headers)
        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

        membership_store.fail_with = None
        assert pages_client.get("/admin", headers=admin_headers).status_code == 200

    def test_auth_provider_outage_is_treated_as_anonymous(
        self, pages_client: TestClient, admin_headers, auth_provider
    ) -> None:
        auth_provider.fail_with = AuthProviderError(code="auth_provider_unreachable", message="down")

        response = pages_client.get("/admin", headers=admin_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"


class TestMissingConfiguration:
    @pytest.mark.parametrize("path", ["/", "/login", "/dashboard", "/admin"])
    def test_every_guarded_path_is_refused(self, unconfigured_client: TestClient, path: str) -> None:
        response = unconfigured_client.get(path)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "server_configuration_error"

    def test_missing_variables_are_not_exposed(self, unconfigured_client: TestClient) -> None:
        response = unconfigured_client.get("/dashboard")

        assert "SUPABASE" not in response.text

    def test_logged_once_per_process(self, unconfigured_client: TestClient, caplog) -> None:
        with caplog.at_level(logging.ERROR):
            unconfigured_client.get("/dashboard")
            unconfigured_client.get("/admin")
            unconfigured_client.get("/login")

        records = [r for r in caplog.records if r.getMessage() == "route_guard.configuration_missing"]
        assert len(records) == 1
        assert records[0].missing == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("GET", "/api/get-ip", None),
            ("POST", "/api/rate-limit/check", {"action": "login"}),
            ("GET", "/api/me/admin-status", None),
        ],
    )
    def test_api_routes_are_refused(
        self, unconfigured_client: TestClient, method: str, path: str, body: dict | None
    ) -> None:
        response = unconfigured_client.request(method, path, json=body)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "server_configuration_error"

    def test_refused_attempts_are_not_counted(self, unconfigured_client: TestClient) -> None:
        unconfigured_client.post("/api/rate-limit/check", json={"action": "login"})

        assert len(rate_limit.get_rate_limiter()) == 0

    @pytest.mark.parametrize("path", ["/health", "/openapi.json"])
    def test_health_and_docs_still_answer(self, unconfigured_client: TestClient, path: str) -> None:
        assert unconfigured_client.get(path).status_code == 200
