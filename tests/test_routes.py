from datetime import datetime, timedelta

import pytest

from simple_api.app_server.app_routes import PRIVATE_ROUTE_WARNING
from simple_api.core.app_factory import create_application_app
from simple_api.core.errors import ServerError, ValidationError
from simple_api.version import SERVICE_NAME, SERVICE_VERSION


def parse_utc(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    assert parsed.utcoffset() == timedelta(0)
    return parsed


class TestMainServerRoutes:
    @pytest.mark.parametrize("path", ["/", "/health"])
    def test_hello_world(self, main_client, path):
        response = main_client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Hello world!"

    def test_unknown_path(self, main_client):
        assert main_client.get("/public").status_code == 404

    def test_post_not_allowed(self, main_client):
        assert main_client.post("/").status_code == 405


class TestApplicationServerRoutes:
    @pytest.mark.parametrize("path", ["/", "/health"])
    def test_status(self, app_client, path):
        response = app_client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        }

    def test_public_route(self, app_client):
        response = app_client.get("/public")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"message", "access", "timestamp"}
        assert body["message"] == "public route"
        assert body["access"] == "public"
        parse_utc(body["timestamp"])

    def test_private_route(self, app_client):
        response = app_client.get("/private")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "private and protected route"
        assert body["access"] == "private"
        assert body["warning"] == "This route should require authentication in production"
        assert body["warning"] == PRIVATE_ROUTE_WARNING
        parse_utc(body["timestamp"])

    def test_public_timestamps_do_not_go_backwards(self, app_client):
        first = parse_utc(app_client.get("/public").json()["timestamp"])
        second = parse_utc(app_client.get("/public").json()["timestamp"])
        assert second >= first

    def test_unknown_path(self, app_client):
        assert app_client.get("/admin").status_code == 404


class TestCors:
    """Both apps carry the same fixed, permissive CORS policy"""

    @pytest.mark.parametrize("client_fixture, path", [("main_client", "/"), ("app_client", "/private")])
    def test_simple_request_allows_any_origin(self, request, client_fixture, path):
        client = request.getfixturevalue(client_fixture)
        response = client.get(path, headers={"Origin": "https://example.org"})
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, app_client):
        response = app_client.options(
            "/public",
            headers={
                "Origin": "https://example.org",
                "Access-Control-Request-Method": "DELETE",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-max-age"] == "3600"
        allowed_methods = {m.strip() for m in response.headers["access-control-allow-methods"].split(",")}
        assert allowed_methods == {"GET", "POST", "PUT", "DELETE", "OPTIONS"}
        allowed_headers = {h.strip().lower() for h in response.headers["access-control-allow-headers"].split(",")}
        assert {"authorization", "accept", "content-type"} <= allowed_headers

    def test_preflight_rejects_other_methods(self, app_client):
        response = app_client.options(
            "/public",
            headers={"Origin": "https://example.org", "Access-Control-Request-Method": "PATCH"},
        )
        assert response.status_code == 400


class TestErrorResponses:
    """AppError raised inside a route becomes a JSON error body"""

    @pytest.fixture
    def failing_client(self):
        from fastapi.testclient import TestClient

        app = create_application_app()

        async def bad_input():
            raise ValidationError("name must not be empty")

        async def broken_listener():
            raise ServerError("listener went away")

        app.add_api_route("/bad-input", bad_input)
        app.add_api_route("/broken", broken_listener)
        return TestClient(app)

    def test_validation_error_is_400(self, failing_client):
        response = failing_client.get("/bad-input")
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "validation_error"
        assert error["message"] == "Validation error: name must not be empty"
        parse_utc(error["timestamp"])

    def test_server_error_is_500(self, failing_client):
        response = failing_client.get("/broken")
        assert response.status_code == 500
        assert response.json()["error"]["type"] == "server_error"
