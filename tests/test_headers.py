"""Security headers must be present on every response, errors included."""

import pytest
from fastapi.testclient import TestClient

from food_ordering.main import create_app
from food_ordering.security.headers import CONTENT_SECURITY_POLICY

from tests.conftest import auth_header, make_settings

EXPECTED_HEADERS = {
    "x-frame-options": "DENY",
    "x-content-type-options": "nosniff",
    "content-security-policy": CONTENT_SECURITY_POLICY,
    "strict-transport-security": "max-age=31536000; includeSubDomains; preload",
    "referrer-policy": "strict-origin-when-cross-origin",
}


def assert_security_headers(response):
    for name, value in EXPECTED_HEADERS.items():
        assert response.headers.get(name) == value, name
    assert "x-powered-by" not in response.headers
    assert "server" not in response.headers


class TestSecurityHeaders:
    def test_success_response(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert_security_headers(response)

    def test_unauthenticated_response(self, client):
        response = client.get("/api/auth/profile")
        assert response.status_code == 401
        assert response.json() == {"error": "Access token required"}
        assert_security_headers(response)

    def test_invalid_token_response(self, client):
        response = client.get("/api/auth/profile", headers=auth_header("garbage"))
        assert response.status_code == 403
        assert response.json() == {"error": "Invalid or expired token"}
        assert_security_headers(response)

    def test_not_found_response(self, client):
        response = client.get("/api/food/9999")
        assert response.status_code == 404
        assert response.json() == {"message": "Food item not found"}
        assert_security_headers(response)

    def test_unknown_route(self, client):
        response = client.get("/no/such/route")
        assert response.status_code == 404
        assert_security_headers(response)

    def test_rate_limited_response(self):
        app = create_app(make_settings(rate_limit_max_requests=2))
        with TestClient(app) as client:
            client.get("/health")
            client.get("/health")
            response = client.get("/health")
        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests from this IP, please try again later."}
        assert "retry-after" in response.headers
        assert_security_headers(response)

    def test_unhandled_exception_is_generic_500(self, caplog):
        app = create_app(make_settings())

        @app.get("/api/explode")
        async def explode():
            raise RuntimeError("connection string with password=hunter2")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/explode")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
        assert "hunter2" not in response.text
        assert_security_headers(response)
        assert any("Unhandled exception" in r.message for r in caplog.records)

    @pytest.mark.parametrize("path", ["/", "/api/food", "/api/food/categories/list"])
    def test_public_routes(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert_security_headers(response)
