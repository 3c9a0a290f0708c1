"""Tests for health endpoints and HTTP middleware."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from todo_api.config import get_settings
from todo_api.database import get_db


def _broken_db():
    session = MagicMock()
    session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    yield session


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["message"] == "OK"
        assert data["uptime"] >= 0
        assert data["services"]["database"]["status"] == "healthy"
        assert data["services"]["cache"]["status"] == "disabled"

    def test_root_is_health(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert "services" in response.json()["data"]

    def test_health_reports_cache(self, client: TestClient, cache):
        response = client.get("/health")
        assert response.json()["data"]["services"]["cache"]["status"] == "healthy"

    def test_health_database_down(self, client: TestClient):
        from main import app

        app.dependency_overrides[get_db] = _broken_db
        response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["success"] is False
        assert response.json()["data"]["services"]["database"]["status"] == "unhealthy"

    def test_ready(self, client: TestClient):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["message"] == "Service is ready"

    def test_not_ready_when_database_down(self, client: TestClient):
        from main import app

        app.dependency_overrides[get_db] = _broken_db
        response = client.get("/health/ready")
        assert response.status_code == 503
        assert response.json()["reason"] == "Database connection not ready"

    def test_live_ignores_database(self, client: TestClient):
        from main import app

        app.dependency_overrides[get_db] = _broken_db
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["message"] == "Service is alive"


class TestMiddleware:
    def test_security_headers(self, client: TestClient):
        response = client.get("/health/live")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'self'" in response.headers["Content-Security-Policy"]

    def test_cors_preflight(self, client: TestClient):
        origin = get_settings().cors_origins[0]
        response = client.options(
            "/api/v1/todo",
            headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == origin
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_request_too_large(self, client: TestClient, monkeypatch):
        from main import RequestSizeLimitMiddleware

        monkeypatch.setattr(RequestSizeLimitMiddleware, "MAX_BODY_SIZE", 10)
        response = client.post("/api/v1/auth/login", json={"email": "someone@example.com", "password": "x" * 20})
        assert response.status_code == 413
        assert response.json() == {"success": False, "message": "Request body too large"}

    def test_auth_rate_limit(self, client: TestClient):
        from todo_api.rate_limit import limiter

        allowed = int(get_settings().AUTH_RATE_LIMIT.split("/")[0])
        limiter.reset()
        limiter.enabled = True
        try:
            for _ in range(allowed):
                response = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "pw"})
                assert response.status_code == 401
            response = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "pw"})
            assert response.status_code == 429
            assert response.json() == {"success": False, "message": "Too many requests, please try again later."}
        finally:
            limiter.enabled = False
            limiter.reset()


    def test_api_rate_limit_shared_across_routes(self, client: TestClient, test_user: dict):
        """Todo and profile routes draw from one per-client bucket; health stays reachable."""
        from todo_api.rate_limit import limiter

        allowed = int(get_settings().API_RATE_LIMIT.split("/")[0])
        headers = test_user["headers"]
        limiter.reset()
        limiter.enabled = True
        try:
            for _ in range(allowed):
                assert client.get("/api/v1/todo", headers=headers).status_code == 200

            response = client.get("/api/v1/todo", headers=headers)
            assert response.status_code == 429
            assert response.json() == {"success": False, "message": "Too many requests, please try again later."}
            assert client.get("/api/v1/auth/profile", headers=headers).status_code == 429

            assert client.get("/health/live").status_code == 200
            response = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "pw"})
            assert response.status_code == 401
        finally:
            limiter.enabled = False
            limiter.reset()
