"""Tests for the root and health endpoints and the middleware stack."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from nursecare import __version__
from nursecare.api.dependencies import get_storage_adapter
from nursecare.api.main import app
from nursecare.domain.ports import Result, StoragePort


@pytest.fixture
def mock_storage_adapter():
    """Create a mock storage adapter for testing."""
    mock = Mock(spec=StoragePort)
    mock.db_config = Mock()
    mock.db_config.db_type = "duckdb"
    mock.db_config.db_path = ":memory:"
    mock.query = Mock(return_value=Result.success_result([(1,)]))
    return mock


@pytest.fixture
def client(mock_storage_adapter):
    """Create a test client with mocked storage adapter."""
    app.dependency_overrides[get_storage_adapter] = lambda: mock_storage_adapter

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


class TestRootEndpoint:
    """Test the root endpoint."""

    def test_root_endpoint_returns_info(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == __version__
        assert data["docs"] == "/api/docs"
        assert data["health"] == "/api/health"


class TestHealthEndpoint:
    """Test the health check endpoint."""

    def test_healthy_when_database_answers(self, client, mock_storage_adapter):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["database"]["status"] == "connected"
        assert data["database"]["type"] == "duckdb"
        mock_storage_adapter.query.assert_called_once_with("SELECT 1")

    def test_unhealthy_when_query_fails(self, client, mock_storage_adapter):
        mock_storage_adapter.query.return_value = Result.failure_result("connection refused")

        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["database"]["status"] == "disconnected"
        assert data["database"]["response_time_ms"] is None


class TestMiddleware:
    """Test the logging and error handling middleware."""

    def test_process_time_header(self, client):
        response = client.get("/")

        assert "X-Process-Time" in response.headers
        assert float(response.headers["X-Process-Time"]) >= 0

    def test_unexpected_error_returns_500(self, client, mock_storage_adapter):
        mock_storage_adapter.list_patients.side_effect = RuntimeError("boom")

        response = client.get("/patients")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "boom" not in response.text

    def test_storage_failure_returns_500(self, client, mock_storage_adapter):
        mock_storage_adapter.list_patients.return_value = Result.failure_result(
            "disk full", error_type="StorageError"
        )

        response = client.get("/patients")

        assert response.status_code == 500
        assert response.json()["detail"] == "Storage operation failed"

    def test_cors_headers_for_dashboard_origin(self, client):
        response = client.get("/", headers={"Origin": "http://localhost:3000"})

        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
