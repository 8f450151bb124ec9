"""Integration tests for /health, /healthz and /metrics endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from pdfchat.main import app
from pdfchat.utils.metrics import PrometheusChatMetrics


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


def test_health_always_ok(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root(client: TestClient) -> None:
    assert client.get("/").json() == {"message": "PDF Chat API", "version": "0.1.0"}


class TestHealthzEndpoint:
    """Test /healthz endpoint."""

    @patch("pdfchat.api.routes.health.check_db", new_callable=AsyncMock)
    def test_healthz_returns_200_when_db_ok(
        self, mock_check_db: AsyncMock, client: TestClient
    ) -> None:
        mock_check_db.return_value = (True, "ok")

        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "components": {"db": "ok"}}

    @patch("pdfchat.api.routes.health.check_db", new_callable=AsyncMock)
    def test_healthz_returns_503_when_db_fails(
        self, mock_check_db: AsyncMock, client: TestClient
    ) -> None:
        mock_check_db.return_value = (False, "error: OperationalError")

        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["db"] == "error: OperationalError"


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    def test_metrics_exposes_prometheus_text(self, client: TestClient) -> None:
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "ingest_files_total" in response.text
        assert "completion_latency_ms" in response.text

    def test_metrics_reflect_recorded_outcomes(self, client: TestClient) -> None:
        metrics = PrometheusChatMetrics()
        metrics.record_file("new", chunk_count=3)
        metrics.record_completion("answer", 120.0)

        text = client.get("/metrics").text

        assert 'ingest_files_total{outcome="new"}' in text
        assert 'chat_completions_total{outcome="answer"}' in text
        assert "chunks_created_total" in text
