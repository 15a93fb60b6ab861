"""Tests for the FastAPI application wiring.

Covers health endpoints, the public event routes, error mapping and the
correlation ID header.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient


class TestHealthCheck:
    """Tests for the /ping and /health endpoints."""

    def test_ping_returns_ok(self, client: TestClient) -> None:
        response = client.get("/api/ping")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "lumina-api"
        assert "timestamp" in data

    def test_health_endpoint_returns_healthy(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCorrelationId:
    def test_generated_when_absent(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.headers["X-Correlation-ID"]

    def test_incoming_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/api/health", headers={"X-Correlation-ID": "door-42"})

        assert response.headers["X-Correlation-ID"] == "door-42"


class TestPublicEvent:
    """Tests for the public event routes."""

    def test_event_hides_passcode(self, client: TestClient) -> None:
        response = client.get("/api/event")

        assert response.status_code == 200
        data = response.json()
        assert data["voting_open"] is True
        assert data["winning_venue"] is None
        assert "guest_passcode" not in data["config"]

    def test_venues_in_creation_order(self, client: TestClient) -> None:
        response = client.get("/api/venues")

        assert [v["venue_id"] for v in response.json()] == ["lounge", "club", "pub"]

    def test_tiers_include_game_requirement(self, client: TestClient) -> None:
        data = client.get("/api/tiers").json()

        assert data[0]["tier_id"] == "platinum"
        assert data[0]["stock"] == 5
        assert data[0]["game_requirement"]["targets_needed"] == 15

    def test_qr_for_unknown_ticket(self, client: TestClient) -> None:
        assert client.get("/api/tickets/LUM-NOPE-00000000-0/qr").status_code == 404


class TestErrorMapping:
    """Tests for exception handlers."""

    @pytest.fixture
    def failing_voting(self):
        from lumina.api.dependencies import get_voting_service
        from lumina.api.main import app

        service = MagicMock()
        service.get_config.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "boom"}}, "GetItem"
        )
        app.dependency_overrides[get_voting_service] = lambda: service
        yield service
        app.dependency_overrides.clear()

    def test_datastore_failure_is_503(self, client: TestClient, failing_voting) -> None:
        response = client.get("/api/event")

        assert response.status_code == 503
        assert response.json()["error_code"] == "ERR_005"

    def test_unknown_session_is_404(self, client: TestClient) -> None:
        response = client.get("/api/sessions/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "ERR_FLOW_001"
        assert body["recovery"]

    def test_request_validation_is_422(self, client: TestClient) -> None:
        session_id = client.post("/api/sessions").json()["session_id"]

        response = client.post(f"/api/sessions/{session_id}/verify", json={})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "ERR_001"
        assert body["details"][0]["loc"] == ["body", "phone"]
