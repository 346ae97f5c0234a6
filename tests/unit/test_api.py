"""Unit tests for the HTTP endpoints."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from audio_relay.api import dependencies
from audio_relay.api.app import create_app
from audio_relay.api.routes import health
from audio_relay.relay.models import QueueStats
from audio_relay.relay.sequence import SequenceTracker


@pytest.fixture
def gate():
    """Gate double; the endpoint only calls submit() and reads queue."""
    gate = MagicMock()
    gate.queue.stats.return_value = QueueStats(
        pending=2,
        worker_active=True,
        items_admitted_total=5,
        items_replaced_total=1,
        batches_dispatched_total=1,
    )
    return gate


@pytest.fixture
def api_client(test_config, gate, monkeypatch):
    """TestClient wired to the test config, gate double, and a tracker."""
    monkeypatch.setattr(dependencies, "_config_instance", test_config)
    monkeypatch.setattr(dependencies, "_gate_instance", gate)
    monkeypatch.setattr(dependencies, "_tracker_instance", SequenceTracker(initial=99))

    app = create_app(enable_metrics=False)
    with TestClient(app) as client:
        yield client


class TestIndex:
    """Test the liveness endpoint."""

    def test_index(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.text == "Hi there"

    def test_route_handlers_documented(self):
        """Test every health route handler carries a docstring."""
        assert health.index.__doc__
        assert health.health_check.__doc__


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, api_client):
        response = api_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["last_message_id"] == 99
        assert data["queue"]["pending"] == 2
        assert data["queue"]["worker_active"] is True
        assert data["uptime_seconds"] >= 0


class TestWebhook:
    """Test the token-guarded webhook endpoint."""

    def test_valid_token_acknowledged(self, api_client, test_config, gate):
        """Test an update on the token path is handed to the gate."""
        update = {"update_id": 1, "message": {"message_id": 2, "chat": {"id": 3}}}

        response = api_client.post(f"/{test_config.bot_token}", json=update)

        assert response.status_code == 200
        assert response.text == "OK"
        gate.submit.assert_called_once_with(update)

    def test_wrong_token_not_found(self, api_client, gate):
        response = api_client.post("/not-the-token", json={"update_id": 1})

        assert response.status_code == 404
        gate.submit.assert_not_called()

    def test_token_prefix_not_accepted(self, api_client, test_config, gate):
        response = api_client.post(f"/{test_config.bot_token[:-1]}", json={"update_id": 1})

        assert response.status_code == 404
        gate.submit.assert_not_called()

    def test_malformed_body_acknowledged(self, api_client, test_config, gate):
        """Test a body that is not JSON is acknowledged and dropped."""
        response = api_client.post(
            f"/{test_config.bot_token}",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.text == "OK"
        gate.submit.assert_not_called()

    def test_get_on_token_path_not_allowed(self, api_client, test_config):
        response = api_client.get(f"/{test_config.bot_token}")
        assert response.status_code == 405


class TestMetricsEndpoint:
    """Test the Prometheus endpoint toggle."""

    def test_metrics_disabled(self, api_client):
        # Falls through to the webhook route, which rejects the wrong token
        response = api_client.get("/metrics")
        assert response.status_code in (404, 405)

    def test_metrics_enabled(self, test_config, gate, monkeypatch):
        monkeypatch.setattr(dependencies, "_config_instance", test_config)
        monkeypatch.setattr(dependencies, "_gate_instance", gate)
        monkeypatch.setattr(dependencies, "_tracker_instance", SequenceTracker())

        with TestClient(create_app(enable_metrics=True)) as client:
            response = client.get("/metrics")

        assert response.status_code == 200


class TestDependencies:
    """Test dependency accessors."""

    def test_unset_gate_raises(self, monkeypatch):
        monkeypatch.setattr(dependencies, "_gate_instance", None)
        with pytest.raises(RuntimeError):
            dependencies.get_gate()

    def test_get_queue_reads_gate(self, gate, monkeypatch):
        monkeypatch.setattr(dependencies, "_gate_instance", gate)
        assert dependencies.get_queue() is gate.queue
