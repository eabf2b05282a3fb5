"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from conftest import sign
from integration_hub.main import create_app
from integration_hub.models import IntegrationEventType


BODY = '{"event":"ping"}'
ACME_CONFIG = {"webhookUrl": "https://x.test/hook", "webhookSecret": "s3cr3t"}


@pytest.fixture
def client(settings, hub):
    app = create_app(settings, hub=hub)
    with TestClient(app) as client:
        yield client


class TestWebhookEndpoint:
    """POST/GET /api/v1/webhooks/{integration_id}."""

    def test_signed_delivery(self, client, hub, recorder):
        client.post("/api/v1/integrations/acme/connect", json={"config": ACME_CONFIG})

        response = client.post(
            "/api/v1/webhooks/acme",
            content=BODY,
            headers={"Content-Type": "application/json", "X-Webhook-Signature": sign(BODY, "s3cr3t")},
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["success"] is True
        assert payload["message"] == "Webhook processed successfully"
        assert payload["event_id"].startswith("webhook-")
        assert hub.get_webhook_events()[0].event == "ping"
        assert len(recorder.of_type(IntegrationEventType.WEBHOOK_RECEIVED)) == 1

    def test_bad_signature(self, client):
        client.post("/api/v1/integrations/acme/connect", json={"config": ACME_CONFIG})

        response = client.post(
            "/api/v1/webhooks/acme",
            content=BODY,
            headers={"X-Webhook-Signature": sign(BODY, "wrong")},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"] == "invalid signature"

    def test_not_connected(self, client):
        response = client.post("/api/v1/webhooks/jira", content="{}")

        assert response.status_code == 400
        assert response.json()["error"] == "not connected"

    def test_non_json_body_is_forwarded_as_text(self, client, hub):
        client.post("/api/v1/integrations/email/connect", json={"config": {"apiKey": "k"}})
        hub.register_webhook_policy("email", {"max_age_seconds": 600})

        response = client.post("/api/v1/webhooks/email", content="name=value")

        assert response.status_code == 200
        event = hub.get_webhook_events()[0]
        assert event.data == "name=value"
        assert event.event == "webhook_received"

    def test_event_name_from_type_field(self, client, hub):
        client.post("/api/v1/integrations/email/connect", json={"config": {"apiKey": "k"}})
        hub.register_webhook_policy("email", {"max_age_seconds": 600})

        client.post("/api/v1/webhooks/email", content='{"type":"bounce","action":"ignored"}')

        assert hub.get_webhook_events()[0].event == "bounce"

    def test_challenge_is_echoed(self, client):
        response = client.get("/api/v1/webhooks/slack", params={"challenge": "abc123"})

        assert response.status_code == 200
        assert response.text == "abc123"

    def test_get_ping(self, client, hub):
        client.post("/api/v1/integrations/email/connect", json={"config": {"apiKey": "k"}})
        hub.register_webhook_policy("email", {"max_age_seconds": 600})

        response = client.get("/api/v1/webhooks/email", params={"source": "monitor"})

        assert response.json()["success"] is True
        event = hub.get_webhook_events()[0]
        assert event.event == "webhook_ping"
        assert event.data == {"source": "monitor"}

    def test_internal_error_is_hidden(self, client, hub, monkeypatch):
        async def explode(*args, **kwargs):
            raise RuntimeError("database exploded")

        monkeypatch.setattr(hub, "handle_incoming_webhook", explode)

        response = client.post("/api/v1/webhooks/acme", content=BODY)

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "database" not in response.text

    def test_webhook_url(self, client):
        response = client.get("/api/v1/webhooks/slack/url")

        assert response.json() == {
            "integration_id": "slack",
            "webhook_url": "http://localhost:8000/api/v1/webhooks/slack",
        }

    def test_test_endpoint(self, client, hub):
        client.post("/api/v1/integrations/email/connect", json={"config": {"apiKey": "k"}})
        hub.register_webhook_policy("email", {"max_age_seconds": 600})

        response = client.post("/api/v1/webhooks/email/test", json={"hello": "world"})

        assert response.status_code == 200
        assert response.json()["test_mode"] is True


class TestIntegrationEndpoints:
    """Management API."""

    def test_list_and_filter(self, client):
        response = client.get("/api/v1/integrations/")
        assert response.json()["total"] == 9

        response = client.get("/api/v1/integrations/", params={"category": "communication"})
        assert {i["id"] for i in response.json()["items"]} == {"slack", "teams", "email"}

    def test_invalid_filter(self, client):
        response = client.get("/api/v1/integrations/", params={"status": "sleeping"})

        assert response.status_code == 422

    def test_get_unknown(self, client):
        assert client.get("/api/v1/integrations/nope").status_code == 404

    def test_connect_masks_secrets(self, client):
        response = client.post("/api/v1/integrations/acme/connect", json={"config": ACME_CONFIG})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "connected"
        assert body["config"]["webhookUrl"] == "https://x.test/hook"
        assert body["config"]["webhookSecret"] == "********"
        assert "s3cr3t" not in response.text

    def test_connect_invalid_config(self, client):
        response = client.post("/api/v1/integrations/trello/connect", json={"config": {}})

        assert response.status_code == 400
        assert response.json()["detail"] == {"field": "apiKey", "message": "API Key is required"}
        assert client.get("/api/v1/integrations/trello").json()["status"] == "error"

    def test_connect_unknown(self, client):
        response = client.post("/api/v1/integrations/nope/connect", json={"config": {}})

        assert response.status_code == 404

    def test_disconnect(self, client):
        client.post("/api/v1/integrations/acme/connect", json={"config": ACME_CONFIG})

        response = client.post("/api/v1/integrations/acme/disconnect")

        assert response.json()["status"] == "disconnected"
        assert response.json()["config"] == {}

    def test_connection_test(self, client):
        assert client.post("/api/v1/integrations/jira/test").json()["is_connected"] is False
        assert client.post("/api/v1/integrations/nope/test").status_code == 404

        client.post("/api/v1/integrations/jira/connect", json={"config": {"apiKey": "k"}})
        assert client.post("/api/v1/integrations/jira/test").json()["is_connected"] is True

    def test_action_requires_connection(self, client):
        response = client.post("/api/v1/integrations/jira/actions/issue-creation", json={"data": {}})

        assert response.status_code == 409

    def test_action(self, client):
        client.post("/api/v1/integrations/jira/connect", json={"config": {"apiKey": "k"}})

        response = client.post(
            "/api/v1/integrations/jira/actions/issue-creation",
            json={"data": {"title": "Broken"}},
        )

        assert response.status_code == 200
        assert response.json()["result"] == {
            "success": True,
            "action": "issue-creation",
            "data": {"title": "Broken"},
        }

    def test_event_history(self, client):
        client.post("/api/v1/integrations/jira/connect", json={"config": {"apiKey": "k"}})
        client.post("/api/v1/integrations/acme/disconnect")

        response = client.get("/api/v1/integrations/events", params={"integration_id": "jira"})

        assert [e["type"] for e in response.json()["items"]] == ["connection_established"]

    def test_webhook_event_log(self, client, hub):
        client.post("/api/v1/integrations/acme/connect", json={"config": ACME_CONFIG})
        client.post("/api/v1/webhooks/acme", content=BODY, headers={"X-Webhook-Signature": sign(BODY, "s3cr3t")})

        response = client.get("/api/v1/integrations/webhook-events", params={"source": "acme"})

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["processed"] is True


class TestHealth:
    """Health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "integration-hub"

    def test_detailed_health(self, client):
        client.post("/api/v1/integrations/trello/connect", json={"config": {}})

        checks = client.get("/health/detailed").json()

        assert checks["status"] == "degraded"
        assert checks["checks"]["integrations"]["total"] == 9
        assert checks["checks"]["integrations"]["by_status"]["error"] == 1
        assert {"slack", "zapier", "github"} <= set(checks["checks"]["providers"])
