from __future__ import annotations

from unittest.mock import AsyncMock, patch

from dragon_drop.services.notifications import notification_gateway


def test_status_without_webhooks(client):
    response = client.get("/api/v1/integrations/status")
    assert response.status_code == 200
    assert response.json() == {"n8n_configured": False, "slack_configured": False}


def test_configure_webhooks_at_runtime(client):
    response = client.put(
        "/api/v1/integrations/webhooks",
        json={"slackWebhookUrl": "https://hooks.slack.com/services/T/B/X"},
    )

    assert response.status_code == 200
    assert response.json() == {"n8n_configured": False, "slack_configured": True}
    assert notification_gateway.slack_webhook_url == "https://hooks.slack.com/services/T/B/X"


def test_connection_test_reports_missing_urls(client):
    data = client.post("/api/v1/integrations/test").json()

    assert data["n8n"] is False
    assert data["slack"] is False
    assert "Slack webhook URL not configured" in data["errors"]


def test_connection_test_delegates_to_gateway(client):
    result = {"n8n": True, "slack": True, "errors": []}
    with patch.object(notification_gateway, "test_connections", AsyncMock(return_value=result)):
        data = client.post("/api/v1/integrations/test").json()

    assert data == result
