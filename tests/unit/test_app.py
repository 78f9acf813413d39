def test_root_returns_message(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Dragon Drop API"


def test_health_returns_status(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("healthy", "degraded")
    assert "version" in data
    assert data["version"] == "0.1.0"
    assert "services" in data


def test_lifespan_leaves_services_unconfigured_without_credentials(client):
    from dragon_drop.services.employee_service import employee_service
    from dragon_drop.services.notifications import notification_gateway

    assert employee_service.initialized is False
    assert notification_gateway.initialized is True
    assert notification_gateway.get_config_status() == {"n8n_configured": False, "slack_configured": False}
