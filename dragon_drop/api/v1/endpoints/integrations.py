from __future__ import annotations

import logging

from fastapi import APIRouter

from dragon_drop.models.requests import WebhookConfig
from dragon_drop.services.notifications import notification_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrations", tags=["integrations"])


@router.get("/status")
async def integration_status():
    return notification_gateway.get_config_status()


@router.post("/test")
async def test_integrations():
    return await notification_gateway.test_connections()


@router.put("/webhooks")
async def configure_webhooks(body: WebhookConfig):
    """Replace webhook URLs at runtime; omitted fields keep their current value."""
    if body.slack_webhook_url is not None:
        notification_gateway.set_slack_webhook(body.slack_webhook_url)
    if body.n8n_webhook_url is not None:
        notification_gateway.set_n8n_webhook(body.n8n_webhook_url)
    logger.info("Webhook configuration updated")
    return notification_gateway.get_config_status()
