"""Webhook delivery to Slack (chat) and n8n (workflow automation)."""

from __future__ import annotations

import logging
from datetime import datetime

import aiohttp

from dragon_drop.core.config import Settings
from dragon_drop.models.employee import ChangeType, Employee
from dragon_drop.models.notifications import (
    ChangeNotificationResult,
    NotificationResult,
    SlackMessage,
    WebhookChange,
    WebhookEmployee,
    WebhookPayload,
)
from dragon_drop.services.commission_calculator import resolve_now

logger = logging.getLogger(__name__)

_CHANGE_EMOJI: dict[ChangeType, str] = {
    ChangeType.EMPLOYEE_MOVE: "🔄",
    ChangeType.EMPLOYEE_PROMOTE: "⬆️",
    ChangeType.EMPLOYEE_TRANSFER: "🏢",
    ChangeType.EMPLOYEE_TERMINATE: "❌",
    ChangeType.EMPLOYEE_CREATE: "✅",
    ChangeType.BULK_ACTION: "📦",
}

_SLACK_STATUS_ERRORS: dict[int, str] = {
    400: "Invalid payload. Please check your message format.",
    403: "Webhook is invalid or has been disabled.",
    404: "Webhook not found. Please check your webhook URL.",
}


def format_change_type(change_type: ChangeType) -> str:
    return " ".join(word.capitalize() for word in change_type.value.split("_"))


def build_change_payload(
    change_type: ChangeType,
    employee: Employee,
    description: str,
    *,
    from_: str | None = None,
    to: str | None = None,
    manager_name: str | None = None,
    now: datetime | None = None,
) -> WebhookPayload:
    return WebhookPayload(
        timestamp=resolve_now(now).isoformat().replace("+00:00", "Z"),
        site=employee.site.value,
        change_type=change_type,
        employee=WebhookEmployee(
            id=employee.id,
            name=employee.name,
            role=employee.role.value,
            site=employee.site.value,
            manager_id=employee.manager_id,
            manager_name=manager_name,
        ),
        change=WebhookChange(description=description, from_=from_, to=to),
    )


def create_slack_message(payload: WebhookPayload) -> SlackMessage:
    emoji = _CHANGE_EMOJI.get(payload.change_type, "📝")
    timestamp = datetime.fromisoformat(payload.timestamp.replace("Z", "+00:00"))
    return {
        "text": f"{emoji} Organizational Change: {payload.change.description}",
        "blocks": [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": f"{emoji} Dragon Drop - Organizational Update"},
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Employee:* {payload.employee.name}"},
                    {"type": "mrkdwn", "text": f"*Role:* {payload.employee.role}"},
                    {"type": "mrkdwn", "text": f"*Site:* {payload.employee.site}"},
                    {"type": "mrkdwn", "text": f"*Change Type:* {format_change_type(payload.change_type)}"},
                ],
            },
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*Description:* {payload.change.description}"},
            },
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": f"📅 {timestamp:%b %d, %Y %H:%M} | 🏢 {payload.site} Site | 🤖 Dragon Drop App",
                    }
                ],
            },
        ],
    }


class NotificationGateway:
    def __init__(self) -> None:
        self.slack_webhook_url = ""
        self.n8n_webhook_url = ""
        self.timeout_seconds = 15
        self.initialized = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        self.slack_webhook_url = settings.SLACK_WEBHOOK_URL
        self.n8n_webhook_url = settings.N8N_WEBHOOK_URL
        self.timeout_seconds = settings.WEBHOOK_TIMEOUT_SECONDS
        self.initialized = True

        if not self.slack_webhook_url:
            logger.warning("Slack webhook URL missing — Slack notifications disabled")
        if not self.n8n_webhook_url:
            logger.warning("n8n webhook URL missing — workflow notifications disabled")

    async def close(self) -> None:
        self.slack_webhook_url = ""
        self.n8n_webhook_url = ""
        self.initialized = False

    def set_slack_webhook(self, url: str) -> None:
        self.slack_webhook_url = url

    def set_n8n_webhook(self, url: str) -> None:
        self.n8n_webhook_url = url

    def get_config_status(self) -> dict[str, bool]:
        return {
            "n8n_configured": bool(self.n8n_webhook_url),
            "slack_configured": bool(self.slack_webhook_url),
        }

    async def send_to_slack(self, message: SlackMessage) -> NotificationResult:
        if not self.slack_webhook_url:
            logger.warning("Slack webhook URL not configured")
            return NotificationResult(success=False, error="Slack webhook URL not configured")

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.slack_webhook_url, json=message) as response:
                    if 200 <= response.status < 300:
                        logger.info("Slack message sent")
                        return NotificationResult(success=True)

                    error_text = await response.text()
                    error = _SLACK_STATUS_ERRORS.get(response.status, f"Slack returned error: {error_text}")
                    logger.error("Slack webhook failed (%s): %s", response.status, error_text)
                    return NotificationResult(success=False, error=error)
        except Exception as e:
            logger.exception("Slack webhook error")
            return NotificationResult(success=False, error=str(e) or "Unknown error")

    async def send_to_n8n(self, payload: WebhookPayload) -> NotificationResult:
        if not self.n8n_webhook_url:
            logger.warning("n8n webhook URL not configured")
            return NotificationResult(success=False, error="n8n webhook URL not configured")

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.n8n_webhook_url, json=payload.to_json()) as response:
                    if 200 <= response.status < 300:
                        logger.info("n8n webhook delivered (change=%s)", payload.change_type.value)
                        return NotificationResult(success=True)

                    logger.error("n8n webhook failed with status %s", response.status)
                    return NotificationResult(
                        success=False,
                        error=f"n8n webhook failed with status: {response.status}",
                    )
        except Exception as e:
            logger.exception("n8n webhook error")
            return NotificationResult(success=False, error=str(e) or "Unknown error")

    async def notify_change(
        self,
        payload: WebhookPayload,
        *,
        send_to_n8n: bool = True,
        send_to_slack: bool = True,
    ) -> ChangeNotificationResult:
        result = ChangeNotificationResult()

        if send_to_n8n:
            result.n8n_result = await self.send_to_n8n(payload)
            if not result.n8n_result.success:
                result.errors.append(f"n8n: {result.n8n_result.error}")

        if send_to_slack:
            result.slack_result = await self.send_to_slack(create_slack_message(payload))
            if not result.slack_result.success:
                result.errors.append(f"Slack: {result.slack_result.error}")

        return result

    async def test_connections(self) -> dict[str, object]:
        errors: list[str] = []
        n8n_ok = False
        slack_ok = False

        if self.n8n_webhook_url:
            test_payload = WebhookPayload(
                timestamp=resolve_now().isoformat().replace("+00:00", "Z"),
                site="Test",
                change_type=ChangeType.EMPLOYEE_CREATE,
                employee=WebhookEmployee(id="test-001", name="Test Employee", role="Agent", site="Test"),
                change=WebhookChange(description="Connection test from Dragon Drop"),
            )
            result = await self.send_to_n8n(test_payload)
            n8n_ok = result.success
            if not result.success:
                errors.append(f"n8n test failed: {result.error}")
        else:
            errors.append("n8n webhook URL not configured")

        if self.slack_webhook_url:
            result = await self.send_to_slack(
                {
                    "text": "🧪 Dragon Drop Connection Test",
                    "blocks": [
                        {
                            "type": "section",
                            "text": {
                                "type": "mrkdwn",
                                "text": (
                                    "🧪 *Dragon Drop Connection Test*\n\n"
                                    "This is a test message to verify the Slack integration is working correctly."
                                ),
                            },
                        }
                    ],
                }
            )
            slack_ok = result.success
            if not result.success:
                errors.append(f"Slack test failed: {result.error}")
        else:
            errors.append("Slack webhook URL not configured")

        return {"n8n": n8n_ok, "slack": slack_ok, "errors": errors}


notification_gateway = NotificationGateway()
