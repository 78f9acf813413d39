"""Outbound notification payloads and delivery results."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from dragon_drop.models.employee import CamelModel, ChangeType

SlackMessage = dict[str, Any]


class NotificationResult(BaseModel):
    success: bool
    error: str | None = None


class WebhookEmployee(CamelModel):
    id: str
    name: str
    role: str
    site: str
    manager_id: str | None = None
    manager_name: str | None = None


class WebhookChange(CamelModel):
    description: str
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None


class WebhookMetadata(CamelModel):
    user_id: str | None = None
    source: Literal["dragon_drop_app"] = "dragon_drop_app"
    version: Literal["1.0.0"] = "1.0.0"


class WebhookPayload(CamelModel):
    """Organizational change event sent to the workflow automation webhook."""

    timestamp: str
    site: str
    change_type: ChangeType
    employee: WebhookEmployee
    change: WebhookChange
    metadata: WebhookMetadata = WebhookMetadata()

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChangeNotificationResult(BaseModel):
    n8n_result: NotificationResult | None = None
    slack_result: NotificationResult | None = None
    errors: list[str] = []
