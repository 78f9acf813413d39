"""Request bodies and small response envelopes for the HTTP API."""

from __future__ import annotations

from pydantic import Field

from dragon_drop.models.compensation import CommissionCalculation
from dragon_drop.models.employee import CamelModel, CommissionTier, EmployeeUpdate, Role, Site


class EmployeeMove(CamelModel):
    manager_id: str = Field(..., min_length=1)


class EmployeeTransfer(CamelModel):
    site: Site


class EmployeePromotion(CamelModel):
    role: Role


class CommissionTierUpdate(CamelModel):
    commission_tier: CommissionTier


class BulkUpdateItem(CamelModel):
    id: str
    updates: EmployeeUpdate


class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1)
    manager_id: str
    site: Site


class TeamUpdate(CamelModel):
    name: str | None = None
    manager_id: str | None = None
    site: Site | None = None
    agent_count: int | None = Field(default=None, ge=0)


class WebhookConfig(CamelModel):
    slack_webhook_url: str | None = None
    n8n_webhook_url: str | None = None


class CommissionReport(CamelModel):
    employee_id: str
    calculation: CommissionCalculation | None = None
    summary: str
    eligible_for_veteran: bool
    can_promote: bool
