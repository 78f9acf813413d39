"""Derived alert records. Recomputed on every query, never persisted."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel

from dragon_drop.models.employee import CommissionTier, Employee


class AlertType(StrEnum):
    UPCOMING = "upcoming"
    IMMINENT = "imminent"
    OVERDUE = "overdue"


class CelebrationType(StrEnum):
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"


class TenureAlert(BaseModel):
    employee: Employee
    # Overdue alerts carry the number of days overdue here.
    days_until_eligible: int
    eligibility_date: dt.datetime
    current_tier: CommissionTier = CommissionTier.NEW
    alert_type: AlertType
    message: str


class TenureSummary(BaseModel):
    total_new_agents: int = 0
    total_veteran_agents: int = 0
    upcoming_transitions: int = 0
    overdue_transitions: int = 0


class CelebrationAlert(BaseModel):
    employee: Employee
    type: CelebrationType
    date: dt.date
    years_count: int | None = None
    days_until: int


class CelebrationConfig(BaseModel):
    channel_id: str = ""
    enable_birthdays: bool = True
    enable_anniversaries: bool = True
    advance_notice_days: int = 0


class CelebrationSendResult(BaseModel):
    success: bool
    message: str
    alerts: list[CelebrationAlert] = []


class CelebrationSummary(BaseModel):
    today_birthdays: list[CelebrationAlert] = []
    today_anniversaries: list[CelebrationAlert] = []
    upcoming_birthdays: list[CelebrationAlert] = []
    upcoming_anniversaries: list[CelebrationAlert] = []
