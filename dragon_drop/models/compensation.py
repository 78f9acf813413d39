"""Compensation constants per role and commission tier."""

from __future__ import annotations

from pydantic import BaseModel

from dragon_drop.models.employee import CommissionTier, Role

# Agents move from the "new" to the "veteran" plan after this many calendar months.
TENURE_THRESHOLD_MONTHS = 6


class CompensationInfo(BaseModel):
    base_salary: float
    commission_rate: float
    description: str

    model_config = {"frozen": True}


ROLE_COMPENSATION: dict[Role, CompensationInfo] = {
    Role.SALES_DIRECTOR: CompensationInfo(
        base_salary=0,
        commission_rate=0,
        description="Compensation TBD",
    ),
    Role.SALES_MANAGER: CompensationInfo(
        base_salary=90_000,
        commission_rate=0,
        description="$90k annual salary",
    ),
    Role.TEAM_LEAD: CompensationInfo(
        base_salary=40_000,
        commission_rate=0.20,
        description="$40k annual salary + 20% commission",
    ),
    Role.AGENT: CompensationInfo(
        base_salary=60_000,
        commission_rate=0.05,
        description="$60k salary + 5% commission (first 6 months), then $30k + 20% commission",
    ),
}

AGENT_VETERAN_COMPENSATION = CompensationInfo(
    base_salary=30_000,
    commission_rate=0.20,
    description="$30k annual salary + 20% commission",
)

AGENT_COMPENSATION_BY_TIER: dict[CommissionTier, CompensationInfo] = {
    CommissionTier.NEW: ROLE_COMPENSATION[Role.AGENT],
    CommissionTier.VETERAN: AGENT_VETERAN_COMPENSATION,
}


class CommissionCalculation(BaseModel):
    current_salary: float
    current_commission_rate: float
    tier: CommissionTier
    months_employed: int
    days_until_change: int | None = None
    will_change_to_veteran: bool = False
    is_early_promotion: bool = False
    description: str
