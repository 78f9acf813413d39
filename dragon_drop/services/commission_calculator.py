"""Commission tier calculation for agents.

An agent is paid on the "new" plan ($60k + 5%) for their first six calendar
months and on the "veteran" plan ($30k + 20%) afterwards. The tier stored on
the employee record is the system of record for pay below the six-month mark
(it is how early promotions are represented); the tenure-derived tier is the
eligibility signal used to flag records that still need to be flipped.
"""

from __future__ import annotations

import calendar
import math
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from dragon_drop.models.compensation import (
    AGENT_COMPENSATION_BY_TIER,
    ROLE_COMPENSATION,
    TENURE_THRESHOLD_MONTHS,
    CommissionCalculation,
)
from dragon_drop.models.employee import CommissionTier, Employee

SECONDS_PER_DAY = 24 * 60 * 60

MILESTONE_WINDOW_DAYS = 7

TIER_DOWNGRADE_ERROR = "Cannot downgrade from veteran to new agent status. This is a one-way promotion."


def resolve_now(now: datetime | None = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def add_months(value: datetime, months: int) -> datetime:
    """Calendar month addition; the day is clamped to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def months_between(later: datetime, earlier: datetime) -> int:
    """Whole calendar months from ``earlier`` to ``later``; a partial month is not counted."""
    if later < earlier:
        return -months_between(earlier, later)
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if months > 0 and add_months(earlier, months) > later:
        months -= 1
    return months


def days_until(target: datetime, now: datetime) -> int:
    return math.ceil((target - now) / timedelta(seconds=SECONDS_PER_DAY))


def six_month_date(employee: Employee) -> datetime:
    return add_months(employee.start_date, TENURE_THRESHOLD_MONTHS)


def calculate_agent_commission(employee: Employee, now: datetime | None = None) -> CommissionCalculation | None:
    if not employee.is_agent:
        return None

    now = resolve_now(now)
    months_employed = months_between(now, employee.start_date)
    is_tenure_veteran = months_employed >= TENURE_THRESHOLD_MONTHS

    if employee.commission_tier is not None:
        tier = employee.commission_tier
    else:
        tier = CommissionTier.VETERAN if is_tenure_veteran else CommissionTier.NEW

    days_until_change: int | None = None
    will_change_to_veteran = False

    if tier == CommissionTier.NEW and not is_tenure_veteran:
        days_left = days_until(six_month_date(employee), now)
        if days_left > 0:
            days_until_change = days_left
            will_change_to_veteran = True
    else:
        # Six months of tenure always pays on the veteran plan, whatever the stored tier says.
        tier = CommissionTier.VETERAN

    compensation = AGENT_COMPENSATION_BY_TIER[tier]
    return CommissionCalculation(
        current_salary=compensation.base_salary,
        current_commission_rate=compensation.commission_rate,
        tier=tier,
        months_employed=months_employed,
        days_until_change=days_until_change,
        will_change_to_veteran=will_change_to_veteran,
        is_early_promotion=tier == CommissionTier.VETERAN and not is_tenure_veteran,
        description=compensation.description,
    )


def check_commission_eligibility(employee: Employee, now: datetime | None = None) -> bool:
    """True when tenure says veteran but the stored tier has not been flipped yet."""
    if not employee.is_agent:
        return False
    if employee.commission_tier == CommissionTier.VETERAN:
        return False
    return months_between(resolve_now(now), employee.start_date) >= TENURE_THRESHOLD_MONTHS


def can_promote_to_veteran(employee: Employee) -> bool:
    if not employee.is_agent:
        return False
    return employee.commission_tier != CommissionTier.VETERAN


def validate_commission_tier_change(
    current_tier: CommissionTier | None,
    new_tier: CommissionTier | None,
) -> tuple[bool, str | None]:
    """Veteran is one-way: clearing the tier counts as a downgrade too."""
    if current_tier == CommissionTier.VETERAN and new_tier != CommissionTier.VETERAN:
        return False, TIER_DOWNGRADE_ERROR
    return True, None


def get_agents_approaching_milestone(
    employees: Iterable[Employee],
    now: datetime | None = None,
) -> list[Employee]:
    now = resolve_now(now)
    approaching: list[Employee] = []
    for employee in employees:
        if not employee.is_agent or employee.commission_tier == CommissionTier.VETERAN:
            continue
        days_left = days_until(six_month_date(employee), now)
        if 0 < days_left <= MILESTONE_WINDOW_DAYS:
            approaching.append(employee)
    return approaching


def get_agents_needing_update(employees: Iterable[Employee], now: datetime | None = None) -> list[Employee]:
    now = resolve_now(now)
    return [employee for employee in employees if check_commission_eligibility(employee, now)]


def get_early_promoted_agents(employees: Iterable[Employee], now: datetime | None = None) -> list[Employee]:
    now = resolve_now(now)
    early: list[Employee] = []
    for employee in employees:
        calc = calculate_agent_commission(employee, now)
        if calc is not None and calc.is_early_promotion:
            early.append(employee)
    return early


def format_commission_info(calc: CommissionCalculation) -> str:
    info = f"${calc.current_salary:,.0f} annual + {calc.current_commission_rate * 100:g}% commission"
    if calc.is_early_promotion:
        info += " (early promotion)"
    elif calc.will_change_to_veteran and calc.days_until_change:
        info += f" ({calc.days_until_change} days until veteran eligibility)"
    return info


def get_compensation_info(employee: Employee, now: datetime | None = None) -> str:
    calc = calculate_agent_commission(employee, now)
    if calc is not None:
        return format_commission_info(calc)
    return ROLE_COMPENSATION[employee.role].description


def calculate_total_compensation(
    employee: Employee,
    annual_commission: float = 0,
    now: datetime | None = None,
) -> float:
    calc = calculate_agent_commission(employee, now)
    if calc is not None:
        return calc.current_salary + annual_commission
    return ROLE_COMPENSATION[employee.role].base_salary + annual_commission


def get_batch_commission_updates(employees: Iterable[Employee], now: datetime | None = None) -> list[Employee]:
    """Copies of every agent needing an update, with the tier flipped to veteran."""
    return [
        employee.model_copy(update={"commission_tier": CommissionTier.VETERAN})
        for employee in get_agents_needing_update(employees, now)
    ]
