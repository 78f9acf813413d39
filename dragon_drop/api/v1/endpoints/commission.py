from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from dragon_drop.core.dependencies import get_employee_or_404, get_employee_snapshot, service_error
from dragon_drop.models.employee import ChangeType, CommissionTier, Employee
from dragon_drop.models.requests import CommissionReport
from dragon_drop.services import commission_calculator
from dragon_drop.services.change_log_service import change_log_service
from dragon_drop.services.employee_service import EmployeeServiceError, employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commission", tags=["commission"])


def _active(employees: list[Employee]) -> list[Employee]:
    return [e for e in employees if e.is_active]


@router.get("/employees/{employee_id}", response_model=CommissionReport)
async def get_commission(employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    return CommissionReport(
        employee_id=employee.id,
        calculation=commission_calculator.calculate_agent_commission(employee),
        summary=commission_calculator.get_compensation_info(employee),
        eligible_for_veteran=commission_calculator.check_commission_eligibility(employee),
        can_promote=commission_calculator.can_promote_to_veteran(employee),
    )


@router.get("/needing-update", response_model=list[Employee])
async def agents_needing_update(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return commission_calculator.get_agents_needing_update(_active(employees))


@router.get("/approaching", response_model=list[Employee])
async def agents_approaching_milestone(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return commission_calculator.get_agents_approaching_milestone(_active(employees))


@router.get("/early-promotions", response_model=list[Employee])
async def early_promoted_agents(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return commission_calculator.get_early_promoted_agents(_active(employees))


@router.post("/batch-update")
async def apply_batch_update(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    """Flip every active agent past six months of tenure to the veteran tier."""
    active = _active(employees)
    previous_tiers = {employee.id: employee.commission_tier for employee in active}
    updates = commission_calculator.get_batch_commission_updates(active)
    if not updates:
        return {"updated": []}

    try:
        await employee_service.bulk_update(
            [(employee.id, {"commissionTier": CommissionTier.VETERAN.value}) for employee in updates]
        )
    except EmployeeServiceError as err:
        raise service_error(err) from err

    for employee in updates:
        old_tier = previous_tiers.get(employee.id)
        await change_log_service.record(
            ChangeType.BULK_ACTION,
            employee.id,
            {"commissionTier": old_tier.value if old_tier else None},
            {"commissionTier": CommissionTier.VETERAN.value},
        )

    logger.info("Moved %d agents to the veteran commission tier", len(updates))
    return {"updated": [employee.id for employee in updates]}
