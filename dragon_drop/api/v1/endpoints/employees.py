from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from dragon_drop.core.dependencies import get_employee_or_404, get_employee_snapshot, service_error
from dragon_drop.models.employee import (
    ChangeLogEntry,
    ChangeType,
    Employee,
    EmployeeCreate,
    EmployeeUpdate,
    TerminationDetails,
)
from dragon_drop.models.requests import (
    BulkUpdateItem,
    CommissionTierUpdate,
    EmployeeMove,
    EmployeePromotion,
    EmployeeTransfer,
)
from dragon_drop.services.change_log_service import change_log_service
from dragon_drop.services.commission_calculator import validate_commission_tier_change
from dragon_drop.services.employee_service import CommissionTierChangeError, EmployeeServiceError, employee_service
from dragon_drop.services.notifications import build_change_payload, notification_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


async def _record_change(
    change_type: ChangeType,
    employee: Employee,
    description: str,
    *,
    old_data: dict[str, Any] | None = None,
    new_data: dict[str, Any] | None = None,
    from_: str | None = None,
    to: str | None = None,
    manager_name: str | None = None,
) -> None:
    """Audit and announce a mutation that has already been persisted; delivery problems are only logged."""
    await change_log_service.record(change_type, employee.id, old_data, new_data)

    configured = notification_gateway.get_config_status()
    if not (configured["n8n_configured"] or configured["slack_configured"]):
        return

    payload = build_change_payload(change_type, employee, description, from_=from_, to=to, manager_name=manager_name)
    result = await notification_gateway.notify_change(
        payload,
        send_to_n8n=configured["n8n_configured"],
        send_to_slack=configured["slack_configured"],
    )
    if result.errors:
        logger.warning("Change notification for %s incomplete: %s", employee.id, "; ".join(result.errors))


def _check_tier_change(employee: Employee, updates: EmployeeUpdate) -> None:
    """Generic updates obey the same one-way tier rule as ``/commission-tier``."""
    if "commission_tier" not in updates.model_fields_set:
        return
    valid, error = validate_commission_tier_change(employee.commission_tier, updates.commission_tier)
    if not valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)


@router.get("", response_model=list[Employee])
async def list_employees(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return employees


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_employee(body: EmployeeCreate):
    try:
        employee_id = await employee_service.create(body)
    except EmployeeServiceError as err:
        raise service_error(err) from err

    employee = Employee(id=employee_id, **body.model_dump())
    await _record_change(
        ChangeType.EMPLOYEE_CREATE,
        employee,
        f"{employee.name} joined as {employee.role} in {employee.site}",
        new_data=employee.to_document(),
    )
    return {"id": employee_id}


@router.post("/bulk")
async def bulk_update_employees(items: list[BulkUpdateItem]):
    employees = await asyncio.gather(*(get_employee_or_404(item.id) for item in items))
    for employee, item in zip(employees, items):
        _check_tier_change(employee, item.updates)

    try:
        await employee_service.bulk_update([(item.id, item.updates.to_patch()) for item in items])
    except EmployeeServiceError as err:
        raise service_error(err) from err

    for employee, item in zip(employees, items):
        patch = item.updates.to_patch()
        await _record_change(
            ChangeType.BULK_ACTION,
            employee,
            f"Bulk update of {', '.join(patch) or 'no fields'} for {employee.name}",
            old_data={key: employee.to_document().get(key) for key in patch},
            new_data=patch,
        )
    return {"updated": [item.id for item in items]}


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    return employee


@router.get("/{employee_id}/history", response_model=list[ChangeLogEntry])
async def get_employee_history(employee_id: str):
    try:
        return await change_log_service.get_by_employee(employee_id)
    except Exception as err:
        logger.exception("Failed to load change history for %s", employee_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch change history",
        ) from err


@router.patch("/{employee_id}", response_model=Employee)
async def update_employee(body: EmployeeUpdate, employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    _check_tier_change(employee, body)
    patch = body.to_patch()
    try:
        await employee_service.update(employee.id, patch)
    except EmployeeServiceError as err:
        raise service_error(err) from err
    return Employee.model_validate({**employee.to_document(), **patch})


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    try:
        await employee_service.delete(employee.id)
    except EmployeeServiceError as err:
        raise service_error(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{employee_id}/move")
async def move_employee(body: EmployeeMove, employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    new_manager = await get_employee_or_404(body.manager_id)
    try:
        await employee_service.move_to_manager(employee.id, new_manager.id)
    except EmployeeServiceError as err:
        raise service_error(err) from err

    await _record_change(
        ChangeType.EMPLOYEE_MOVE,
        employee.model_copy(update={"manager_id": new_manager.id}),
        f"{employee.name} moved to {new_manager.name}'s team",
        old_data={"managerId": employee.manager_id},
        new_data={"managerId": new_manager.id},
        from_=employee.manager_id,
        to=new_manager.id,
        manager_name=new_manager.name,
    )
    return {"id": employee.id, "managerId": new_manager.id}


@router.post("/{employee_id}/transfer")
async def transfer_employee(body: EmployeeTransfer, employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    try:
        await employee_service.transfer_to_site(employee.id, body.site)
    except EmployeeServiceError as err:
        raise service_error(err) from err

    await _record_change(
        ChangeType.EMPLOYEE_TRANSFER,
        employee.model_copy(update={"site": body.site}),
        f"{employee.name} transferred from {employee.site} to {body.site}",
        old_data={"site": employee.site.value},
        new_data={"site": body.site.value},
        from_=employee.site.value,
        to=body.site.value,
    )
    return {"id": employee.id, "site": body.site}


@router.post("/{employee_id}/promote")
async def promote_employee(body: EmployeePromotion, employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    try:
        await employee_service.promote(employee.id, body.role)
    except EmployeeServiceError as err:
        raise service_error(err) from err

    await _record_change(
        ChangeType.EMPLOYEE_PROMOTE,
        employee.model_copy(update={"role": body.role}),
        f"{employee.name} promoted from {employee.role} to {body.role}",
        old_data={"role": employee.role.value},
        new_data={"role": body.role.value},
        from_=employee.role.value,
        to=body.role.value,
    )
    return {"id": employee.id, "role": body.role}


@router.post("/{employee_id}/terminate")
async def terminate_employee(body: TerminationDetails, employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    if not employee.is_active:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Employee with id '{employee.id}' is already terminated",
        )

    try:
        await employee_service.terminate(employee.id, body)
    except EmployeeServiceError as err:
        raise service_error(err) from err

    termination = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    await _record_change(
        ChangeType.EMPLOYEE_TERMINATE,
        employee,
        f"{employee.name} terminated ({body.reason.value.replace('_', ' ')})",
        old_data={"status": employee.status.value},
        new_data={"status": "terminated", "termination": termination},
    )
    return {"id": employee.id, "status": "terminated", "eligibleForRehire": body.eligible_for_rehire}


@router.put("/{employee_id}/commission-tier")
async def update_commission_tier(body: CommissionTierUpdate, employee: Employee = Depends(get_employee_or_404)):  # noqa: B008
    try:
        await employee_service.update_commission_tier(employee.id, body.commission_tier)
    except CommissionTierChangeError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    except EmployeeServiceError as err:
        raise service_error(err) from err

    old_tier = employee.commission_tier.value if employee.commission_tier else None
    await _record_change(
        ChangeType.EMPLOYEE_PROMOTE,
        employee.model_copy(update={"commission_tier": body.commission_tier}),
        f"{employee.name} commission tier set to {body.commission_tier}",
        old_data={"commissionTier": old_tier},
        new_data={"commissionTier": body.commission_tier.value},
        from_=old_tier,
        to=body.commission_tier.value,
    )
    return {"id": employee.id, "commissionTier": body.commission_tier}
