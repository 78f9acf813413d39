from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from dragon_drop.core.dependencies import get_celebration_config, get_celebrations_service, get_employee_snapshot
from dragon_drop.models.alerts import CelebrationAlert, CelebrationConfig, CelebrationSendResult, CelebrationSummary
from dragon_drop.models.employee import Employee
from dragon_drop.services.celebrations_service import CelebrationsService

router = APIRouter(prefix="/celebrations", tags=["celebrations"])


@router.get("", response_model=list[CelebrationAlert])
async def upcoming_celebrations(
    days_ahead: int = Query(7, ge=0, le=366),
    employees: list[Employee] = Depends(get_employee_snapshot),  # noqa: B008
    service: CelebrationsService = Depends(get_celebrations_service),  # noqa: B008
):
    return service.get_upcoming_celebrations(employees, days_ahead)


@router.get("/summary", response_model=CelebrationSummary)
async def celebration_summary(
    employees: list[Employee] = Depends(get_employee_snapshot),  # noqa: B008
    service: CelebrationsService = Depends(get_celebrations_service),  # noqa: B008
):
    return service.get_celebration_summary(employees)


@router.post("/send", response_model=CelebrationSendResult)
async def send_celebrations(
    employees: list[Employee] = Depends(get_employee_snapshot),  # noqa: B008
    service: CelebrationsService = Depends(get_celebrations_service),  # noqa: B008
    config: CelebrationConfig = Depends(get_celebration_config),  # noqa: B008
):
    return await service.send_celebration_notifications(employees, config)
