from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from dragon_drop.core.dependencies import get_employee_snapshot, get_tenure_alert_service
from dragon_drop.models.alerts import TenureAlert, TenureSummary
from dragon_drop.models.employee import Employee
from dragon_drop.services.tenure_alerts import TenureAlertService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenure-alerts", tags=["tenure-alerts"])


@router.get("", response_model=list[TenureAlert])
async def list_tenure_alerts(
    employees: list[Employee] = Depends(get_employee_snapshot),  # noqa: B008
    service: TenureAlertService = Depends(get_tenure_alert_service),  # noqa: B008
):
    return service.get_upcoming_tenure_alerts(employees)


@router.get("/summary", response_model=TenureSummary)
async def tenure_summary(
    employees: list[Employee] = Depends(get_employee_snapshot),  # noqa: B008
    service: TenureAlertService = Depends(get_tenure_alert_service),  # noqa: B008
):
    return service.get_tenure_summary(employees)


@router.post("/send")
async def send_tenure_alerts(
    force: bool = False,
    employees: list[Employee] = Depends(get_employee_snapshot),  # noqa: B008
    service: TenureAlertService = Depends(get_tenure_alert_service),  # noqa: B008
):
    """Send the digest now when inside the weekday alert hour, or whenever ``force`` is set."""
    if not force and not service.should_send_alerts():
        return {"sent": False, "alerts": 0, "error": "Outside the scheduled alert window"}

    alerts = service.get_upcoming_tenure_alerts(employees)
    result = await service.send_tenure_alerts(alerts)
    if result is None:
        return {"sent": False, "alerts": 0, "error": None}
    return {"sent": result.success, "alerts": len(alerts), "error": result.error}
