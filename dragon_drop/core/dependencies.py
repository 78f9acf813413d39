from __future__ import annotations

from fastapi import HTTPException, status

from dragon_drop.core.config import settings
from dragon_drop.models.alerts import CelebrationConfig
from dragon_drop.models.employee import Employee, Site
from dragon_drop.services.celebrations_service import CelebrationsService
from dragon_drop.services.employee_service import EmployeeServiceError, employee_service
from dragon_drop.services.notifications import notification_gateway
from dragon_drop.services.tenure_alerts import TenureAlertService


def service_error(err: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(err),
    )


async def get_employee_snapshot(site: Site | None = None) -> list[Employee]:
    """Current employee collection, optionally narrowed to one site."""
    try:
        if site is not None:
            return await employee_service.get_by_site(site)
        return await employee_service.get_all()
    except EmployeeServiceError as err:
        raise service_error(err) from err


async def get_employee_or_404(employee_id: str) -> Employee:
    try:
        employee = await employee_service.get_by_id(employee_id)
    except EmployeeServiceError as err:
        raise service_error(err) from err

    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with id '{employee_id}' not found",
        )
    return employee


def get_tenure_alert_service() -> TenureAlertService:
    return TenureAlertService(notification_gateway, alert_hour=settings.TENURE_ALERT_HOUR)


def get_celebrations_service() -> CelebrationsService:
    return CelebrationsService(notification_gateway)


def get_celebration_config() -> CelebrationConfig:
    return CelebrationConfig(
        channel_id=settings.CELEBRATIONS_CHANNEL_ID,
        enable_birthdays=settings.CELEBRATIONS_ENABLE_BIRTHDAYS,
        enable_anniversaries=settings.CELEBRATIONS_ENABLE_ANNIVERSARIES,
        advance_notice_days=settings.CELEBRATIONS_ADVANCE_NOTICE_DAYS,
    )
