from __future__ import annotations

from fastapi import APIRouter, Depends

from dragon_drop.core.dependencies import get_employee_snapshot
from dragon_drop.models.employee import Employee
from dragon_drop.models.insights import (
    CompensationInsight,
    GrowthInsight,
    SiteComparison,
    TeamPerformance,
    TurnoverInsight,
)
from dragon_drop.services.insights_service import insights_service

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("/team", response_model=list[TeamPerformance])
async def team_performance(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return insights_service.get_team_performance_insights(employees)


@router.get("/sites", response_model=list[SiteComparison])
async def site_comparison(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return insights_service.get_site_comparison_insights(employees)


@router.get("/turnover", response_model=TurnoverInsight)
async def turnover(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return insights_service.get_turnover_insights(employees)


@router.get("/compensation", response_model=CompensationInsight)
async def compensation(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return insights_service.get_compensation_insights(employees)


@router.get("/growth", response_model=GrowthInsight)
async def growth(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return insights_service.get_growth_insights(employees)


@router.get("/recommendations", response_model=list[str])
async def recommendations(employees: list[Employee] = Depends(get_employee_snapshot)):  # noqa: B008
    return insights_service.get_recommendations(employees)
