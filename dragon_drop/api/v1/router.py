from fastapi import APIRouter

from dragon_drop.api.v1.endpoints import (
    celebrations,
    commission,
    employees,
    health,
    insights,
    integrations,
    teams,
    tenure_alerts,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(employees.router)
api_router.include_router(teams.router)
api_router.include_router(commission.router)
api_router.include_router(tenure_alerts.router)
api_router.include_router(insights.router)
api_router.include_router(celebrations.router)
api_router.include_router(integrations.router)
