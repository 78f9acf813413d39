from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dragon_drop.api.v1.router import api_router
from dragon_drop.core.config import settings
from dragon_drop.services.change_log_service import change_log_service
from dragon_drop.services.employee_service import employee_service
from dragon_drop.services.notifications import notification_gateway
from dragon_drop.services.team_service import team_service

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await employee_service.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize EmployeeService — continuing without DB")
    try:
        await team_service.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize TeamService — continuing without teams")
    try:
        await change_log_service.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize ChangeLogService — continuing without change log")
    await notification_gateway.initialize(settings)
    yield
    await employee_service.close()
    await team_service.close()
    await change_log_service.close()
    await notification_gateway.close()


app = FastAPI(
    title="Dragon Drop API",
    description="Org chart, commission tiers, tenure alerts, insights and celebrations",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Dragon Drop API"}
