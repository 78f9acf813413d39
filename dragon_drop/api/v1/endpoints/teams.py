from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Response, status

from dragon_drop.core.dependencies import service_error
from dragon_drop.models.employee import ChangeLogEntry, Team
from dragon_drop.models.requests import TeamCreate, TeamUpdate
from dragon_drop.services.change_log_service import DEFAULT_LIMIT, change_log_service
from dragon_drop.services.team_service import TeamServiceError, team_service

logger = logging.getLogger(__name__)

MAX_CHANGES = 500

router = APIRouter(tags=["teams"])


@router.get("/teams", response_model=list[Team])
async def list_teams():
    try:
        return await team_service.get_all()
    except TeamServiceError as err:
        raise service_error(err) from err


@router.post("/teams", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(body: TeamCreate):
    try:
        return await team_service.create(body.name, body.manager_id, body.site)
    except TeamServiceError as err:
        raise service_error(err) from err


@router.patch("/teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_team(team_id: str, body: TeamUpdate):
    try:
        await team_service.update(team_id, body.model_dump(mode="json", by_alias=True, exclude_unset=True))
    except TeamServiceError as err:
        raise service_error(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(team_id: str):
    try:
        await team_service.delete(team_id)
    except TeamServiceError as err:
        raise service_error(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/changes", response_model=list[ChangeLogEntry])
async def recent_changes(limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_CHANGES)):
    try:
        return await change_log_service.get_recent(limit)
    except Exception as err:
        logger.exception("Failed to load recent changes")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch change log",
        ) from err
