from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError

from dragon_drop.models.employee import Site, Team
from dragon_drop.services.cosmos_container import CosmosContainerService

logger = logging.getLogger(__name__)


class TeamServiceError(Exception):
    pass


class TeamService(CosmosContainerService):
    """Teams are stored with ``id`` equal to their ``teamId``."""

    container_setting = "COSMOS_DB_TEAMS_CONTAINER"

    async def create(self, name: str, manager_id: str, site: Site) -> Team:
        team = Team(team_id=uuid.uuid4().hex, name=name, manager_id=manager_id, site=site)
        if not self.container:
            logger.warning("Cosmos DB not configured — create operation skipped")
            return team

        try:
            body = {"id": team.team_id, **team.model_dump(mode="json", by_alias=True)}
            await self.container.create_item(body=body)
            return team
        except Exception as err:
            logger.exception("Error creating team")
            raise TeamServiceError("Failed to create team") from err

    async def get_all(self) -> list[Team]:
        if not self.container:
            logger.warning("Cosmos DB not configured — returning empty list")
            return []

        try:
            items: list[dict[str, Any]] = []
            async for item in self.container.query_items(
                query="SELECT * FROM c",
                enable_cross_partition_query=True,
            ):
                items.append(item)
        except Exception as err:
            logger.exception("Error fetching teams")
            raise TeamServiceError("Failed to fetch teams") from err

        teams: list[Team] = []
        for item in items:
            try:
                teams.append(Team.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping invalid team document %s: %s", item.get("id"), e)
        return teams

    async def update(self, team_id: str, updates: dict[str, Any]) -> None:
        if not self.container or not updates:
            return

        try:
            await self._patch(team_id, updates)
        except Exception as err:
            logger.exception("Error updating team %s", team_id)
            raise TeamServiceError("Failed to update team") from err

    async def delete(self, team_id: str) -> None:
        if not self.container:
            return

        try:
            await self.container.delete_item(item=team_id, partition_key=team_id)
        except Exception as err:
            logger.exception("Error deleting team %s", team_id)
            raise TeamServiceError("Failed to delete team") from err


team_service = TeamService()
