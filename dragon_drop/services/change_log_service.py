"""Append-only audit trail of employee mutations."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from dragon_drop.models.employee import ChangeLogEntry, ChangeType
from dragon_drop.services.cosmos_container import CosmosContainerService

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


class ChangeLogService(CosmosContainerService):
    container_setting = "COSMOS_DB_CHANGE_LOG_CONTAINER"

    async def record(
        self,
        change_type: ChangeType,
        employee_id: str,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
        initiated_by: str = "dragon_drop_app",
    ) -> ChangeLogEntry:
        """Write an entry; a failed write is logged and never blocks the mutation it describes."""
        entry = ChangeLogEntry(
            change_id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            change_type=change_type,
            employee_id=employee_id,
            old_data=old_data or {},
            new_data=new_data or {},
            initiated_by=initiated_by,
        )
        if not self.container:
            return entry

        try:
            body = {"id": entry.change_id, **entry.model_dump(mode="json", by_alias=True)}
            await self.container.create_item(body=body)
        except Exception:
            logger.exception("Failed to record %s for employee %s", change_type, employee_id)
        return entry

    async def _query(self, query: str, parameters: list[dict[str, Any]]) -> list[ChangeLogEntry]:
        if not self.container:
            return []

        entries: list[ChangeLogEntry] = []
        async for item in self.container.query_items(
            query=query,
            parameters=parameters,
            enable_cross_partition_query=True,
        ):
            try:
                entries.append(ChangeLogEntry.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping invalid change log document %s: %s", item.get("id"), e)
        return entries

    async def get_recent(self, limit: int = DEFAULT_LIMIT) -> list[ChangeLogEntry]:
        return await self._query(
            "SELECT TOP @limit * FROM c ORDER BY c.timestamp DESC",
            [{"name": "@limit", "value": limit}],
        )

    async def get_by_employee(self, employee_id: str) -> list[ChangeLogEntry]:
        return await self._query(
            "SELECT * FROM c WHERE c.employeeId = @employeeId ORDER BY c.timestamp DESC",
            [{"name": "@employeeId", "value": employee_id}],
        )


change_log_service = ChangeLogService()
