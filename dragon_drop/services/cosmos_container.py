"""Shared Cosmos DB container lifecycle for the collection services."""

from __future__ import annotations

import logging
from typing import Any

from azure.cosmos.aio import CosmosClient

from dragon_drop.core.config import Settings

logger = logging.getLogger(__name__)

# Cosmos DB accepts at most this many operations in one patch request.
MAX_PATCH_OPERATIONS = 10


def build_patch_operations(updates: dict[str, Any]) -> list[dict[str, Any]]:
    """Top-level ``set`` operations for the provided fields only; other fields are left untouched."""
    return [{"op": "set", "path": f"/{key}", "value": value} for key, value in updates.items()]


class CosmosContainerService:
    container_setting: str = ""

    def __init__(self) -> None:
        self.client: CosmosClient | None = None
        self.container: Any = None
        self.initialized: bool = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        endpoint = settings.COSMOS_DB_ENDPOINT
        key = settings.COSMOS_DB_KEY
        container_name = getattr(settings, self.container_setting)

        if not endpoint or not key:
            logger.warning("Cosmos DB credentials missing — %s not initialized", type(self).__name__)
            return

        self.client = CosmosClient(endpoint, key)
        db = self.client.get_database_client(settings.COSMOS_DB_DATABASE)
        self.container = db.get_container_client(container_name)
        self.initialized = True
        logger.info("%s initialized (container=%s)", type(self).__name__, container_name)

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None
            self.container = None
            self.initialized = False

    async def _patch(self, item_id: str, updates: dict[str, Any]) -> None:
        operations = build_patch_operations(updates)
        for start in range(0, len(operations), MAX_PATCH_OPERATIONS):
            await self.container.patch_item(
                item=item_id,
                partition_key=item_id,
                patch_operations=operations[start : start + MAX_PATCH_OPERATIONS],
            )

    async def check_connection(self) -> bool:
        if not self.container:
            return False
        try:
            query = "SELECT VALUE COUNT(1) FROM c"
            async for _ in self.container.query_items(
                query=query,
                enable_cross_partition_query=True,
            ):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False
