"""Cosmos DB access for the ``employees`` collection.

Without credentials every read degrades to an empty result and every write
is skipped. I/O failures are logged and re-raised as ``EmployeeServiceError``
with a fixed message per operation.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from azure.cosmos.exceptions import CosmosResourceNotFoundError
from pydantic import ValidationError

from dragon_drop.core.config import Settings
from dragon_drop.models.employee import (
    CommissionTier,
    Employee,
    EmployeeCreate,
    EmployeeStatus,
    Role,
    Site,
    TerminationDetails,
)
from dragon_drop.services.commission_calculator import validate_commission_tier_change
from dragon_drop.services.cosmos_container import CosmosContainerService

logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = 5.0

EmployeesCallback = Callable[[list[Employee]], Awaitable[None] | None]
Unsubscribe = Callable[[], None]


class EmployeeServiceError(Exception):
    pass


class CommissionTierChangeError(Exception):
    pass


def _parse_employees(items: list[dict[str, Any]]) -> list[Employee]:
    employees: list[Employee] = []
    for item in items:
        try:
            employees.append(Employee.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping invalid employee document %s: %s", item.get("id"), e)
    return employees


def _noop() -> None:
    return None


class EmployeeService(CosmosContainerService):
    container_setting = "COSMOS_DB_EMPLOYEES_CONTAINER"

    def __init__(self) -> None:
        super().__init__()
        self.poll_seconds = DEFAULT_POLL_SECONDS

    async def initialize(self, settings: Settings) -> None:
        self.poll_seconds = settings.SUBSCRIPTION_POLL_SECONDS
        await super().initialize(settings)

    async def create(self, employee: EmployeeCreate) -> str:
        if not self.container:
            logger.warning("Cosmos DB not configured — create operation skipped")
            return f"demo-{int(time.time() * 1000)}"

        try:
            employee_id = uuid.uuid4().hex
            record = Employee(id=employee_id, **employee.model_dump())
            await self.container.create_item(body=record.to_document())
            logger.info("Created employee %s (%s)", employee_id, record.role)
            return employee_id
        except Exception as err:
            logger.exception("Error creating employee")
            raise EmployeeServiceError("Failed to create employee") from err

    async def _query(self, query: str, parameters: list[dict[str, Any]] | None = None) -> list[Employee]:
        items: list[dict[str, Any]] = []
        async for item in self.container.query_items(
            query=query,
            parameters=parameters or [],
            enable_cross_partition_query=True,
        ):
            items.append(item)
        return _parse_employees(items)

    async def get_all(self) -> list[Employee]:
        if not self.container:
            logger.warning("Cosmos DB not configured — returning empty list")
            return []

        try:
            return await self._query("SELECT * FROM c")
        except Exception as err:
            logger.exception("Error fetching employees")
            raise EmployeeServiceError("Failed to fetch employees") from err

    async def get_by_site(self, site: Site) -> list[Employee]:
        if not self.container:
            logger.warning("Cosmos DB not configured — returning empty list")
            return []

        try:
            return await self._query(
                "SELECT * FROM c WHERE c.site = @site",
                [{"name": "@site", "value": site.value}],
            )
        except Exception as err:
            logger.exception("Error fetching employees for site %s", site)
            raise EmployeeServiceError("Failed to fetch employees by site") from err

    async def get_by_id(self, employee_id: str) -> Employee | None:
        if not self.container:
            logger.warning("Cosmos DB not configured — returning None")
            return None

        try:
            item = await self.container.read_item(item=employee_id, partition_key=employee_id)
        except CosmosResourceNotFoundError:
            return None
        except Exception as err:
            logger.exception("Error fetching employee %s", employee_id)
            raise EmployeeServiceError("Failed to fetch employee") from err

        employees = _parse_employees([item])
        return employees[0] if employees else None

    async def update(self, employee_id: str, updates: dict[str, Any]) -> None:
        """Merge-patch: only the given top-level fields are written."""
        if not self.container:
            logger.warning("Cosmos DB not configured — update operation skipped")
            return
        if not updates:
            return

        try:
            await self._patch(employee_id, updates)
        except Exception as err:
            logger.exception("Error updating employee %s", employee_id)
            raise EmployeeServiceError("Failed to update employee") from err

    async def delete(self, employee_id: str) -> None:
        if not self.container:
            logger.warning("Cosmos DB not configured — delete operation skipped")
            return

        try:
            await self.container.delete_item(item=employee_id, partition_key=employee_id)
        except Exception as err:
            logger.exception("Error deleting employee %s", employee_id)
            raise EmployeeServiceError("Failed to delete employee") from err

    async def _update_as(self, employee_id: str, updates: dict[str, Any], message: str) -> None:
        try:
            await self.update(employee_id, updates)
        except EmployeeServiceError as err:
            raise EmployeeServiceError(message) from err

    async def move_to_manager(self, employee_id: str, new_manager_id: str) -> None:
        await self._update_as(employee_id, {"managerId": new_manager_id}, "Failed to move employee")

    async def transfer_to_site(self, employee_id: str, new_site: Site) -> None:
        await self._update_as(employee_id, {"site": new_site.value}, "Failed to transfer employee")

    async def promote(self, employee_id: str, new_role: Role) -> None:
        await self._update_as(employee_id, {"role": new_role.value}, "Failed to promote employee")

    async def terminate(self, employee_id: str, details: TerminationDetails) -> None:
        """Soft delete: the record is kept with its termination details attached."""
        await self._update_as(
            employee_id,
            {
                "status": EmployeeStatus.TERMINATED.value,
                "termination": details.model_dump(mode="json", by_alias=True, exclude_none=True),
            },
            "Failed to terminate employee",
        )

    async def update_commission_tier(self, employee_id: str, tier: CommissionTier) -> None:
        current = await self.get_by_id(employee_id)
        if current is not None:
            valid, error = validate_commission_tier_change(current.commission_tier, tier)
            if not valid:
                raise CommissionTierChangeError(error)

        await self._update_as(employee_id, {"commissionTier": tier.value}, "Failed to update commission tier")

    async def bulk_update(self, updates: list[tuple[str, dict[str, Any]]]) -> None:
        try:
            await asyncio.gather(*(self.update(employee_id, data) for employee_id, data in updates))
        except EmployeeServiceError as err:
            logger.error("Bulk update of %d employees failed", len(updates))
            raise EmployeeServiceError("Failed to perform bulk update") from err

    def subscribe(
        self,
        callback: EmployeesCallback,
        site: Site | None = None,
        interval: float | None = None,
    ) -> Unsubscribe:
        """Invoke ``callback`` with the full collection now and after every change.

        Changes are detected by polling. The returned function stops the
        subscription and must be called when the consumer goes away.
        """
        if not self.container:
            logger.warning("Cosmos DB not configured — returning no-op unsubscribe")
            return _noop

        task = asyncio.get_running_loop().create_task(self._watch(callback, site, interval or self.poll_seconds))

        def unsubscribe() -> None:
            task.cancel()

        return unsubscribe

    async def _watch(self, callback: EmployeesCallback, site: Site | None, interval: float) -> None:
        previous: list[dict[str, Any]] | None = None
        while True:
            try:
                employees = await (self.get_by_site(site) if site else self.get_all())
            except EmployeeServiceError:
                logger.warning("Employee subscription poll failed — retrying in %.1fs", interval)
            else:
                snapshot = [e.to_document() for e in employees]
                if snapshot != previous:
                    try:
                        result = callback(employees)
                        if inspect.isawaitable(result):
                            await result
                    except Exception:
                        # Not marked delivered, so the next poll retries it.
                        logger.exception("Employee subscription callback failed")
                    else:
                        previous = snapshot
            await asyncio.sleep(interval)


employee_service = EmployeeService()
