#!/usr/bin/env python3
"""Daily job: tenure-milestone digest and celebration notifications.

Schedule it hourly on weekdays (cron or a Container Apps job); the tenure
digest only goes out during the configured alert hour unless --force is given.

    python3 scripts/run_daily_alerts.py [--force] [--dry-run] [--skip-tenure] [--skip-celebrations] [--verbose]

Reads all employees from Cosmos DB (read-only) and posts to the Slack webhook.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from dragon_drop.core.config import Settings  # noqa: E402
from dragon_drop.models.alerts import CelebrationConfig  # noqa: E402
from dragon_drop.models.employee import Employee  # noqa: E402
from dragon_drop.services.celebrations_service import CelebrationsService  # noqa: E402
from dragon_drop.services.employee_service import EmployeeService  # noqa: E402
from dragon_drop.services.notifications import NotificationGateway  # noqa: E402
from dragon_drop.services.tenure_alerts import TenureAlertService  # noqa: E402

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send tenure-milestone alerts and celebration notifications to Slack",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Send the tenure digest even outside the weekday alert hour",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and log alerts without posting to Slack",
    )
    parser.add_argument(
        "--skip-tenure",
        action="store_true",
        help="Do not process tenure alerts",
    )
    parser.add_argument(
        "--skip-celebrations",
        action="store_true",
        help="Do not process birthdays and anniversaries",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


def celebration_config(settings: Settings) -> CelebrationConfig:
    return CelebrationConfig(
        channel_id=settings.CELEBRATIONS_CHANNEL_ID,
        enable_birthdays=settings.CELEBRATIONS_ENABLE_BIRTHDAYS,
        enable_anniversaries=settings.CELEBRATIONS_ENABLE_ANNIVERSARIES,
        advance_notice_days=settings.CELEBRATIONS_ADVANCE_NOTICE_DAYS,
    )


async def process_tenure_alerts(
    service: TenureAlertService,
    employees: list[Employee],
    *,
    force: bool = False,
    dry_run: bool = False,
) -> bool:
    """Returns False only when a digest was due and delivery failed."""
    if not force and not service.should_send_alerts():
        logger.info("Outside the tenure alert window — skipping (use --force to override)")
        return True

    alerts = service.get_upcoming_tenure_alerts(employees)
    logger.info("Found %d tenure alerts", len(alerts))
    for alert in alerts:
        logger.debug("%s: %s", alert.alert_type, alert.message)

    if dry_run or not alerts:
        return True

    result = await service.send_tenure_alerts(alerts)
    return result is None or result.success


async def process_celebrations(
    service: CelebrationsService,
    employees: list[Employee],
    config: CelebrationConfig,
    *,
    dry_run: bool = False,
) -> bool:
    if dry_run:
        upcoming = service.get_upcoming_celebrations(employees, config.advance_notice_days)
        todays = [a for a in upcoming if a.days_until == config.advance_notice_days]
        for alert in todays:
            logger.info("[DRY RUN] %s", service.format_celebration_message(alert))
        logger.info("[DRY RUN] %d celebrations due", len(todays))
        return True

    result = await service.send_celebration_notifications(employees, config)
    if result.success:
        logger.info(result.message)
    else:
        logger.error(result.message)
    return result.success


async def run(args: argparse.Namespace) -> int:
    settings = Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    employee_service = EmployeeService()
    gateway = NotificationGateway()
    await employee_service.initialize(settings)
    await gateway.initialize(settings)

    try:
        logger.info("Fetching employees...")
        employees = await employee_service.get_all()
        logger.info("Found %d employees", len(employees))

        ok = True
        if not args.skip_tenure:
            tenure_service = TenureAlertService(gateway, alert_hour=settings.TENURE_ALERT_HOUR)
            ok = await process_tenure_alerts(tenure_service, employees, force=args.force, dry_run=args.dry_run) and ok
        if not args.skip_celebrations:
            celebrations = CelebrationsService(gateway)
            ok = (
                await process_celebrations(celebrations, employees, celebration_config(settings), dry_run=args.dry_run)
                and ok
            )
    finally:
        await employee_service.close()
        await gateway.close()

    if args.dry_run:
        logger.info("[DRY RUN] No notifications were actually sent.")
    return 0 if ok else 1


def main() -> None:
    args = parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
