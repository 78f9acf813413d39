"""Tests for the daily alerts job."""

from __future__ import annotations

import argparse
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dragon_drop.core.config import Settings
from dragon_drop.models.alerts import CelebrationConfig, CelebrationSendResult
from dragon_drop.models.notifications import NotificationResult
from scripts.run_daily_alerts import (
    celebration_config,
    parse_args,
    process_celebrations,
    process_tenure_alerts,
    run,
)
from tests.factories import make_employee


def _tenure_service(*, in_window: bool, alerts: list | None = None, result=None) -> MagicMock:
    service = MagicMock()
    service.should_send_alerts.return_value = in_window
    service.get_upcoming_tenure_alerts.return_value = alerts if alerts is not None else [MagicMock()]
    service.send_tenure_alerts = AsyncMock(return_value=result or NotificationResult(success=True))
    return service


def test_parse_args_defaults():
    args = parse_args([])

    assert args.force is False
    assert args.dry_run is False
    assert args.skip_tenure is False
    assert args.skip_celebrations is False


def test_parse_args_flags():
    args = parse_args(["--force", "--dry-run", "--skip-celebrations", "--verbose"])

    assert args.force is True
    assert args.dry_run is True
    assert args.skip_celebrations is True
    assert args.verbose is True


def test_celebration_config_from_settings():
    settings = Settings(CELEBRATIONS_CHANNEL_ID="C42", CELEBRATIONS_ADVANCE_NOTICE_DAYS=2)

    config = celebration_config(settings)

    assert config == CelebrationConfig(channel_id="C42", advance_notice_days=2)


@pytest.mark.anyio
async def test_tenure_outside_window_is_skipped():
    service = _tenure_service(in_window=False)

    assert await process_tenure_alerts(service, []) is True
    service.get_upcoming_tenure_alerts.assert_not_called()
    service.send_tenure_alerts.assert_not_called()


@pytest.mark.anyio
async def test_tenure_force_ignores_window():
    service = _tenure_service(in_window=False)

    assert await process_tenure_alerts(service, [], force=True) is True
    service.send_tenure_alerts.assert_awaited_once()


@pytest.mark.anyio
async def test_tenure_dry_run_does_not_send():
    service = _tenure_service(in_window=True)

    assert await process_tenure_alerts(service, [], dry_run=True) is True
    service.send_tenure_alerts.assert_not_called()


@pytest.mark.anyio
async def test_tenure_delivery_failure_is_reported():
    service = _tenure_service(in_window=True, result=NotificationResult(success=False, error="boom"))

    assert await process_tenure_alerts(service, []) is False


@pytest.mark.anyio
async def test_celebrations_dry_run_does_not_send():
    service = MagicMock()
    service.get_upcoming_celebrations.return_value = []
    service.send_celebration_notifications = AsyncMock()

    ok = await process_celebrations(service, [], CelebrationConfig(channel_id="C1"), dry_run=True)

    assert ok is True
    service.send_celebration_notifications.assert_not_called()


@pytest.mark.anyio
async def test_celebrations_failure_is_reported():
    service = MagicMock()
    service.send_celebration_notifications = AsyncMock(
        return_value=CelebrationSendResult(success=False, message="No celebration channel configured")
    )

    assert await process_celebrations(service, [], CelebrationConfig()) is False


@pytest.mark.anyio
async def test_run_reads_employees_and_closes_services():
    employee_service = MagicMock()
    employee_service.initialize = AsyncMock()
    employee_service.close = AsyncMock()
    employee_service.get_all = AsyncMock(return_value=[make_employee()])
    gateway = MagicMock()
    gateway.initialize = AsyncMock()
    gateway.close = AsyncMock()
    args = argparse.Namespace(force=False, dry_run=True, skip_tenure=True, skip_celebrations=True, verbose=False)

    with (
        patch("scripts.run_daily_alerts.EmployeeService", return_value=employee_service),
        patch("scripts.run_daily_alerts.NotificationGateway", return_value=gateway),
    ):
        exit_code = await run(args)

    assert exit_code == 0
    employee_service.get_all.assert_awaited_once()
    employee_service.close.assert_awaited_once()
    gateway.close.assert_awaited_once()


@pytest.mark.anyio
async def test_run_exits_nonzero_on_failed_delivery():
    employee_service = MagicMock()
    employee_service.initialize = AsyncMock()
    employee_service.close = AsyncMock()
    employee_service.get_all = AsyncMock(return_value=[])
    gateway = MagicMock()
    gateway.initialize = AsyncMock()
    gateway.close = AsyncMock()
    args = argparse.Namespace(force=False, dry_run=False, skip_tenure=True, skip_celebrations=False, verbose=False)
    failed = AsyncMock(return_value=CelebrationSendResult(success=False, message="No celebration channel configured"))

    with (
        patch("scripts.run_daily_alerts.EmployeeService", return_value=employee_service),
        patch("scripts.run_daily_alerts.NotificationGateway", return_value=gateway),
        patch("scripts.run_daily_alerts.CelebrationsService.send_celebration_notifications", failed),
    ):
        exit_code = await run(args)

    assert exit_code == 1
