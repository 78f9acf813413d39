from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from dragon_drop.models.alerts import CelebrationConfig, CelebrationType
from dragon_drop.models.notifications import NotificationResult
from dragon_drop.services.celebrations_service import CelebrationsService
from tests.factories import NOW, make_employee, make_termination


def _service(result: NotificationResult | None = None) -> tuple[CelebrationsService, MagicMock]:
    gateway = MagicMock()
    gateway.send_to_slack = AsyncMock(return_value=result or NotificationResult(success=True))
    return CelebrationsService(gateway), gateway


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def team():
    return [
        make_employee("bday-today", name="Avery", birth_date=_utc(1990, 6, 16)),
        make_employee("bday-later", name="Blake", birth_date=_utc(1985, 6, 20)),
        make_employee("anniv", name="Casey", start=_utc(2022, 6, 18)),
        make_employee("one-year", name="Drew", start=_utc(2024, 6, 16)),
        make_employee("hired-today", name="Emery", start=_utc(2025, 6, 16)),
        make_employee(
            "former",
            name="Finley",
            birth_date=_utc(1990, 6, 16),
            status="terminated",
            termination=make_termination(),
        ),
    ]


def test_upcoming_celebrations_window(team):
    service, _ = _service()

    alerts = service.get_upcoming_celebrations(team, days_ahead=7, now=NOW)

    found = {(a.employee.id, a.type, a.days_until) for a in alerts}
    assert found == {
        ("bday-today", CelebrationType.BIRTHDAY, 0),
        ("one-year", CelebrationType.ANNIVERSARY, 0),
        ("anniv", CelebrationType.ANNIVERSARY, 2),
        ("bday-later", CelebrationType.BIRTHDAY, 4),
    }
    assert [a.days_until for a in alerts] == sorted(a.days_until for a in alerts)


def test_anniversary_years_and_date(team):
    service, _ = _service()

    alerts = service.get_upcoming_celebrations(team, days_ahead=7, now=NOW)

    anniversary = next(a for a in alerts if a.employee.id == "anniv")
    assert anniversary.years_count == 3
    assert anniversary.date == date(2025, 6, 18)


def test_hire_date_is_not_an_anniversary(team):
    service, _ = _service()

    alerts = service.check_anniversaries(team, date(2025, 6, 16), 0)

    assert [a.employee.id for a in alerts] == ["one-year"]


def test_zero_days_ahead_only_checks_today(team):
    service, _ = _service()

    alerts = service.get_upcoming_celebrations(team, days_ahead=0, now=NOW)

    assert {a.employee.id for a in alerts} == {"bday-today", "one-year"}


def test_digest_lists_birthdays_then_anniversaries(team):
    service, _ = _service()
    alerts = service.get_upcoming_celebrations(team, days_ahead=0, now=NOW)
    config = CelebrationConfig(channel_id="C123")

    message = service.build_celebration_digest(alerts, config, NOW)

    assert message["channel"] == "C123"
    assert message["blocks"][0]["text"]["text"] == "🎉 Today's Celebrations"
    text = message["text"]
    assert text.startswith("🎂 *Birthdays Today*")
    assert "Happy Birthday to *Avery* (Austin)! 🎉" in text
    assert "Congratulations to *Drew* on 1 year with the company! 🥳" in text
    assert text.index("Birthdays") < text.index("Work Anniversaries")


def test_digest_title_with_advance_notice(team):
    service, _ = _service()
    config = CelebrationConfig(channel_id="C123", advance_notice_days=2)

    message = service.build_celebration_digest([], config, NOW)

    assert message["blocks"][0]["text"]["text"] == "📅 Upcoming Celebrations"


@pytest.mark.anyio
async def test_send_requires_channel(team):
    service, gateway = _service()

    result = await service.send_celebration_notifications(team, CelebrationConfig(), NOW)

    assert result.success is False
    assert result.message == "No celebration channel configured"
    gateway.send_to_slack.assert_not_called()


@pytest.mark.anyio
async def test_send_with_nothing_to_celebrate():
    service, gateway = _service()
    quiet = [make_employee(birth_date=_utc(1990, 1, 1), start=_utc(2024, 2, 2))]

    result = await service.send_celebration_notifications(quiet, CelebrationConfig(channel_id="C1"), NOW)

    assert result.success is True
    assert result.message == "No celebrations today"
    gateway.send_to_slack.assert_not_called()


@pytest.mark.anyio
async def test_send_skips_disabled_types():
    service, gateway = _service()
    birthday_only = [make_employee(birth_date=_utc(1990, 6, 16))]
    config = CelebrationConfig(channel_id="C1", enable_birthdays=False)

    result = await service.send_celebration_notifications(birthday_only, config, NOW)

    assert result.success is True
    assert result.message == "No enabled celebrations today"
    gateway.send_to_slack.assert_not_called()


@pytest.mark.anyio
async def test_send_posts_enabled_celebrations(team):
    service, gateway = _service()
    config = CelebrationConfig(channel_id="C1", enable_anniversaries=False)

    result = await service.send_celebration_notifications(team, config, NOW)

    assert result.success is True
    assert result.message == "Sent 1 celebration notifications"
    assert [a.employee.id for a in result.alerts] == ["bday-today"]
    sent = gateway.send_to_slack.call_args.args[0]
    assert sent["channel"] == "C1"


@pytest.mark.anyio
async def test_send_uses_advance_notice_offset(team):
    service, gateway = _service()
    config = CelebrationConfig(channel_id="C1", advance_notice_days=4)

    result = await service.send_celebration_notifications(team, config, NOW)

    assert [a.employee.id for a in result.alerts] == ["bday-later"]
    gateway.send_to_slack.assert_awaited_once()


@pytest.mark.anyio
async def test_send_failure_is_reported(team):
    service, _ = _service(NotificationResult(success=False, error="Slack webhook URL not configured"))

    result = await service.send_celebration_notifications(team, CelebrationConfig(channel_id="C1"), NOW)

    assert result.success is False
    assert result.message == "Failed to send notifications: Slack webhook URL not configured"
    assert len(result.alerts) == 2


def test_celebration_summary(team):
    service, _ = _service()
    team.append(make_employee("next-month", birth_date=_utc(1992, 7, 10)))

    summary = service.get_celebration_summary(team, NOW)

    assert [a.employee.id for a in summary.today_birthdays] == ["bday-today"]
    assert [a.employee.id for a in summary.today_anniversaries] == ["one-year"]
    assert [a.employee.id for a in summary.upcoming_birthdays] == ["bday-later"]
    assert [a.employee.id for a in summary.upcoming_anniversaries] == ["anniv"]


def test_format_celebration_message(team):
    service, _ = _service()
    alerts = {a.employee.id: a for a in service.get_upcoming_celebrations(team, days_ahead=7, now=NOW)}

    assert service.format_celebration_message(alerts["bday-today"]) == "🎂 Today is Avery's birthday!"
    assert service.format_celebration_message(alerts["bday-later"]) == "🎂 Blake's birthday in 4 days (Jun 20)"
    assert service.format_celebration_message(alerts["one-year"]) == "🎊 Today is Drew's 1 year anniversary!"
    assert service.format_celebration_message(alerts["anniv"]) == "🎊 Casey's 3 years anniversary in 2 days (Jun 18)"


@pytest.mark.anyio
async def test_failed_delivery_leaves_employees_untouched(team):
    service, _ = _service(NotificationResult(success=False, error="Webhook not found."))
    before = [e.model_dump() for e in team]

    result = await service.send_celebration_notifications(team, CelebrationConfig(channel_id="C1"), NOW)

    assert result.success is False
    assert [e.model_dump() for e in team] == before
