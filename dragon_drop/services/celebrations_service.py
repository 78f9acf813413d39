"""Birthday and work-anniversary detection with a Slack digest.

Dates are compared on month and day only; birth years are frequently
placeholders for unknown values.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from dragon_drop.models.alerts import (
    CelebrationAlert,
    CelebrationConfig,
    CelebrationSendResult,
    CelebrationSummary,
    CelebrationType,
)
from dragon_drop.models.employee import Employee, EmployeeStatus
from dragon_drop.models.notifications import SlackMessage
from dragon_drop.services.commission_calculator import resolve_now
from dragon_drop.services.notifications import NotificationGateway

logger = logging.getLogger(__name__)

DEFAULT_DAYS_AHEAD = 7
SUMMARY_LOOKAHEAD_DAYS = 30
UPCOMING_WINDOW_DAYS = 7


def _same_day(value: datetime, check_date: date) -> bool:
    return value.month == check_date.month and value.day == check_date.day


def _year_text(years: int | None) -> str:
    return "year" if years == 1 else "years"


class CelebrationsService:
    def __init__(self, gateway: NotificationGateway) -> None:
        self.gateway = gateway

    def check_birthdays(
        self,
        employees: list[Employee],
        check_date: date,
        days_until: int,
    ) -> list[CelebrationAlert]:
        return [
            CelebrationAlert(
                employee=employee,
                type=CelebrationType.BIRTHDAY,
                date=check_date,
                days_until=days_until,
            )
            for employee in employees
            if employee.birth_date is not None and _same_day(employee.birth_date, check_date)
        ]

    def check_anniversaries(
        self,
        employees: list[Employee],
        check_date: date,
        days_until: int,
    ) -> list[CelebrationAlert]:
        alerts: list[CelebrationAlert] = []
        for employee in employees:
            start = employee.start_date
            # The hire date itself is not an anniversary.
            if not _same_day(start, check_date) or start.year >= check_date.year:
                continue
            alerts.append(
                CelebrationAlert(
                    employee=employee,
                    type=CelebrationType.ANNIVERSARY,
                    date=check_date,
                    years_count=check_date.year - start.year,
                    days_until=days_until,
                )
            )
        return alerts

    def get_upcoming_celebrations(
        self,
        employees: Iterable[Employee],
        days_ahead: int = DEFAULT_DAYS_AHEAD,
        now: datetime | None = None,
    ) -> list[CelebrationAlert]:
        today = resolve_now(now).date()
        active = [e for e in employees if e.status == EmployeeStatus.ACTIVE]

        alerts: list[CelebrationAlert] = []
        for offset in range(days_ahead + 1):
            check_date = today + timedelta(days=offset)
            alerts.extend(self.check_birthdays(active, check_date, offset))
            alerts.extend(self.check_anniversaries(active, check_date, offset))

        return sorted(alerts, key=lambda a: a.days_until)

    def build_celebration_digest(
        self,
        alerts: list[CelebrationAlert],
        config: CelebrationConfig,
        now: datetime | None = None,
    ) -> SlackMessage:
        now = resolve_now(now)
        birthdays = [a for a in alerts if a.type == CelebrationType.BIRTHDAY]
        anniversaries = [a for a in alerts if a.type == CelebrationType.ANNIVERSARY]

        message = ""
        if birthdays:
            message += "🎂 *Birthdays Today*\n"
            for alert in birthdays:
                message += f"• Happy Birthday to *{alert.employee.name}* ({alert.employee.site})! 🎉\n"
            message += "\n"

        if anniversaries:
            message += "🎊 *Work Anniversaries Today*\n"
            for alert in anniversaries:
                message += (
                    f"• Congratulations to *{alert.employee.name}* on {alert.years_count} "
                    f"{_year_text(alert.years_count)} with the company! 🥳\n"
                )

        message = message.strip()
        title = "🎉 Today's Celebrations" if config.advance_notice_days == 0 else "📅 Upcoming Celebrations"
        return {
            "text": message,
            "channel": config.channel_id,
            "blocks": [
                {"type": "header", "text": {"type": "plain_text", "text": title}},
                {"type": "section", "text": {"type": "mrkdwn", "text": message}},
                {
                    "type": "context",
                    "elements": [
                        {
                            "type": "mrkdwn",
                            "text": f"Sent from Dragon Drop Celebrations Bot | {now:%b %d, %Y}",
                        }
                    ],
                },
            ],
        }

    async def send_celebration_notifications(
        self,
        employees: Iterable[Employee],
        config: CelebrationConfig,
        now: datetime | None = None,
    ) -> CelebrationSendResult:
        if not config.channel_id:
            return CelebrationSendResult(success=False, message="No celebration channel configured")

        todays_alerts = [
            alert
            for alert in self.get_upcoming_celebrations(employees, config.advance_notice_days, now)
            if alert.days_until == config.advance_notice_days
        ]
        if not todays_alerts:
            return CelebrationSendResult(success=True, message="No celebrations today")

        enabled = [
            alert
            for alert in todays_alerts
            if (alert.type == CelebrationType.BIRTHDAY and config.enable_birthdays)
            or (alert.type == CelebrationType.ANNIVERSARY and config.enable_anniversaries)
        ]
        if not enabled:
            return CelebrationSendResult(success=True, message="No enabled celebrations today")

        result = await self.gateway.send_to_slack(self.build_celebration_digest(enabled, config, now))
        if not result.success:
            error = result.error or "Failed to send to Slack"
            logger.error("Celebration notifications failed: %s", error)
            return CelebrationSendResult(
                success=False,
                message=f"Failed to send notifications: {error}",
                alerts=enabled,
            )

        logger.info("Sent %d celebration notifications", len(enabled))
        return CelebrationSendResult(
            success=True,
            message=f"Sent {len(enabled)} celebration notifications",
            alerts=enabled,
        )

    def get_celebration_summary(
        self,
        employees: Iterable[Employee],
        now: datetime | None = None,
    ) -> CelebrationSummary:
        alerts = self.get_upcoming_celebrations(employees, SUMMARY_LOOKAHEAD_DAYS, now)

        def pick(kind: CelebrationType, today: bool) -> list[CelebrationAlert]:
            if today:
                return [a for a in alerts if a.type == kind and a.days_until == 0]
            return [a for a in alerts if a.type == kind and 0 < a.days_until <= UPCOMING_WINDOW_DAYS]

        return CelebrationSummary(
            today_birthdays=pick(CelebrationType.BIRTHDAY, today=True),
            today_anniversaries=pick(CelebrationType.ANNIVERSARY, today=True),
            upcoming_birthdays=pick(CelebrationType.BIRTHDAY, today=False),
            upcoming_anniversaries=pick(CelebrationType.ANNIVERSARY, today=False),
        )

    def format_celebration_message(self, alert: CelebrationAlert) -> str:
        name = alert.employee.name
        when = f"{alert.date:%b} {alert.date.day}"
        if alert.type == CelebrationType.BIRTHDAY:
            if alert.days_until == 0:
                return f"🎂 Today is {name}'s birthday!"
            return f"🎂 {name}'s birthday in {alert.days_until} days ({when})"

        years = f"{alert.years_count} {_year_text(alert.years_count)}"
        if alert.days_until == 0:
            return f"🎊 Today is {name}'s {years} anniversary!"
        return f"🎊 {name}'s {years} anniversary in {alert.days_until} days ({when})"
