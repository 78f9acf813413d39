"""Veteran-tier eligibility alerts for new agents.

Eligibility here uses a fixed 180-day approximation of six months, which is
shorter than six calendar months. Alerts therefore fire one to four days
before the commission calculator reports an agent as veteran-eligible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

from dragon_drop.models.alerts import AlertType, TenureAlert, TenureSummary
from dragon_drop.models.employee import CommissionTier, Employee, EmployeeStatus, Site
from dragon_drop.models.notifications import NotificationResult, SlackMessage
from dragon_drop.services.commission_calculator import days_until, resolve_now
from dragon_drop.services.notifications import NotificationGateway

logger = logging.getLogger(__name__)

SIX_MONTHS = timedelta(days=180)
ALERT_WINDOW_DAYS = 7
DEFAULT_ALERT_HOUR = 9

_SECTION_TITLES: dict[AlertType, str] = {
    AlertType.OVERDUE: "🔴 *OVERDUE FOR PROMOTION*",
    AlertType.IMMINENT: "🟡 *ELIGIBLE TOMORROW*",
    AlertType.UPCOMING: "🟢 *UPCOMING THIS WEEK*",
}


def _is_new_agent(employee: Employee) -> bool:
    return (
        employee.status == EmployeeStatus.ACTIVE
        and employee.is_agent
        and employee.commission_tier == CommissionTier.NEW
    )


def _fmt_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _alert_fields(alert: TenureAlert) -> list[dict[str, str]]:
    employee = alert.employee
    fields = [f"*Employee:* {employee.name}"]
    if alert.alert_type == AlertType.OVERDUE:
        fields += [
            f"*Days Overdue:* {alert.days_until_eligible}",
            f"*Site:* {employee.site}",
            f"*Start Date:* {_fmt_date(employee.start_date)}",
        ]
    elif alert.alert_type == AlertType.IMMINENT:
        fields += [
            f"*Eligibility Date:* {_fmt_date(alert.eligibility_date)}",
            f"*Site:* {employee.site}",
            "*Current Comp:* $60k + 5%",
        ]
    else:
        fields += [
            f"*Days Until Eligible:* {alert.days_until_eligible}",
            f"*Site:* {employee.site}",
            f"*Eligibility Date:* {_fmt_date(alert.eligibility_date)}",
        ]
    return [{"type": "mrkdwn", "text": text} for text in fields]


class TenureAlertService:
    def __init__(self, gateway: NotificationGateway, alert_hour: int = DEFAULT_ALERT_HOUR) -> None:
        self.gateway = gateway
        self.alert_hour = alert_hour

    def calculate_days_until_six_months(self, start_date: datetime, now: datetime | None = None) -> int:
        return days_until(start_date + SIX_MONTHS, resolve_now(now))

    def _classify(self, employee: Employee, now: datetime) -> TenureAlert | None:
        days = self.calculate_days_until_six_months(employee.start_date, now)
        eligibility_date = employee.start_date + SIX_MONTHS

        if 1 < days <= ALERT_WINDOW_DAYS:
            alert_type = AlertType.UPCOMING
            message = f"{employee.name} will be eligible for veteran tier in {days} days"
        elif days == 1:
            alert_type = AlertType.IMMINENT
            message = f"🚨 {employee.name} will be eligible for veteran tier TOMORROW!"
        elif days <= 0:
            days = abs(days)
            alert_type = AlertType.OVERDUE
            message = f"⚠️ {employee.name} is {days} days OVERDUE for veteran tier promotion!"
        else:
            return None

        return TenureAlert(
            employee=employee,
            days_until_eligible=days,
            eligibility_date=eligibility_date,
            current_tier=CommissionTier.NEW,
            alert_type=alert_type,
            message=message,
        )

    def get_upcoming_tenure_alerts(
        self,
        employees: Iterable[Employee],
        site: Site | None = None,
        now: datetime | None = None,
    ) -> list[TenureAlert]:
        now = resolve_now(now)
        alerts: list[TenureAlert] = []
        for employee in employees:
            if site is not None and employee.site != site:
                continue
            if not _is_new_agent(employee):
                continue
            alert = self._classify(employee, now)
            if alert is not None:
                alerts.append(alert)

        return sorted(alerts, key=lambda a: a.days_until_eligible)

    def build_tenure_digest(self, alerts: list[TenureAlert], now: datetime | None = None) -> SlackMessage:
        now = resolve_now(now)
        blocks: list[dict[str, Any]] = [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": "📊 Commission Tier Eligibility Alerts"},
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        f"*{len(alerts)} employees* approaching or past their 6-month tenure "
                        "milestone for veteran tier eligibility."
                    ),
                },
            },
        ]

        for alert_type in (AlertType.OVERDUE, AlertType.IMMINENT, AlertType.UPCOMING):
            group = [a for a in alerts if a.alert_type == alert_type]
            if not group:
                continue
            blocks.append({"type": "divider"})
            blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": _SECTION_TITLES[alert_type]}})
            for alert in group:
                blocks.append({"type": "section", "fields": _alert_fields(alert)})

        blocks.append({"type": "divider"})
        blocks.append(
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        "💡 *Action Required:* Review these employees and update their commission tier "
                        "from *$60k + 5%* to *$30k + 20%* when eligible."
                    ),
                },
            }
        )
        blocks.append(
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": f"Generated on {now:%b %d, %Y %H:%M} UTC | Dragon Drop Tenure Alert System",
                    }
                ],
            }
        )

        return {
            "text": f"Commission Tier Alert: {len(alerts)} employees need attention",
            "blocks": blocks,
        }

    async def send_tenure_alerts(
        self,
        alerts: list[TenureAlert],
        now: datetime | None = None,
    ) -> NotificationResult | None:
        if not alerts:
            return None

        result = await self.gateway.send_to_slack(self.build_tenure_digest(alerts, now))
        if result.success:
            logger.info("Sent tenure digest with %d alerts", len(alerts))
        else:
            logger.error("Failed to send tenure digest: %s", result.error)
        return result

    def should_send_alerts(self, now: datetime | None = None) -> bool:
        """Weekdays at the configured hour; meant for an external scheduler."""
        now = now or datetime.now()  # noqa: DTZ005
        return now.weekday() < 5 and now.hour == self.alert_hour

    def get_tenure_summary(
        self,
        employees: Iterable[Employee],
        site: Site | None = None,
        now: datetime | None = None,
    ) -> TenureSummary:
        now = resolve_now(now)
        summary = TenureSummary()

        for employee in employees:
            if site is not None and employee.site != site:
                continue
            if employee.status != EmployeeStatus.ACTIVE or not employee.is_agent:
                continue

            if employee.commission_tier == CommissionTier.NEW:
                summary.total_new_agents += 1
                days = self.calculate_days_until_six_months(employee.start_date, now)
                if 0 < days <= ALERT_WINDOW_DAYS:
                    summary.upcoming_transitions += 1
                elif days <= 0:
                    summary.overdue_transitions += 1
            elif employee.commission_tier == CommissionTier.VETERAN:
                summary.total_veteran_agents += 1

        return summary
