"""Read-only analytics over a snapshot of the employee collection.

Every view is a fold over the list it is given; nothing is cached between
calls. Ratios whose denominator is empty default to 0 (100 for retention)
so the dashboards never see NaN.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from dragon_drop.models.compensation import AGENT_VETERAN_COMPENSATION, ROLE_COMPENSATION
from dragon_drop.models.employee import CommissionTier, Employee, EmployeeStatus, Role, Site
from dragon_drop.models.insights import (
    CompensationInsight,
    GrowthInsight,
    ReasonCount,
    SiteComparison,
    TeamPerformance,
    TurnoverInsight,
)
from dragon_drop.services.commission_calculator import calculate_agent_commission, resolve_now

logger = logging.getLogger(__name__)

MONTHS_IN_YEAR = 12
TENURE_MONTH = timedelta(days=30)
RECENT_TERMINATION_WINDOW = timedelta(days=90)
HIRING_WINDOW = timedelta(days=180)
HIRING_WINDOW_MONTHS = 6
PROJECTION_MONTHS = 3
AT_RISK_TENURE_MONTHS = 3
UPCOMING_VETERAN_WINDOW_DAYS = 90
TOP_REASONS = 5

HIGH_TURNOVER_RATE = 20
AT_RISK_LIMIT = 5
LOW_VETERAN_RATIO = 0.3
SITE_IMBALANCE_LIMIT = 10
SITE_PERFORMANCE_GAP = 20


def _tenure_months(employee: Employee, now: datetime) -> float:
    return (now - employee.start_date) / TENURE_MONTH


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _percent(part: int, whole: int, default: float = 0.0) -> float:
    return part / whole * 100 if whole else default


class InsightsService:
    AVG_MONTHLY_SALES_PER_AGENT = 5000
    COST_PER_HIRE = 3000
    OPTIMAL_MANAGER_RATIO = 8

    def _annual_commission(self, rate: float) -> float:
        return self.AVG_MONTHLY_SALES_PER_AGENT * MONTHS_IN_YEAR * rate

    def _is_veteran(self, agent: Employee, now: datetime) -> bool:
        calc = calculate_agent_commission(agent, now)
        return calc is not None and calc.tier == CommissionTier.VETERAN

    def _veteran_ratio(self, agents: Sequence[Employee], now: datetime) -> float:
        veterans = sum(1 for agent in agents if self._is_veteran(agent, now))
        return _percent(veterans, len(agents))

    def _annual_salary(self, employee: Employee, now: datetime) -> float:
        calc = calculate_agent_commission(employee, now)
        if calc is not None:
            return calc.current_salary
        return ROLE_COMPENSATION[employee.role].base_salary

    def _annual_cost(self, employee: Employee, now: datetime) -> float:
        calc = calculate_agent_commission(employee, now)
        if calc is not None:
            return calc.current_salary + self._annual_commission(calc.current_commission_rate)
        return ROLE_COMPENSATION[employee.role].base_salary

    def _collect_reports(self, manager: Employee, reports_by_manager: dict[str, list[Employee]]) -> list[Employee]:
        """Direct and indirect reports; each employee is visited once, so cycles terminate."""
        seen = {manager.id}
        reports: list[Employee] = []
        pending = list(reports_by_manager.get(manager.id, []))
        while pending:
            employee = pending.pop()
            if employee.id in seen:
                continue
            seen.add(employee.id)
            reports.append(employee)
            pending.extend(reports_by_manager.get(employee.id, []))
        return reports

    def get_team_performance_insights(
        self,
        employees: Iterable[Employee],
        now: datetime | None = None,
    ) -> list[TeamPerformance]:
        now = resolve_now(now)
        employees = list(employees)

        reports_by_manager: dict[str, list[Employee]] = defaultdict(list)
        for employee in employees:
            if employee.manager_id:
                reports_by_manager[employee.manager_id].append(employee)

        recent_cutoff = now - RECENT_TERMINATION_WINDOW
        results: list[TeamPerformance] = []
        for manager in employees:
            if manager.role != Role.SALES_MANAGER or manager.status != EmployeeStatus.ACTIVE:
                continue

            reports = self._collect_reports(manager, reports_by_manager)
            active = [e for e in reports if e.status == EmployeeStatus.ACTIVE]
            terminated = [e for e in reports if e.status == EmployeeStatus.TERMINATED]
            agents = [e for e in active if e.is_agent]
            recent_terminations = sum(
                1 for e in terminated if e.termination is not None and e.termination.termination_date > recent_cutoff
            )

            results.append(
                TeamPerformance(
                    manager_id=manager.id,
                    manager_name=manager.name,
                    team_size=len(active),
                    avg_tenure=_average([_tenure_months(e, now) for e in active]),
                    retention_rate=_percent(len(active), len(active) + len(terminated), default=100.0),
                    veteran_ratio=self._veteran_ratio(agents, now),
                    recent_terminations=recent_terminations,
                )
            )

        return sorted(results, key=lambda team: team.retention_rate, reverse=True)

    def get_site_comparison_insights(
        self,
        employees: Iterable[Employee],
        now: datetime | None = None,
    ) -> list[SiteComparison]:
        now = resolve_now(now)
        employees = list(employees)

        comparisons: list[SiteComparison] = []
        for site in Site:
            site_employees = [e for e in employees if e.site == site]
            active = [e for e in site_employees if e.status == EmployeeStatus.ACTIVE]
            terminated = [e for e in site_employees if e.status == EmployeeStatus.TERMINATED]
            agents = [e for e in active if e.is_agent]
            managers = [e for e in active if e.role == Role.SALES_MANAGER]

            comparisons.append(
                SiteComparison(
                    site=site,
                    total_employees=len(active),
                    agent_count=len(agents),
                    manager_count=len(managers),
                    avg_tenure=_average([_tenure_months(e, now) for e in active]),
                    veteran_ratio=self._veteran_ratio(agents, now),
                    termination_rate=_percent(len(terminated), len(site_employees)),
                    projected_costs=sum(self._annual_cost(e, now) for e in active),
                )
            )
        return comparisons

    def get_turnover_insights(
        self,
        employees: Iterable[Employee],
        now: datetime | None = None,
    ) -> TurnoverInsight:
        now = resolve_now(now)
        employees = list(employees)
        terminated = [e for e in employees if e.status == EmployeeStatus.TERMINATED]
        active = [e for e in employees if e.status == EmployeeStatus.ACTIVE]

        tenure_at_termination = [
            (e.termination.termination_date - e.start_date) / TENURE_MONTH for e in terminated if e.termination
        ]
        reasons = Counter(e.termination.reason.value for e in terminated if e.termination)
        risk_employees = [
            e for e in active if e.is_agent and _tenure_months(e, now) < AT_RISK_TENURE_MONTHS
        ]

        return TurnoverInsight(
            total_terminations=len(terminated),
            termination_rate=_percent(len(terminated), len(employees)),
            avg_tenure_at_termination=_average(tenure_at_termination),
            cost_of_turnover=len(terminated) * self.COST_PER_HIRE,
            top_termination_reasons=[
                ReasonCount(reason=reason, count=count) for reason, count in reasons.most_common(TOP_REASONS)
            ],
            risk_employees=risk_employees,
        )

    def get_compensation_insights(
        self,
        employees: Iterable[Employee],
        now: datetime | None = None,
    ) -> CompensationInsight:
        now = resolve_now(now)
        active = [e for e in employees if e.status == EmployeeStatus.ACTIVE]

        salary_totals: dict[Role, float] = {role: 0.0 for role in Role}
        salary_counts: dict[Role, int] = {role: 0 for role in Role}
        for employee in active:
            salary_totals[employee.role] += self._annual_salary(employee, now)
            salary_counts[employee.role] += 1

        total_annual_salary = sum(salary_totals.values())
        avg_salary_by_role = {
            role: salary_totals[role] / salary_counts[role] if salary_counts[role] else 0.0 for role in Role
        }

        agents = [e for e in active if e.is_agent]
        agent_calcs = [calculate_agent_commission(agent, now) for agent in agents]
        total_projected_commission = sum(
            self._annual_commission(calc.current_commission_rate) for calc in agent_calcs if calc is not None
        )

        total_agent_cost = salary_totals[Role.AGENT] + total_projected_commission
        cost_per_agent = total_agent_cost / len(agents) if agents else 0.0

        new_compensation = ROLE_COMPENSATION[Role.AGENT]
        new_agent_cost = new_compensation.base_salary + self._annual_commission(new_compensation.commission_rate)
        veteran_agent_cost = AGENT_VETERAN_COMPENSATION.base_salary + self._annual_commission(
            AGENT_VETERAN_COMPENSATION.commission_rate
        )
        veteran_premium = veteran_agent_cost - new_agent_cost

        upcoming_veterans = sum(
            1
            for calc in agent_calcs
            if calc is not None
            and calc.will_change_to_veteran
            and calc.days_until_change
            and calc.days_until_change <= UPCOMING_VETERAN_WINDOW_DAYS
        )
        projected_next_quarter = (
            total_annual_salary / 4 + total_projected_commission / 4 + upcoming_veterans * veteran_premium / 4
        )

        return CompensationInsight(
            total_annual_salary=total_annual_salary,
            total_projected_commission=total_projected_commission,
            avg_salary_by_role=avg_salary_by_role,
            cost_per_agent=cost_per_agent,
            veteran_premium=veteran_premium,
            projected_next_quarter=projected_next_quarter,
        )

    def get_growth_insights(
        self,
        employees: Iterable[Employee],
        now: datetime | None = None,
    ) -> GrowthInsight:
        now = resolve_now(now)
        active = [e for e in employees if e.status == EmployeeStatus.ACTIVE]
        agents = [e for e in active if e.is_agent]
        managers = [e for e in active if e.role == Role.SALES_MANAGER]

        hiring_cutoff = now - HIRING_WINDOW
        recent_hires = [e for e in active if e.start_date > hiring_cutoff]
        monthly_growth_rate = len(recent_hires) / HIRING_WINDOW_MONTHS
        projected_headcount = len(active) + monthly_growth_rate * PROJECTION_MONTHS
        optimal_team_size = len(managers) * self.OPTIMAL_MANAGER_RATIO
        manager_to_agent_ratio = len(agents) / len(managers) if managers else 0.0

        bottlenecks: list[str] = []
        if manager_to_agent_ratio > self.OPTIMAL_MANAGER_RATIO:
            bottlenecks.append(f"Manager capacity exceeded ({manager_to_agent_ratio:.1f} agents per manager)")

        # Without agents there is no ratio to judge.
        if agents:
            veterans = sum(1 for agent in agents if self._is_veteran(agent, now))
            if veterans / len(agents) < LOW_VETERAN_RATIO:
                bottlenecks.append("Low veteran agent ratio may impact training capacity")

        austin = sum(1 for e in active if e.site == Site.AUSTIN)
        charlotte = sum(1 for e in active if e.site == Site.CHARLOTTE)
        if abs(austin - charlotte) > SITE_IMBALANCE_LIMIT:
            bottlenecks.append("Significant site imbalance may affect operations")

        return GrowthInsight(
            monthly_growth_rate=monthly_growth_rate,
            projected_headcount=projected_headcount,
            optimal_team_size=optimal_team_size,
            manager_to_agent_ratio=manager_to_agent_ratio,
            expansion_readiness=not bottlenecks,
            bottlenecks=bottlenecks,
        )

    def get_recommendations(self, employees: Iterable[Employee], now: datetime | None = None) -> list[str]:
        now = resolve_now(now)
        employees = list(employees)
        turnover = self.get_turnover_insights(employees, now)
        growth = self.get_growth_insights(employees, now)
        compensation = self.get_compensation_insights(employees, now)
        sites = self.get_site_comparison_insights(employees, now)

        recommendations: list[str] = []
        if turnover.termination_rate > HIGH_TURNOVER_RATE:
            recommendations.append(
                "High turnover rate detected. Consider exit interview analysis and retention programs."
            )
        if len(turnover.risk_employees) > AT_RISK_LIMIT:
            recommendations.append(
                f"{len(turnover.risk_employees)} new agents at risk. Implement enhanced onboarding support."
            )
        if growth.manager_to_agent_ratio > self.OPTIMAL_MANAGER_RATIO:
            recommendations.append("Consider hiring additional managers to maintain optimal team ratios.")
        if not growth.expansion_readiness:
            recommendations.append("Address operational bottlenecks before expanding headcount.")
        if compensation.veteran_premium < 0:
            recommendations.append(
                "Review compensation structure - veteran agents may be underpaid relative to value."
            )

        performance_gap = abs(sites[0].veteran_ratio - sites[1].veteran_ratio)
        if performance_gap > SITE_PERFORMANCE_GAP:
            recommendations.append("Significant performance gap between sites. Consider best practice sharing.")

        logger.debug("Generated %d recommendations for %d employees", len(recommendations), len(employees))
        return recommendations


insights_service = InsightsService()
