"""Organization-wide analytics views."""

from __future__ import annotations

from pydantic import BaseModel

from dragon_drop.models.employee import Employee, Role, Site


class TeamPerformance(BaseModel):
    manager_id: str
    manager_name: str
    team_size: int
    avg_tenure: float
    retention_rate: float
    veteran_ratio: float
    recent_terminations: int


class SiteComparison(BaseModel):
    site: Site
    total_employees: int
    agent_count: int
    manager_count: int
    avg_tenure: float
    veteran_ratio: float
    termination_rate: float
    projected_costs: float


class ReasonCount(BaseModel):
    reason: str
    count: int


class TurnoverInsight(BaseModel):
    total_terminations: int
    termination_rate: float
    avg_tenure_at_termination: float
    cost_of_turnover: float
    top_termination_reasons: list[ReasonCount]
    risk_employees: list[Employee]


class CompensationInsight(BaseModel):
    total_annual_salary: float
    total_projected_commission: float
    avg_salary_by_role: dict[Role, float]
    cost_per_agent: float
    veteran_premium: float
    projected_next_quarter: float


class GrowthInsight(BaseModel):
    monthly_growth_rate: float
    projected_headcount: float
    optimal_team_size: int
    manager_to_agent_ratio: float
    expansion_readiness: bool
    bottlenecks: list[str]
