from __future__ import annotations

import pytest

from dragon_drop.models.employee import Role, Site
from dragon_drop.services.insights_service import InsightsService
from tests.factories import NOW, make_employee, make_termination

VETERAN_PREMIUM = (30_000 + 60_000 * 0.20) - (60_000 + 60_000 * 0.05)


@pytest.fixture
def service():
    return InsightsService()


@pytest.fixture
def org():
    return [
        make_employee("dir", name="Dana", role="Sales Director", days_ago=900),
        make_employee("m1", name="Morgan", role="Sales Manager", days_ago=600, manager_id="dir"),
        make_employee("m2", name="Riley", role="Sales Manager", site="Charlotte", days_ago=600, manager_id="dir"),
        make_employee("tl", name="Taylor", role="Team Lead", days_ago=300, manager_id="m1"),
        make_employee("a1", days_ago=400, manager_id="tl"),
        make_employee("a2", days_ago=30, manager_id="m1", commission_tier="new"),
        make_employee(
            "a3",
            days_ago=120,
            manager_id="m1",
            commission_tier="new",
            status="terminated",
            termination=make_termination("performance_issues", days_ago=10),
        ),
        make_employee("b1", site="Charlotte", days_ago=400, manager_id="m2"),
    ]


def test_team_performance_includes_indirect_reports(service, org):
    teams = {t.manager_id: t for t in service.get_team_performance_insights(org, NOW)}

    assert set(teams) == {"m1", "m2"}
    m1 = teams["m1"]
    assert m1.manager_name == "Morgan"
    assert m1.team_size == 3
    assert m1.retention_rate == pytest.approx(75.0)
    assert m1.veteran_ratio == pytest.approx(50.0)
    assert m1.recent_terminations == 1


def test_team_performance_sorted_by_retention(service, org):
    teams = service.get_team_performance_insights(org, NOW)

    assert [t.manager_id for t in teams] == ["m2", "m1"]
    assert teams[0].retention_rate == 100.0


def test_team_without_reports_defaults(service):
    teams = service.get_team_performance_insights([make_employee("m", role="Sales Manager")], NOW)

    assert len(teams) == 1
    assert teams[0].team_size == 0
    assert teams[0].avg_tenure == 0.0
    assert teams[0].retention_rate == 100.0
    assert teams[0].veteran_ratio == 0.0


def test_team_performance_survives_manager_cycle(service):
    employees = [
        make_employee("m", role="Sales Manager", manager_id="x"),
        make_employee("x", manager_id="m"),
    ]

    [team] = service.get_team_performance_insights(employees, NOW)

    assert team.team_size == 1


def test_site_comparison_covers_every_site(service, org):
    sites = service.get_site_comparison_insights(org, NOW)

    assert [s.site for s in sites] == [Site.AUSTIN, Site.CHARLOTTE]
    austin, charlotte = sites
    assert austin.total_employees == 5
    assert austin.agent_count == 2
    assert austin.manager_count == 1
    assert austin.termination_rate == pytest.approx(100 / 6)
    assert charlotte.total_employees == 2
    assert charlotte.veteran_ratio == 100.0
    # Manager salary plus a veteran agent's salary and projected commission.
    assert charlotte.projected_costs == pytest.approx(90_000 + 30_000 + 60_000 * 0.20)


def test_turnover_insights(service, org):
    turnover = service.get_turnover_insights(org, NOW)

    assert turnover.total_terminations == 1
    assert turnover.termination_rate == pytest.approx(12.5)
    assert turnover.cost_of_turnover == 3000
    assert turnover.avg_tenure_at_termination == pytest.approx(110 / 30)
    assert [(r.reason, r.count) for r in turnover.top_termination_reasons] == [("performance_issues", 1)]
    assert [e.id for e in turnover.risk_employees] == ["a2"]


def test_compensation_insights(service, org):
    compensation = service.get_compensation_insights(org, NOW)

    assert compensation.avg_salary_by_role[Role.AGENT] == pytest.approx(40_000)
    assert compensation.avg_salary_by_role[Role.SALES_MANAGER] == pytest.approx(90_000)
    assert compensation.avg_salary_by_role[Role.SALES_DIRECTOR] == 0.0
    assert compensation.total_annual_salary == pytest.approx(0 + 2 * 90_000 + 40_000 + 30_000 + 60_000 + 30_000)
    assert compensation.total_projected_commission == pytest.approx(60_000 * (0.20 + 0.05 + 0.20))
    assert compensation.veteran_premium == pytest.approx(VETERAN_PREMIUM)


def test_growth_flags_manager_capacity(service):
    employees = [make_employee("m", role="Sales Manager", days_ago=400)]
    employees += [make_employee(f"a{i}", days_ago=400, manager_id="m") for i in range(9)]

    growth = service.get_growth_insights(employees, NOW)

    assert growth.manager_to_agent_ratio == 9.0
    assert growth.optimal_team_size == 8
    assert growth.expansion_readiness is False
    assert growth.bottlenecks == ["Manager capacity exceeded (9.0 agents per manager)"]


def test_growth_counts_recent_hires(service, org):
    growth = service.get_growth_insights(org, NOW)

    # a2 is the only active hire in the last 180 days.
    assert growth.monthly_growth_rate == pytest.approx(1 / 6)
    assert growth.projected_headcount == pytest.approx(7 + 0.5)


def test_empty_collection_is_safe(service):
    assert service.get_team_performance_insights([], NOW) == []
    assert all(s.total_employees == 0 for s in service.get_site_comparison_insights([], NOW))

    turnover = service.get_turnover_insights([], NOW)
    assert turnover.termination_rate == 0.0
    assert turnover.top_termination_reasons == []

    compensation = service.get_compensation_insights([], NOW)
    assert compensation.cost_per_agent == 0.0
    assert compensation.projected_next_quarter == 0.0

    growth = service.get_growth_insights([], NOW)
    assert growth.manager_to_agent_ratio == 0.0
    assert growth.bottlenecks == []
    assert growth.expansion_readiness is True


def test_recommendations_for_empty_collection(service):
    assert service.get_recommendations([], NOW) == [
        "Review compensation structure - veteran agents may be underpaid relative to value."
    ]


def test_recommendations_flag_turnover_and_onboarding(service):
    employees = [make_employee(f"new{i}", days_ago=20, commission_tier="new") for i in range(6)]
    employees += [
        make_employee(f"gone{i}", days_ago=200, status="terminated", termination=make_termination())
        for i in range(3)
    ]

    recommendations = service.get_recommendations(employees, NOW)

    assert recommendations[0].startswith("High turnover rate detected.")
    assert "6 new agents at risk. Implement enhanced onboarding support." in recommendations
    assert "Address operational bottlenecks before expanding headcount." in recommendations
