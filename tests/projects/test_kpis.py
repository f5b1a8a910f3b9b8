"""Tests for dashboard aggregates."""

from __future__ import annotations

from estimator.db.models import Project
from estimator.projects.kpis import compute_kpis


def _project(project_id: str, price: float, cost: float, margin: float, health: str, name: str | None = None) -> Project:
    return Project(
        id=project_id,
        client_name=name,
        profit_analysis={
            "clientPrice": price,
            "internalCost": cost,
            "profit": price - cost,
            "profitMargin": margin,
            "healthStatus": health,
        },
    )


def test_empty_dashboard() -> None:
    kpis = compute_kpis([])
    assert kpis["overview"] == {
        "totalQuotedValue": 0,
        "totalInternalCost": 0,
        "totalProfit": 0,
        "averageProfitMargin": 0,
        "totalProjects": 0,
    }
    assert kpis["healthDistribution"] == {"healthy": 0, "warning": 0, "critical": 0}
    assert kpis["riskWarnings"] == []


def test_totals_and_warnings() -> None:
    projects = [
        _project("p1", 10000, 5000, 50, "healthy", "Acme"),
        _project("p2", 10000, 6500, 35, "warning"),
        _project("p3", 10000, 9000, 10, "critical", "Globex"),
    ]
    kpis = compute_kpis(projects)

    assert kpis["overview"]["totalQuotedValue"] == 30000
    assert kpis["overview"]["totalInternalCost"] == 20500
    assert kpis["overview"]["totalProfit"] == 9500
    assert kpis["overview"]["averageProfitMargin"] == 95 / 3
    assert kpis["healthDistribution"] == {"healthy": 1, "warning": 1, "critical": 1}

    warnings = {w["projectId"]: w for w in kpis["riskWarnings"]}
    assert set(warnings) == {"p2", "p3"}
    assert warnings["p2"]["message"] == "Warning: Profit margin below 45%"
    assert warnings["p2"]["clientName"] == "Anonymous"
    assert warnings["p3"]["message"] == "Critical: Profit margin below 30%"


def test_project_without_profit_analysis_is_counted() -> None:
    kpis = compute_kpis([Project(id="p1")])
    assert kpis["overview"]["totalProjects"] == 1
    assert kpis["overview"]["totalQuotedValue"] == 0
