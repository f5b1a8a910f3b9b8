"""Company head dashboard aggregates over saved projects."""

from __future__ import annotations

from typing import Any

from estimator.db.models import Project

HEALTH_STATUSES = ("healthy", "warning", "critical")


def _profit(project: Project) -> dict[str, Any]:
    return project.profit_analysis or {}


def compute_kpis(projects: list[Project]) -> dict[str, Any]:
    """Overview totals, per-project metrics, health distribution and risk warnings."""
    total_quoted = sum(_profit(p).get("clientPrice", 0) for p in projects)
    total_internal = sum(_profit(p).get("internalCost", 0) for p in projects)
    total_profit = sum(_profit(p).get("profit", 0) for p in projects)
    average_margin = sum(_profit(p).get("profitMargin", 0) for p in projects) / len(projects) if projects else 0

    project_metrics = [
        {
            "id": p.id,
            "clientName": p.client_name or "Anonymous",
            "clientPrice": _profit(p).get("clientPrice", 0),
            "profit": _profit(p).get("profit", 0),
            "profitMargin": _profit(p).get("profitMargin", 0),
            "healthStatus": _profit(p).get("healthStatus"),
            "createdAt": p.created_at.isoformat() if p.created_at else None,
        }
        for p in projects
    ]

    health_distribution = {status: 0 for status in HEALTH_STATUSES}
    for p in projects:
        status = _profit(p).get("healthStatus")
        if status in health_distribution:
            health_distribution[status] += 1

    risk_warnings = [
        {
            "projectId": p.id,
            "clientName": p.client_name or "Anonymous",
            "healthStatus": _profit(p).get("healthStatus"),
            "profitMargin": _profit(p).get("profitMargin", 0),
            "message": (
                "Critical: Profit margin below 30%"
                if _profit(p).get("healthStatus") == "critical"
                else "Warning: Profit margin below 45%"
            ),
        }
        for p in projects
        if _profit(p).get("healthStatus") != "healthy"
    ]

    return {
        "overview": {
            "totalQuotedValue": total_quoted,
            "totalInternalCost": total_internal,
            "totalProfit": total_profit,
            "averageProfitMargin": average_margin,
            "totalProjects": len(projects),
        },
        "projectMetrics": project_metrics,
        "healthDistribution": health_distribution,
        "riskWarnings": risk_warnings,
    }
