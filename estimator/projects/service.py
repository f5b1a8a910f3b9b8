"""Project quotes: serialization and live repricing."""

from __future__ import annotations

from typing import Any

from loguru import logger

from estimator.config_store import ConfigRevisionStore
from estimator.db.models import Project
from estimator.pricing.engine import build_estimate
from estimator.pricing.service import resolve_pricing_config
from estimator.pricing.types import EstimateInputs


def project_to_body(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "clientName": project.client_name,
        "companyName": project.company_name,
        "clientEmail": project.client_email,
        "clientPhone": project.client_phone,
        "projectDescription": project.project_description,
        "inputs": project.inputs,
        "clientPrice": project.client_price,
        "internalCost": project.internal_cost,
        "profitAnalysis": project.profit_analysis,
        "timelineDetails": project.timeline_details,
        "configVersionUsed": project.config_version_used,
        "teamConfigUsed": project.team_config_id,
        "status": project.status,
        "createdAt": project.created_at.isoformat() if project.created_at else None,
        "updatedAt": project.updated_at.isoformat() if project.updated_at else None,
    }


def project_with_live_pricing(project: Project, store: ConfigRevisionStore) -> dict[str, Any]:
    """Project body with pricing recalculated against the active configuration.

    The stored snapshot is returned unchanged if recalculation fails for any
    reason, including an active configuration the formulas cannot use.
    """
    body = project_to_body(project)
    if not project.inputs:
        return body

    try:
        inputs = EstimateInputs.model_validate(project.inputs)
        config, version = resolve_pricing_config(store)
        estimate = build_estimate(inputs, config, version)
    except Exception:
        logger.exception(f"[PROJECTS] Live recalculation failed for project_id={project.id}, returning stored values")
        return body

    body["internalCost"] = estimate.internal_cost.model_dump(by_alias=True)
    body["clientPrice"] = estimate.client_price.model_dump(by_alias=True)
    body["profitAnalysis"] = estimate.profit_analysis.model_dump(by_alias=True)
    body["recalculatedWithVersion"] = version
    return body
