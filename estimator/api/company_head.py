"""Company head dashboard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from estimator.api.dependencies.auth import require_capability
from estimator.core.permissions import Actor, Capability
from estimator.db.session import get_database
from estimator.projects.kpis import compute_kpis
from estimator.projects.repository import list_projects

router = APIRouter(prefix="/api/company-head", tags=["company-head"])


@router.get("/kpis")
def kpis(
    request: Request,
    _actor: Actor = Depends(require_capability(Capability.view_dashboard)),
):
    with get_database(request).session() as session:
        return compute_kpis(list_projects(session))
