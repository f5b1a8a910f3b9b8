"""Read-only view of the audit log (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from estimator.api.dependencies.auth import require_capability
from estimator.audit import audit_entry_to_body, list_audit_entries
from estimator.core.permissions import Actor, Capability
from estimator.db.session import get_database

router = APIRouter(prefix="/api/admin/audit", tags=["audit"])


@router.get("")
def list_audit(
    request: Request,
    resource_type: str | None = Query(default=None, alias="resourceType"),
    limit: int = Query(default=100, ge=1, le=500),
    _actor: Actor = Depends(require_capability(Capability.manage_users)),
):
    """Newest entries first, optionally for one resource type (pricing_config, team_config, user, project)."""
    with get_database(request).session() as session:
        entries = list_audit_entries(session, resource_type=resource_type, limit=limit)
        return [audit_entry_to_body(entry) for entry in entries]
