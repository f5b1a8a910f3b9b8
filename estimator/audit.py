"""Audit log.

Writes add an AuditLog row to the caller's session so it commits (or rolls
back) together with the change it describes.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from estimator.db.models import AuditLog


def record_audit(
    session: Session,
    *,
    user_id: str,
    action: str,
    resource_type: str,
    resource_id: str | None = None,
    changes: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the session without committing."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        changes=changes or {},
        extra=metadata,
    )
    session.add(entry)
    logger.debug(f"[AUDIT] {action} {resource_type}:{resource_id} by user_id={user_id}")
    return entry


def list_audit_entries(session: Session, *, resource_type: str | None = None, limit: int = 100) -> list[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit)
    if resource_type:
        query = query.where(AuditLog.resource_type == resource_type)
    return list(session.execute(query).scalars().all())


def audit_entry_to_body(entry: AuditLog) -> dict[str, Any]:
    return {
        "id": entry.id,
        "userId": entry.user_id,
        "action": entry.action,
        "resourceType": entry.resource_type,
        "resourceId": entry.resource_id,
        "changes": entry.changes,
        "metadata": entry.extra,
        "createdAt": entry.created_at.isoformat() if entry.created_at else None,
    }
