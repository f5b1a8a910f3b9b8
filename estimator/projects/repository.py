"""Repository functions for saved project quotes.

Single responsibility: database operations only.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from estimator.audit import record_audit
from estimator.core.permissions import Actor
from estimator.db.models import Project, ProjectStatus
from estimator.pricing.types import Estimate


def create_project(
    session: Session,
    *,
    estimate: Estimate,
    team_config_id: str | None = None,
    client_name: str | None = None,
    company_name: str | None = None,
    client_email: str | None = None,
    client_phone: str | None = None,
    project_description: str | None = None,
) -> Project:
    """Create a project record from a freshly calculated estimate.

    Returns:
        Created Project instance (flushed, not committed)
    """
    project = Project(
        client_name=client_name,
        company_name=company_name,
        client_email=client_email.lower().strip() if client_email else None,
        client_phone=client_phone,
        project_description=project_description,
        inputs=estimate.inputs.model_dump(by_alias=True),
        client_price=estimate.client_price.model_dump(by_alias=True),
        internal_cost=estimate.internal_cost.model_dump(by_alias=True),
        profit_analysis=estimate.profit_analysis.model_dump(by_alias=True),
        timeline_details=estimate.timeline.model_dump(by_alias=True),
        config_version_used=estimate.config_version_used,
        team_config_id=team_config_id,
        status=ProjectStatus.draft.value,
    )
    session.add(project)
    session.flush()
    return project


def list_projects(session: Session, *, limit: int = 100) -> list[Project]:
    """List projects, newest first."""
    query = select(Project).order_by(Project.created_at.desc()).limit(limit)
    return list(session.execute(query).scalars().all())


def get_project(session: Session, project_id: str) -> Project | None:
    return session.get(Project, project_id)


def set_project_status(session: Session, project: Project, status: ProjectStatus, actor: Actor) -> Project:
    previous = project.status
    project.status = status.value
    record_audit(
        session,
        user_id=actor.user_id,
        action="update_status",
        resource_type="project",
        resource_id=project.id,
        changes={"status": {"from": previous, "to": status.value}},
    )
    session.flush()
    return project
