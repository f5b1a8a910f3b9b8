"""Saved project quotes.

Submission is public (the calculator saves the quote when the client asks
for it); reading and status changes are for dashboard users.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger

from estimator.api.dependencies.auth import require_capability
from estimator.api.dependencies.services import get_config_store
from estimator.api.errors import http_errors
from estimator.api.schemas.schemas import ProjectCreateRequest, ProjectStatusRequest
from estimator.config_store import ConfigKind, ConfigRevisionStore
from estimator.core.permissions import Actor, Capability
from estimator.db.session import get_database
from estimator.pricing.service import estimate
from estimator.projects import repository
from estimator.projects.service import project_to_body, project_with_live_pricing

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(
    body: ProjectCreateRequest,
    request: Request,
    store: ConfigRevisionStore = Depends(get_config_store),
):
    """Store a quote. Client-supplied prices are never trusted; the estimate is recalculated here."""
    with http_errors():
        result = estimate(store, body.inputs)
        team = store.find_active(ConfigKind.team)

    with get_database(request).session() as session:
        project = repository.create_project(
            session,
            estimate=result,
            team_config_id=team.id if team else None,
            client_name=body.client_name,
            company_name=body.company_name,
            client_email=body.client_email,
            client_phone=body.client_phone,
            project_description=body.project_description,
        )
        response = project_to_body(project)

    logger.info(f"[PROJECTS] Created project_id={response['id']} config_version={result.config_version_used}")
    return response


@router.get("")
def list_projects(
    request: Request,
    _actor: Actor = Depends(require_capability(Capability.view_dashboard)),
):
    with get_database(request).session() as session:
        return [project_to_body(project) for project in repository.list_projects(session)]


@router.get("/{project_id}")
def get_project(
    project_id: str,
    request: Request,
    _actor: Actor = Depends(require_capability(Capability.view_dashboard)),
    store: ConfigRevisionStore = Depends(get_config_store),
):
    with get_database(request).session() as session:
        project = repository.get_project(session, project_id)
        if project is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    with http_errors():
        return project_with_live_pricing(project, store)


@router.patch("/{project_id}/status")
def update_project_status(
    project_id: str,
    body: ProjectStatusRequest,
    request: Request,
    actor: Actor = Depends(require_capability(Capability.view_dashboard)),
):
    with get_database(request).session() as session:
        project = repository.get_project(session, project_id)
        if project is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
        repository.set_project_status(session, project, body.status, actor)
        response = project_to_body(project)

    logger.info(f"[PROJECTS] project_id={project_id} status={body.status.value} by user_id={actor.user_id}")
    return response
