"""Pricing and team configuration endpoints.

Reads are public: the calculator loads the active pricing configuration
without logging in. Writes and history need the kind's edit capability.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from loguru import logger

from estimator.api.dependencies.auth import require_capability
from estimator.api.dependencies.services import get_config_store
from estimator.api.errors import http_errors
from estimator.config_store import ConfigKind, ConfigRevisionStore
from estimator.core.permissions import Actor, Capability

router = APIRouter(prefix="/api/admin", tags=["config"])


def _active(store: ConfigRevisionStore, kind: ConfigKind) -> dict[str, Any]:
    with http_errors():
        return store.get_active(kind).to_body()


def _propose(store: ConfigRevisionStore, kind: ConfigKind, payload: dict[str, Any], actor: Actor) -> dict[str, Any]:
    logger.info(f"[CONFIG] {kind.value} update requested by user_id={actor.user_id}")
    with http_errors():
        return store.propose(kind, payload, actor).to_body()


def _history(store: ConfigRevisionStore, kind: ConfigKind) -> list[dict[str, Any]]:
    with http_errors():
        return [revision.to_body() for revision in store.history(kind)]


@router.get("/pricing-config")
def get_pricing_config(store: ConfigRevisionStore = Depends(get_config_store)):
    return _active(store, ConfigKind.pricing)


@router.put("/pricing-config")
@router.post("/pricing-config")
def update_pricing_config(
    payload: dict[str, Any] = Body(...),
    actor: Actor = Depends(require_capability(Capability.edit_pricing)),
    store: ConfigRevisionStore = Depends(get_config_store),
):
    return _propose(store, ConfigKind.pricing, payload, actor)


@router.get("/pricing-config/history")
def pricing_config_history(
    _actor: Actor = Depends(require_capability(Capability.edit_pricing)),
    store: ConfigRevisionStore = Depends(get_config_store),
):
    return _history(store, ConfigKind.pricing)


@router.get("/team-config")
def get_team_config(store: ConfigRevisionStore = Depends(get_config_store)):
    return _active(store, ConfigKind.team)


@router.put("/team-config")
def update_team_config(
    payload: dict[str, Any] = Body(...),
    actor: Actor = Depends(require_capability(Capability.edit_team)),
    store: ConfigRevisionStore = Depends(get_config_store),
):
    return _propose(store, ConfigKind.team, payload, actor)


@router.get("/team-config/history")
def team_config_history(
    _actor: Actor = Depends(require_capability(Capability.edit_team)),
    store: ConfigRevisionStore = Depends(get_config_store),
):
    return _history(store, ConfigKind.team)
