"""Health, auth debugging and demo seeding."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from estimator.api.dependencies.auth import extract_auth_token, oauth2_scheme, require_capability
from estimator.api.dependencies.services import get_app_settings, get_config_store, get_mailer
from estimator.api.errors import http_errors
from estimator.config.settings import Settings
from estimator.config_store import ConfigRevisionStore
from estimator.core.permissions import ROLE_CAPABILITIES, Actor, Capability, parse_role
from estimator.db.session import get_database
from estimator.otp.mailer import SmtpMailer
from estimator.seed import seed_demo_data

router = APIRouter(prefix="/api", tags=["diagnostics"])


@router.get("/health")
def health(request: Request):
    try:
        get_database(request).ping()
    except SQLAlchemyError as e:
        logger.error(f"[HEALTH] Database ping failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database unavailable") from e
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/debug-auth")
def debug_auth(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    actor: Actor = Depends(require_capability(Capability.view_diagnostics)),
    mailer: SmtpMailer = Depends(get_mailer),
):
    """What the server sees for this request, including the request id its log lines carry."""
    role = parse_role(actor.role)
    breaker = mailer.breaker.state()
    return {
        "requestId": getattr(request.state, "request_id", None),
        "userId": actor.user_id,
        "role": str(actor.role),
        "capabilities": sorted(c.value for c in ROLE_CAPABILITIES.get(role, frozenset())) if role else [],
        "tokenSource": "header" if token else ("cookie" if extract_auth_token(request, None) else None),
        "mailBreaker": {
            "state": breaker.state.value,
            "failureCount": breaker.failure_count,
        },
    }


@router.post("/seed")
def seed(
    request: Request,
    actor: Actor = Depends(require_capability(Capability.view_diagnostics)),
    store: ConfigRevisionStore = Depends(get_config_store),
    app_settings: Settings = Depends(get_app_settings),
):
    logger.info(f"[SEED] Seed requested by user_id={actor.user_id}")
    with http_errors():
        result = seed_demo_data(get_database(request), store, app_settings)
    return {"success": True, **result.to_body()}
