"""FastAPI authentication and authorization dependencies.

Tokens come from the Authorization header (Bearer) or the `session`
cookie. A missing or invalid token is a 401; a valid token whose role
lacks the required capability is a 403.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger
from sqlalchemy import select

from estimator.core.auth_jwt import decode_access_token
from estimator.core.permissions import Actor, Capability, roles_with
from estimator.db.models import User
from estimator.db.session import get_database

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


def extract_auth_token(request: Request, token: str | None) -> str | None:
    """Extract auth token from either Authorization header or cookie."""
    if token:
        return token
    return request.cookies.get("session") or None


def get_current_user(request: Request, token: str | None = Depends(oauth2_scheme)) -> User:
    """Resolve the authenticated user.

    Raises:
        HTTPException: 401 if token is missing, invalid, expired, or the user no longer exists
        HTTPException: 403 if user account is inactive
    """
    auth_token = extract_auth_token(request, token)
    if not auth_token:
        logger.warning(
            f"Auth failed: Missing authentication token. Cookie present: {'session' in request.cookies}, "
            f"Path: {request.url.path}, Method: {request.method}"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = decode_access_token(auth_token)
    except ValueError as e:
        logger.warning(f"Auth failed: {e}, Path: {request.url.path}, Method: {request.method}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    with get_database(request).session() as session:
        user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()

    if user is None:
        logger.warning(f"Auth failed: User not found user_id={user_id}, Path: {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        logger.warning(f"Auth failed: Inactive user user_id={user_id}, Path: {request.url.path}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account inactive")

    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor(user_id=user.id, role=user.role)


def require_capability(capability: Capability) -> Callable[..., Actor]:
    """Build a dependency that admits only roles holding `capability`.

    Usage:
        @router.get("/kpis")
        def kpis(actor: Actor = Depends(require_capability(Capability.view_dashboard))): ...
    """

    allowed = ", ".join(sorted(role.value for role in roles_with(capability)))

    def _require(request: Request, actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.can(capability):
            logger.warning(
                f"Authorization failed: user_id={actor.user_id} role={actor.role} lacks {capability.value} "
                f"(allowed: {allowed}), Path: {request.url.path}"
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
        return actor

    return _require
