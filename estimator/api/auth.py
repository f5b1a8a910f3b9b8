"""Authentication endpoints for JWT-based auth.

Provides:
- Email/password login (token in body and httponly `session` cookie)
- Current user lookup
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import select

from estimator.api.dependencies.auth import get_current_user
from estimator.api.schemas.schemas import LoginRequest
from estimator.config.settings import settings
from estimator.core.auth_jwt import create_access_token
from estimator.core.password import verify_password
from estimator.db.models import User
from estimator.db.session import get_database

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _normalize_email(email: str) -> str:
    """Normalize email to lowercase."""
    return email.lower().strip()


def _set_auth_cookie(response: Response, token: str, request: Request) -> None:
    """Set the httponly session cookie; `secure` only when served over HTTPS."""
    response.set_cookie(
        key="session",
        value=token,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
        max_age=60 * 60 * 24 * settings.auth_token_expire_days,
    )


def user_to_body(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name, "role": user.role}


@router.post("/login")
def login(body: LoginRequest, request: Request):
    """Log in with email and password.

    Raises:
        HTTPException: 400 if email or password is missing
        HTTPException: 401 if the credentials do not match
        HTTPException: 403 if the account is inactive
    """
    if not body.email or not body.password:
        logger.warning("[AUTH] Login failed: email or password missing")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required")

    email = _normalize_email(body.email)
    logger.info(f"[AUTH] Login requested for email={email}")

    with get_database(request).session() as session:
        user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None or not verify_password(body.password, user.password_hash):
            logger.warning(f"[AUTH] Login failed: invalid credentials for email={email}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
        if not user.is_active:
            logger.warning(f"[AUTH] Login failed: inactive account email={email}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account inactive")

        user.last_login_at = datetime.now(timezone.utc)
        token = create_access_token(user.id, user.role)
        user_body = user_to_body(user)

    logger.info(f"[AUTH] Login successful user_id={user_body['id']} role={user_body['role']}")
    response = JSONResponse(content={"token": token, "user": user_body})
    _set_auth_cookie(response, token, request)
    return response


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return user_to_body(user)
