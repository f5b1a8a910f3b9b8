"""User administration (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy import select

from estimator.api.auth import user_to_body
from estimator.api.dependencies.auth import require_capability
from estimator.api.schemas.schemas import UserCreateRequest
from estimator.audit import record_audit
from estimator.core.password import hash_password
from estimator.core.permissions import Actor, Capability
from estimator.db.models import User
from estimator.db.session import get_database

router = APIRouter(prefix="/api/admin/users", tags=["users"])


def _user_listing(user: User) -> dict:
    body = user_to_body(user)
    body.update(
        {
            "isActive": user.is_active,
            "createdAt": user.created_at.isoformat() if user.created_at else None,
            "lastLoginAt": user.last_login_at.isoformat() if user.last_login_at else None,
        }
    )
    return body


@router.get("")
def list_users(
    request: Request,
    _actor: Actor = Depends(require_capability(Capability.manage_users)),
):
    with get_database(request).session() as session:
        users = session.execute(select(User).order_by(User.created_at.desc())).scalars().all()
        return [_user_listing(user) for user in users]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    request: Request,
    actor: Actor = Depends(require_capability(Capability.manage_users)),
):
    """Create a staff or client account.

    Raises:
        HTTPException: 409 if email already exists
    """
    email = body.email.lower().strip()
    with get_database(request).session() as session:
        if session.execute(select(User).where(User.email == email)).first():
            logger.warning(f"[USERS] Create failed: email already exists={email}")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A user with this email already exists")

        user = User(email=email, name=body.name, password_hash=hash_password(body.password), role=body.role.value)
        session.add(user)
        session.flush()
        record_audit(
            session,
            user_id=actor.user_id,
            action="create",
            resource_type="user",
            resource_id=user.id,
            changes={"email": email, "role": body.role.value},
        )
        response = _user_listing(user)

    logger.info(f"[USERS] Created user_id={response['id']} role={response['role']} by user_id={actor.user_id}")
    return response
