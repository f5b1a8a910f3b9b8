"""JWT token creation and verification utilities.

Tokens are issued by /api/auth/login and carry the user id in the 'sub'
claim and the role at issue time in 'role'. The role claim is informational;
authorization always re-reads the role from the users table.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from loguru import logger

from estimator.config.settings import settings

TOKEN_ISSUER = "project-estimator"


def create_access_token(user_id: str, role: str) -> str:
    """Create a JWT access token for a user.

    Args:
        user_id: User ID to encode in token
        role: Role of the user at login time

    Returns:
        JWT token string
    """
    user_id_str = str(user_id) if user_id is not None else ""
    if not user_id_str:
        raise ValueError("user_id cannot be None or empty")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id_str,
        "role": str(role),
        "exp": now + timedelta(days=settings.auth_token_expire_days),
        "iat": now,
        "iss": TOKEN_ISSUER,
    }
    return jwt.encode(
        payload,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> str:
    """Decode and verify a JWT access token.

    Args:
        token: JWT token string

    Returns:
        User ID (string) from token 'sub' claim

    Raises:
        ValueError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.auth_secret_key,
            algorithms=[settings.auth_algorithm],
            issuer=TOKEN_ISSUER,
        )
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise ValueError("Invalid or expired token") from e

    user_id = payload.get("sub")
    if not user_id:
        raise ValueError("Token missing user ID")
    return str(user_id)
