"""Password hashing utilities using passlib with bcrypt.

Never stores or logs raw passwords.
"""

from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")
    # bcrypt hard limit: 72 bytes
    password = password[:72]
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a hash.

    Returns False for empty input or a hash passlib does not recognise.
    """
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain[:72], hashed)
    except ValueError:
        return False
