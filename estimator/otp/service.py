"""One-time passcodes for client email verification."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from estimator.db.models import OtpCode
from estimator.db.session import Database


def normalize_email(email: str) -> str:
    return email.lower().strip()


def generate_code() -> str:
    """Six-digit code, never starting with zero."""
    return str(100000 + secrets.randbelow(900000))


def issue_code(session: Session, email: str, ttl_minutes: int, now: datetime | None = None) -> OtpCode:
    """Replace any outstanding codes for the email with a fresh one."""
    now = now or datetime.now(timezone.utc)
    email = normalize_email(email)
    session.execute(delete(OtpCode).where(OtpCode.email == email))
    record = OtpCode(
        email=email,
        code=generate_code(),
        created_at=now,
        expires_at=now + timedelta(minutes=ttl_minutes),
    )
    session.add(record)
    session.flush()
    logger.info(f"[OTP] Issued code for {email}, expires_at={record.expires_at.isoformat()}")
    return record


def verify_code(session: Session, email: str, code: str, now: datetime | None = None) -> bool:
    """Consume a code. Returns False for unknown, mismatched or expired codes."""
    now = now or datetime.now(timezone.utc)
    email = normalize_email(email)
    record = session.execute(
        select(OtpCode).where(
            OtpCode.email == email,
            OtpCode.code == code.strip(),
            OtpCode.expires_at > now,
        )
    ).scalar_one_or_none()
    if record is None:
        logger.info(f"[OTP] Verification failed for {email}")
        return False

    session.delete(record)
    session.flush()
    logger.info(f"[OTP] Verified {email}")
    return True


def purge_expired(database: Database, now: datetime | None = None) -> int:
    """Delete expired codes. Scheduled from the application lifespan."""
    now = now or datetime.now(timezone.utc)
    with database.session() as session:
        result = session.execute(delete(OtpCode).where(OtpCode.expires_at <= now))
        removed = result.rowcount or 0
    if removed:
        logger.info(f"[OTP] Purged {removed} expired codes")
    return removed
