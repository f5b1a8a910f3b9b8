from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class ProjectStatus(StrEnum):
    draft = "draft"
    sent = "sent"
    accepted = "accepted"
    rejected = "rejected"


class User(Base):
    """Staff and client accounts.

    Stores:
    - id: User ID (string UUID format)
    - email: Lower-cased, unique
    - password_hash: bcrypt hash, never the raw password
    - role: admin | company_head | client (see estimator.core.permissions.Role)
    - is_active: Inactive users cannot log in or use existing tokens
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid, index=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="client")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ConfigRevision(Base):
    """One immutable, versioned snapshot of a configuration document.

    Revisions are only ever inserted. The single mutation allowed after
    insert is is_active flipping to False when a newer revision of the
    same kind is proposed.

    Constraints:
    - Unique (kind, version): no duplicate versions within a kind
    - At most one is_active=True row per kind (enforced by ConfigRevisionStore)
    """

    __tablename__ = "config_revisions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid, index=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_by: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("kind", "version", name="uq_config_revision_kind_version"),
        Index("idx_config_revisions_kind_active", "kind", "is_active"),
    )


class ConfigHead(Base):
    """Per-kind row locked while a new revision is proposed."""

    __tablename__ = "config_heads"

    kind: Mapped[str] = mapped_column(String(32), primary_key=True)
    current_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class Project(Base):
    """A saved quote.

    The pricing snapshot (client_price, internal_cost, profit_analysis,
    timeline_details) is what the client saw at save time. Reads recalculate
    against the active pricing configuration.
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid, index=True)
    client_name: Mapped[str | None] = mapped_column(String, nullable=True)
    company_name: Mapped[str | None] = mapped_column(String, nullable=True)
    client_email: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    client_phone: Mapped[str | None] = mapped_column(String, nullable=True)
    project_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    inputs: Mapped[dict] = mapped_column(JSON, nullable=False)
    client_price: Mapped[dict] = mapped_column(JSON, nullable=False)
    internal_cost: Mapped[dict] = mapped_column(JSON, nullable=False)
    profit_analysis: Mapped[dict] = mapped_column(JSON, nullable=False)
    timeline_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    config_version_used: Mapped[int] = mapped_column(Integer, nullable=False)
    team_config_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ProjectStatus.draft.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class OtpCode(Base):
    """Email verification code. Deleted on successful verification."""

    __tablename__ = "otp_codes"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)


class AuditLog(Base):
    """Record of a privileged mutation."""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    resource_type: Mapped[str] = mapped_column(String(32), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String, nullable=True)
    changes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    # "metadata" is reserved on declarative classes
    extra: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
