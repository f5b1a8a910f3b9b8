"""Versioned configuration revisions with a single active revision per kind."""

from __future__ import annotations

import threading
from typing import Any

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from estimator.audit import record_audit
from estimator.config_store.errors import ConfigForbiddenError, ConfigNotFoundError, PersistenceError
from estimator.config_store.types import ConfigKind, Revision, strip_reserved
from estimator.core.permissions import Actor
from estimator.db.models import ConfigHead, ConfigRevision
from estimator.db.session import Database


class ConfigRevisionStore:
    """Append-only revision history for pricing and team configuration.

    propose() is a critical section per kind: an in-process lock serializes
    threads of this application, and the kind's config_heads row is locked
    with SELECT ... FOR UPDATE so other processes sharing a PostgreSQL
    database serialize too. The unique (kind, version) constraint rejects
    anything that slips through both.
    """

    def __init__(self, database: Database) -> None:
        self.database = database
        self._locks: dict[ConfigKind, threading.Lock] = {kind: threading.Lock() for kind in ConfigKind}

    def ensure_heads(self) -> None:
        """Create the per-kind lock rows that do not exist yet."""
        try:
            with self.database.session() as session:
                existing = set(session.execute(select(ConfigHead.kind)).scalars().all())
                for kind in ConfigKind:
                    if kind.value not in existing:
                        current = self._max_version(session, kind)
                        session.add(ConfigHead(kind=kind.value, current_version=current))
                        logger.info(f"[CONFIG] Created head row for kind={kind.value} at version={current}")
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to initialize configuration heads: {e}") from e

    def get_active(self, kind: ConfigKind | str) -> Revision:
        """Return the active revision of a kind.

        If more than one revision is flagged active, the highest version wins.

        Raises:
            ConfigNotFoundError: No active revision exists
            PersistenceError: The read failed
        """
        kind = ConfigKind(kind)
        try:
            with self.database.session() as session:
                row = session.execute(
                    select(ConfigRevision)
                    .where(ConfigRevision.kind == kind.value, ConfigRevision.is_active.is_(True))
                    .order_by(ConfigRevision.version.desc())
                    .limit(1)
                ).scalar_one_or_none()
                revision = Revision.from_row(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.exception(f"[CONFIG] Failed to read active {kind.value} configuration")
            raise PersistenceError(f"Failed to fetch {kind.value} configuration") from e

        if revision is None:
            raise ConfigNotFoundError(kind.value)
        return revision

    def find_active(self, kind: ConfigKind | str) -> Revision | None:
        try:
            return self.get_active(kind)
        except ConfigNotFoundError:
            return None

    def history(self, kind: ConfigKind | str, limit: int = 50) -> list[Revision]:
        """Revisions of a kind, newest first."""
        kind = ConfigKind(kind)
        try:
            with self.database.session() as session:
                rows = session.execute(
                    select(ConfigRevision)
                    .where(ConfigRevision.kind == kind.value)
                    .order_by(ConfigRevision.version.desc())
                    .limit(limit)
                ).scalars().all()
                return [Revision.from_row(row) for row in rows]
        except SQLAlchemyError as e:
            logger.exception(f"[CONFIG] Failed to read {kind.value} history")
            raise PersistenceError(f"Failed to fetch {kind.value} configuration history") from e

    def propose(self, kind: ConfigKind | str, payload: dict[str, Any], actor: Actor) -> Revision:
        """Make a new revision the active one and retire every earlier revision.

        Args:
            kind: Configuration kind
            payload: Opaque configuration document
            actor: Caller identity

        Returns:
            The newly created, active revision

        Raises:
            ConfigForbiddenError: Caller's role may not edit this kind (nothing is read or written)
            PersistenceError: The transaction failed and was rolled back
        """
        kind = ConfigKind(kind)
        if not actor.can(kind.edit_capability):
            logger.warning(f"[CONFIG] Rejected {kind.value} proposal from user_id={actor.user_id} role={actor.role}")
            raise ConfigForbiddenError(kind.value, str(actor.role))

        document = strip_reserved(payload)

        with self._locks[kind]:
            try:
                with self.database.session() as session:
                    revision = self._propose_locked(session, kind, document, actor)
            except SQLAlchemyError as e:
                logger.exception(f"[CONFIG] Failed to propose {kind.value} configuration for user_id={actor.user_id}")
                raise PersistenceError(f"Failed to update {kind.value} configuration") from e

        logger.info(f"[CONFIG] {kind.value} configuration version={revision.version} activated by user_id={actor.user_id}")
        return revision

    def _propose_locked(self, session: Session, kind: ConfigKind, document: dict[str, Any], actor: Actor) -> Revision:
        head = session.execute(
            select(ConfigHead).where(ConfigHead.kind == kind.value).with_for_update()
        ).scalar_one_or_none()
        if head is None:
            head = ConfigHead(kind=kind.value, current_version=0)
            session.add(head)
            session.flush()

        previous_version = self._max_version(session, kind)
        new_version = previous_version + 1

        session.execute(
            update(ConfigRevision)
            .where(ConfigRevision.kind == kind.value, ConfigRevision.is_active.is_(True))
            .values(is_active=False)
        )

        row = ConfigRevision(
            kind=kind.value,
            version=new_version,
            is_active=True,
            payload=document,
            created_by=actor.user_id,
        )
        session.add(row)
        head.current_version = new_version
        session.flush()

        record_audit(
            session,
            user_id=actor.user_id,
            action="propose",
            resource_type=kind.audit_resource,
            resource_id=row.id,
            changes={"version": new_version},
            metadata={"previousVersion": previous_version},
        )
        return Revision.from_row(row)

    @staticmethod
    def _max_version(session: Session, kind: ConfigKind) -> int:
        current = session.execute(
            select(func.max(ConfigRevision.version)).where(ConfigRevision.kind == kind.value)
        ).scalar_one_or_none()
        return current or 0
