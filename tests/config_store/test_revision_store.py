"""Tests for the configuration revision store.

Covers the active-revision invariant, role checks before any write,
version numbering under concurrent proposals and the audit trail.
"""

from __future__ import annotations

import threading

import pytest
from sqlalchemy import func, select

from estimator.config_store import (
    ConfigForbiddenError,
    ConfigKind,
    ConfigNotFoundError,
    ConfigRevisionStore,
    PersistenceError,
)
from estimator.core.permissions import Actor, Role
from estimator.db.models import AuditLog, ConfigHead, ConfigRevision

ADMIN = Actor("admin-1", Role.admin)
HEAD = Actor("head-1", Role.company_head)
CLIENT = Actor("client-1", Role.client)


def _active_rows(store: ConfigRevisionStore, kind: ConfigKind) -> list[ConfigRevision]:
    with store.database.session() as session:
        return list(
            session.execute(
                select(ConfigRevision).where(ConfigRevision.kind == kind.value, ConfigRevision.is_active.is_(True))
            ).scalars()
        )


def test_get_active_on_empty_store_raises_not_found(store: ConfigRevisionStore) -> None:
    with pytest.raises(ConfigNotFoundError) as exc_info:
        store.get_active(ConfigKind.pricing)
    assert exc_info.value.kind == "pricing"
    assert store.find_active(ConfigKind.pricing) is None


def test_propose_activates_new_revision_and_retires_previous(store: ConfigRevisionStore) -> None:
    first = store.propose(ConfigKind.pricing, {"rate": 10}, ADMIN)
    assert first.version == 1
    assert first.is_active is True

    second = store.propose(ConfigKind.pricing, {"rate": 20}, HEAD)
    assert second.version == 2
    assert second.is_active is True
    assert second.created_by == "head-1"

    history = {revision.version: revision for revision in store.history(ConfigKind.pricing)}
    assert history[1].is_active is False
    assert history[2].is_active is True

    active = store.get_active(ConfigKind.pricing)
    assert active.version == 2
    assert active.payload == {"rate": 20}
    assert len(_active_rows(store, ConfigKind.pricing)) == 1


def test_company_head_cannot_propose_team_config(store: ConfigRevisionStore) -> None:
    with pytest.raises(ConfigForbiddenError) as exc_info:
        store.propose(ConfigKind.team, {"members": []}, HEAD)

    assert exc_info.value.kind == "team"
    assert exc_info.value.role == "company_head"
    assert store.history(ConfigKind.team) == []


def test_rejected_proposal_leaves_active_revision_untouched(store: ConfigRevisionStore) -> None:
    store.propose(ConfigKind.pricing, {"rate": 10}, ADMIN)

    with pytest.raises(ConfigForbiddenError):
        store.propose(ConfigKind.pricing, {"rate": 99}, CLIENT)

    active = store.get_active(ConfigKind.pricing)
    assert active.version == 1
    assert active.payload == {"rate": 10}
    assert len(store.history(ConfigKind.pricing)) == 1


def test_unknown_role_holds_no_capabilities(store: ConfigRevisionStore) -> None:
    with pytest.raises(ConfigForbiddenError):
        store.propose(ConfigKind.pricing, {"rate": 1}, Actor("ghost", "superuser"))


def test_kinds_are_versioned_independently(store: ConfigRevisionStore) -> None:
    store.propose(ConfigKind.pricing, {"rate": 10}, ADMIN)
    store.propose(ConfigKind.pricing, {"rate": 20}, ADMIN)
    team = store.propose(ConfigKind.team, {"members": []}, ADMIN)

    assert team.version == 1
    assert store.get_active(ConfigKind.pricing).version == 2
    assert store.get_active(ConfigKind.team).version == 1


def test_reserved_keys_in_payload_are_ignored(store: ConfigRevisionStore) -> None:
    revision = store.propose(
        ConfigKind.pricing,
        {"rate": 10, "version": 999, "isActive": False, "id": "forged", "createdBy": "someone-else"},
        ADMIN,
    )

    assert revision.version == 1
    assert revision.payload == {"rate": 10}
    body = revision.to_body()
    assert body["version"] == 1
    assert body["isActive"] is True
    assert body["id"] == revision.id
    assert body["createdBy"] == "admin-1"
    assert body["rate"] == 10


def test_concurrent_proposals_get_consecutive_versions(store: ConfigRevisionStore) -> None:
    for rate in range(5):
        store.propose(ConfigKind.pricing, {"rate": rate}, ADMIN)
    assert store.get_active(ConfigKind.pricing).version == 5

    barrier = threading.Barrier(2)
    results: list[int] = []
    errors: list[Exception] = []

    def propose(rate: int) -> None:
        barrier.wait()
        try:
            results.append(store.propose(ConfigKind.pricing, {"rate": rate}, ADMIN).version)
        except Exception as e:  # surfaced through the errors list
            errors.append(e)

    threads = [threading.Thread(target=propose, args=(rate,)) for rate in (100, 200)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert sorted(results) == [6, 7]

    active = _active_rows(store, ConfigKind.pricing)
    assert len(active) == 1
    assert active[0].version == 7
    assert store.get_active(ConfigKind.pricing).version == 7

    with store.database.session() as session:
        versions = session.execute(
            select(ConfigRevision.version).where(ConfigRevision.kind == "pricing").order_by(ConfigRevision.version)
        ).scalars().all()
    assert versions == [1, 2, 3, 4, 5, 6, 7]


def test_many_concurrent_proposals_never_leave_two_active(store: ConfigRevisionStore) -> None:
    threads = [
        threading.Thread(target=store.propose, args=(ConfigKind.team, {"members": [i]}, ADMIN)) for i in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    history = store.history(ConfigKind.team)
    assert sorted(r.version for r in history) == list(range(1, 9))
    assert [r.version for r in history if r.is_active] == [8]


def test_head_row_tracks_current_version(store: ConfigRevisionStore) -> None:
    store.propose(ConfigKind.pricing, {"rate": 10}, ADMIN)
    store.propose(ConfigKind.pricing, {"rate": 20}, ADMIN)

    with store.database.session() as session:
        head = session.get(ConfigHead, "pricing")
        assert head.current_version == 2
        assert session.get(ConfigHead, "team").current_version == 0


def test_propose_writes_audit_entry(store: ConfigRevisionStore) -> None:
    store.propose(ConfigKind.pricing, {"rate": 10}, ADMIN)
    revision = store.propose(ConfigKind.pricing, {"rate": 20}, HEAD)

    with store.database.session() as session:
        entries = session.execute(select(AuditLog).where(AuditLog.resource_type == "pricing_config")).scalars().all()
    entries = sorted(entries, key=lambda entry: entry.changes["version"])

    assert len(entries) == 2
    latest = entries[-1]
    assert latest.user_id == "head-1"
    assert latest.action == "propose"
    assert latest.resource_id == revision.id
    assert latest.changes == {"version": 2}
    assert latest.extra == {"previousVersion": 1}


def test_rejected_proposal_is_not_audited(store: ConfigRevisionStore) -> None:
    with pytest.raises(ConfigForbiddenError):
        store.propose(ConfigKind.team, {"members": []}, HEAD)

    with store.database.session() as session:
        assert session.execute(select(func.count()).select_from(AuditLog)).scalar_one() == 0


def test_storage_failure_surfaces_as_persistence_error(store: ConfigRevisionStore) -> None:
    store.propose(ConfigKind.pricing, {"rate": 10}, ADMIN)
    with store.database.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE config_revisions")

    with pytest.raises(PersistenceError):
        store.get_active(ConfigKind.pricing)
    with pytest.raises(PersistenceError):
        store.propose(ConfigKind.pricing, {"rate": 20}, ADMIN)
