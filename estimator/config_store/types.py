from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from estimator.core.permissions import Capability
from estimator.db.models import ConfigRevision


class ConfigKind(StrEnum):
    pricing = "pricing"
    team = "team"

    @property
    def edit_capability(self) -> Capability:
        return EDIT_CAPABILITY[self]

    @property
    def audit_resource(self) -> str:
        return f"{self.value}_config"


EDIT_CAPABILITY: dict[ConfigKind, Capability] = {
    ConfigKind.pricing: Capability.edit_pricing,
    ConfigKind.team: Capability.edit_team,
}

# Keys the store owns; a payload cannot override them.
RESERVED_PAYLOAD_KEYS = frozenset(
    {"id", "_id", "kind", "version", "isActive", "is_active", "createdBy", "created_by", "createdAt", "created_at"}
)


@dataclass(frozen=True)
class Revision:
    """Read-only view of one configuration revision."""

    id: str
    kind: ConfigKind
    version: int
    is_active: bool
    created_by: str
    created_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: ConfigRevision) -> Revision:
        return cls(
            id=row.id,
            kind=ConfigKind(row.kind),
            version=row.version,
            is_active=row.is_active,
            created_by=row.created_by,
            created_at=row.created_at,
            payload=dict(row.payload or {}),
        )

    def to_body(self) -> dict[str, Any]:
        """Response body: payload fields flattened next to the revision metadata."""
        body: dict[str, Any] = dict(self.payload)
        body.update(
            {
                "id": self.id,
                "kind": self.kind.value,
                "version": self.version,
                "isActive": self.is_active,
                "createdBy": self.created_by,
                "createdAt": self.created_at.isoformat(),
            }
        )
        return body


def strip_reserved(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if key not in RESERVED_PAYLOAD_KEYS}
