"""Roles and the capability table.

Every authorization decision goes through has_capability(). Routes never
compare role strings themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    admin = "admin"
    company_head = "company_head"
    client = "client"


class Capability(StrEnum):
    edit_pricing = "edit_pricing"
    edit_team = "edit_team"
    view_dashboard = "view_dashboard"
    manage_users = "manage_users"
    view_diagnostics = "view_diagnostics"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.admin: frozenset(Capability),
    Role.company_head: frozenset({Capability.edit_pricing, Capability.view_dashboard}),
    Role.client: frozenset(),
}


@dataclass(frozen=True)
class Actor:
    """Resolved caller identity: who is acting and with which role."""

    user_id: str
    role: Role | str

    def can(self, capability: Capability) -> bool:
        return has_capability(self.role, capability)


def parse_role(value: str | Role | None) -> Role | None:
    """Return the Role for a stored role string, or None when unknown."""
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def has_capability(role: str | Role | None, capability: Capability) -> bool:
    """Check whether a role may invoke an operation.

    Unknown or missing roles hold no capabilities.
    """
    parsed = parse_role(role)
    if parsed is None:
        return False
    return capability in ROLE_CAPABILITIES[parsed]


def roles_with(capability: Capability) -> set[Role]:
    return {role for role, caps in ROLE_CAPABILITIES.items() if capability in caps}
