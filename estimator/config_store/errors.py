"""Error types for the configuration revision store."""

from estimator.errors import PersistenceError

__all__ = ["ConfigForbiddenError", "ConfigNotFoundError", "PersistenceError"]


class ConfigNotFoundError(LookupError):
    """No active revision exists for the requested kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"No active {kind} configuration found")
        self.kind = kind


class ConfigForbiddenError(PermissionError):
    """The caller's role may not edit this configuration kind.

    Raised before any read or write; the store is untouched.
    """

    def __init__(self, kind: str, role: str) -> None:
        super().__init__(f"Role '{role}' may not edit {kind} configuration")
        self.kind = kind
        self.role = role
