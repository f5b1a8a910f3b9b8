"""ConfigRevisionStore - versioned pricing and team configuration."""

from estimator.config_store.errors import ConfigForbiddenError, ConfigNotFoundError, PersistenceError
from estimator.config_store.store import ConfigRevisionStore
from estimator.config_store.types import ConfigKind, Revision

__all__ = [
    "ConfigForbiddenError",
    "ConfigKind",
    "ConfigNotFoundError",
    "ConfigRevisionStore",
    "PersistenceError",
    "Revision",
]
