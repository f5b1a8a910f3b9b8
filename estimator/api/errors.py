"""Translate domain exceptions into HTTPException.

Usage:
    with http_errors():
        revision = store.get_active(kind)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status
from loguru import logger

from estimator.config_store import ConfigForbiddenError, ConfigNotFoundError
from estimator.core.circuit_breaker import CircuitOpenError
from estimator.errors import MailDeliveryError, MailNotConfiguredError, PersistenceError
from estimator.pricing.engine import PricingConfigError, UnknownIdeaTypeError


@contextmanager
def http_errors() -> Iterator[None]:
    try:
        yield
    except ConfigNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ConfigForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized") from e
    except PersistenceError as e:
        logger.error(f"Persistence failure: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from e
    except UnknownIdeaTypeError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except PricingConfigError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except CircuitOpenError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Email service temporarily unavailable"
        ) from e
    except MailNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    except MailDeliveryError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send verification email") from e
