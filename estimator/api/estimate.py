"""Public price calculator endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from estimator.api.dependencies.services import get_config_store
from estimator.api.errors import http_errors
from estimator.config_store import ConfigRevisionStore
from estimator.pricing.service import estimate
from estimator.pricing.types import EstimateInputs

router = APIRouter(prefix="/api", tags=["estimate"])


@router.post("/estimate")
def calculate_estimate(inputs: EstimateInputs, store: ConfigRevisionStore = Depends(get_config_store)):
    """Full estimate against the active pricing configuration (built-in defaults when none is active)."""
    with http_errors():
        result = estimate(store, inputs)
    return result.model_dump(by_alias=True)
