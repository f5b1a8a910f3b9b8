"""Pricing against the active configuration revision."""

from __future__ import annotations

from typing import Any

from loguru import logger

from estimator.config_store import ConfigKind, ConfigRevisionStore
from estimator.pricing.data import DEFAULT_PRICING_CONFIG
from estimator.pricing.engine import build_estimate
from estimator.pricing.types import Estimate, EstimateInputs

DEFAULT_CONFIG_VERSION = 0


def resolve_pricing_config(store: ConfigRevisionStore) -> tuple[dict[str, Any], int]:
    """Active pricing payload and its version; built-in defaults (version 0) when none exists."""
    revision = store.find_active(ConfigKind.pricing)
    if revision is None:
        logger.debug("[PRICING] No active pricing configuration, using built-in defaults")
        return DEFAULT_PRICING_CONFIG, DEFAULT_CONFIG_VERSION
    return revision.payload, revision.version


def estimate(store: ConfigRevisionStore, inputs: EstimateInputs) -> Estimate:
    config, version = resolve_pricing_config(store)
    return build_estimate(inputs, config, version)
