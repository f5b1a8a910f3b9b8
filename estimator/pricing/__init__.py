"""Pricing engine: internal cost, client price, profit and timeline."""

from estimator.pricing.engine import (
    PricingConfigError,
    UnknownIdeaTypeError,
    build_estimate,
    calculate_client_price,
    calculate_internal_cost,
    calculate_profit,
    calculate_timeline,
    generate_client_cost_breakdown,
    generate_risk_warnings,
)
from estimator.pricing.types import ClientPrice, CostBreakdown, Estimate, EstimateInputs, InternalCost, ProfitAnalysis, Timeline

__all__ = [
    "ClientPrice",
    "CostBreakdown",
    "Estimate",
    "EstimateInputs",
    "InternalCost",
    "PricingConfigError",
    "ProfitAnalysis",
    "Timeline",
    "UnknownIdeaTypeError",
    "build_estimate",
    "calculate_client_price",
    "calculate_internal_cost",
    "calculate_profit",
    "calculate_timeline",
    "generate_client_cost_breakdown",
    "generate_risk_warnings",
]
