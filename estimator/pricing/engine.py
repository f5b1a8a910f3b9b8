"""Estimate formulas.

Pure functions over calculator inputs and a pricing configuration payload.
Keys missing from a stored configuration fall back to the built-in tables,
so revisions written before a key existed still price correctly.
"""

from __future__ import annotations

import math
from typing import Any

from loguru import logger

from estimator.pricing.data import (
    ADDITIONAL_ROLE_SHARES,
    AI_FEATURE,
    AI_IDEA_TYPE,
    CLIENT_COST_CATEGORIES,
    CORE_ROLES,
    DEFAULT_PRICING_CONFIG,
    ENTERPRISE_IDEA_TYPE,
    FEATURE_HOURS,
    PHASE_WEIGHTS,
    SUPPORT_MONTHS,
    complexity_multiplier_for,
    risk_buffer_for,
)
from estimator.pricing.types import (
    ClientPrice,
    CostBreakdown,
    Estimate,
    EstimateInputs,
    InternalCost,
    Phase,
    PriceRange,
    ProfitAnalysis,
    RiskWarning,
    RoleCost,
    TeamSize,
    Timeline,
)

MAX_COMBINED_MULTIPLIER = 3.5
PRICE_RANGE_SPREAD = 0.15
INFRASTRUCTURE_MONTHS = 6
HEALTHY_MARGIN = 45
WARNING_MARGIN = 30


class UnknownIdeaTypeError(ValueError):
    def __init__(self, idea_type: str) -> None:
        super().__init__(f"Unknown idea type: {idea_type}")
        self.idea_type = idea_type


class PricingConfigError(ValueError):
    """The active pricing configuration has values the formulas cannot use."""


def _round(value: float) -> int:
    """Round half up (the calculator frontend rounds this way, Python's round() does not)."""
    return math.floor(value + 0.5)


def _round_to_hundred(value: float) -> int:
    return _round(value / 100) * 100


def _section(config: dict[str, Any] | None, key: str) -> Any:
    if config and config.get(key) is not None:
        return config[key]
    return DEFAULT_PRICING_CONFIG[key]


def _base_hours(inputs: EstimateInputs, config: dict[str, Any] | None) -> dict[str, float]:
    table = _section(config, "baseIdeaHours")
    base = table.get(inputs.idea_type) or DEFAULT_PRICING_CONFIG["baseIdeaHours"].get(inputs.idea_type)
    if base is None:
        raise UnknownIdeaTypeError(inputs.idea_type)
    return {role: float(base.get(role, 0)) for role in CORE_ROLES}


def _feature_hours(feature_ids: list[str]) -> dict[str, float]:
    totals = dict.fromkeys(CORE_ROLES, 0.0)
    for feature_id in feature_ids:
        hours = FEATURE_HOURS.get(feature_id)
        if hours is None:
            continue
        for role in CORE_ROLES:
            totals[role] += hours[role]
    return totals


def _complexity(inputs: EstimateInputs, config: dict[str, Any] | None) -> float:
    multiplier = complexity_multiplier_for(len(inputs.selected_features))
    if inputs.complexity_level:
        level_multiplier = _section(config, "complexityMultipliers").get(inputs.complexity_level, 1.0)
        multiplier = max(multiplier, level_multiplier)
    return multiplier


def _lookup(table: dict[str, float], key: str | None, default: float = 1.0) -> float:
    if not key:
        return default
    value = table.get(key)
    return default if value is None else value


def _has_ai(inputs: EstimateInputs) -> bool:
    return AI_FEATURE in inputs.selected_features or inputs.idea_type == AI_IDEA_TYPE


def calculate_internal_cost(inputs: EstimateInputs, config: dict[str, Any] | None = None) -> InternalCost:
    """What the project costs us: labor by role, infrastructure and a risk reserve."""
    if not inputs.idea_type:
        return InternalCost()

    base_hours = _base_hours(inputs, config)
    feature_hours = _feature_hours(inputs.selected_features)

    format_multiplier = _lookup(_section(config, "formatMultipliers"), inputs.product_format)
    speed_multiplier = _lookup(_section(config, "timelineMultipliers"), inputs.delivery_speed)
    delivery_adjustment = 1.2 if speed_multiplier > 1 else 1.0
    tech_multiplier = _lookup(_section(config, "techMultipliers"), inputs.tech_stack)
    # complexity scales both effort (hours) and difficulty (rate)
    complexity = _complexity(inputs, config)
    rates = _section(config, "hourlyRates")

    labor_costs: list[RoleCost] = []
    for role in CORE_ROLES:
        hours = _round(
            (base_hours[role] + feature_hours[role]) * format_multiplier * tech_multiplier * delivery_adjustment * complexity
        )
        rate = _round(rates.get(role, DEFAULT_PRICING_CONFIG["hourlyRates"][role]) * complexity)
        labor_costs.append(RoleCost(role=role, hours=hours, hourly_rate=rate, total_cost=hours * rate))

    core_labor = sum(cost.total_cost for cost in labor_costs)
    for role, share in ADDITIONAL_ROLE_SHARES.items():
        rate = rates.get(role) or 35
        hours = _round(core_labor * share / rate)
        labor_costs.append(RoleCost(role=role, hours=hours, hourly_rate=rate, total_cost=hours * rate))

    total_labor = sum(cost.total_cost for cost in labor_costs)
    monthly_infrastructure = _section(config, "infrastructureCosts").get(inputs.idea_type, 0)
    infrastructure_cost = monthly_infrastructure * INFRASTRUCTURE_MONTHS
    risk_buffer = (total_labor + infrastructure_cost) * risk_buffer_for(len(inputs.selected_features), _has_ai(inputs))

    return InternalCost(
        labor_costs=labor_costs,
        total_labor_cost=total_labor,
        infrastructure_cost=infrastructure_cost,
        overhead_cost=0,
        risk_buffer=risk_buffer,
        total_internal_cost=total_labor + infrastructure_cost + risk_buffer,
    )


def calculate_client_price(inputs: EstimateInputs, config: dict[str, Any] | None = None) -> ClientPrice:
    """Client-facing build price. Support is priced separately and not included in total_price."""
    if not inputs.idea_type:
        return ClientPrice()

    base_hours_total = sum(_base_hours(inputs, config).values())
    feature_hours_total = sum(_feature_hours(inputs.selected_features).values())

    format_multiplier = _lookup(_section(config, "formatMultipliers"), inputs.product_format)
    tech_multiplier = _lookup(_section(config, "techMultipliers"), inputs.tech_stack)
    complexity = _complexity(inputs, config)
    timeline_multiplier = _lookup(_section(config, "timelineMultipliers"), inputs.delivery_speed)

    combined = format_multiplier * tech_multiplier * complexity * timeline_multiplier
    if inputs.idea_type != ENTERPRISE_IDEA_TYPE:
        combined = min(combined, MAX_COMBINED_MULTIPLIER)

    adjusted_dev_hours = (base_hours_total + feature_hours_total) * combined
    hourly_rate = (
        _section(config, "dynamicHourlyRates").get(inputs.idea_type)
        or _section(config, "clientHourlyRate")
        or 100
    )
    total_price = adjusted_dev_hours * hourly_rate

    support_months = SUPPORT_MONTHS.get(inputs.support_duration, 0)
    total_support_hours = _section(config, "supportHours").get(inputs.support_duration, 0) * support_months
    support_cost = total_support_hours * hourly_rate

    cap = _section(config, "maxPriceCaps").get(inputs.idea_type)
    if cap and total_price > cap:
        logger.warning(f"[PRICING] Price clamped for {inputs.idea_type}: {total_price:.0f} -> {cap}")
        total_price = cap

    total_price = _round_to_hundred(total_price)
    all_hours = base_hours_total + feature_hours_total
    base_price = total_price * (base_hours_total / all_hours) if all_hours else 0

    return ClientPrice(
        base_price=base_price,
        features_cost=total_price - base_price,
        tech_multiplier=tech_multiplier,
        complexity_multiplier=complexity,
        timeline_multiplier=timeline_multiplier,
        support_cost=support_cost,
        total_price=total_price,
        price_range=PriceRange(
            min=_round_to_hundred(total_price * (1 - PRICE_RANGE_SPREAD)),
            max=_round_to_hundred(total_price * (1 + PRICE_RANGE_SPREAD)),
        ),
        total_dev_hours=_round(adjusted_dev_hours),
        total_support_hours=_round(total_support_hours),
        hourly_rate=hourly_rate,
    )


def calculate_profit(client_price: ClientPrice, internal_cost: InternalCost) -> ProfitAnalysis:
    profit = client_price.total_price - internal_cost.total_internal_cost
    margin = (profit / client_price.total_price) * 100 if client_price.total_price else 0.0

    if margin >= HEALTHY_MARGIN:
        health = "healthy"
    elif margin >= WARNING_MARGIN:
        health = "warning"
    else:
        health = "critical"

    return ProfitAnalysis(
        client_price=client_price.total_price,
        internal_cost=internal_cost.total_internal_cost,
        profit=profit,
        profit_margin=margin,
        health_status=health,
    )


def calculate_timeline(inputs: EstimateInputs, internal_cost: InternalCost, config: dict[str, Any] | None = None) -> Timeline:
    """Team size and phase plan. Every phase gets at least one week."""
    if not inputs.idea_type:
        return Timeline()

    total_hours = sum(cost.hours for cost in internal_cost.labor_costs)
    feature_count = len(inputs.selected_features)

    base_min = max(2, math.ceil(feature_count / 4))
    base_max = min(8, math.ceil(feature_count / 2) + 3)
    if inputs.complexity_level == "advanced":
        base_min += 2
        base_max += 3
    elif inputs.complexity_level == "medium":
        base_min += 1
        base_max += 1
    team_size = TeamSize(min=min(base_min, base_max), max=max(base_min, base_max))

    average_team = (team_size.min + team_size.max) / 2
    weeks = math.ceil(total_hours / (average_team * 40))
    speed_multiplier = _lookup(_section(config, "timelineMultipliers"), inputs.delivery_speed)
    if speed_multiplier > 1:
        weeks = math.ceil(weeks / speed_multiplier)

    final_weeks = max(len(PHASE_WEIGHTS), weeks)
    phases = [Phase(name=name, duration=max(1, _round(final_weeks * weight))) for name, weight in PHASE_WEIGHTS]

    spare = final_weeks - sum(phase.duration for phase in phases)
    if spare > 0:
        development = next(phase for phase in phases if phase.name == "Development")
        development.duration += spare

    return Timeline(phases=phases, total_weeks=sum(phase.duration for phase in phases), team_size=team_size)


def generate_risk_warnings(inputs: EstimateInputs, profit: ProfitAnalysis) -> list[RiskWarning]:
    warnings: list[RiskWarning] = []

    if profit.profit_margin < WARNING_MARGIN:
        warnings.append(
            RiskWarning(
                type="margin",
                severity="high",
                message=f"Profit margin is {profit.profit_margin:.1f}% - below recommended 30% minimum",
            )
        )
    elif profit.profit_margin < 40:
        warnings.append(
            RiskWarning(
                type="margin",
                severity="medium",
                message=f"Profit margin is {profit.profit_margin:.1f}% - below target 40%",
            )
        )

    if inputs.delivery_speed != "standard":
        warnings.append(
            RiskWarning(
                type="timeline",
                severity="high" if inputs.delivery_speed == "priority" else "medium",
                message=f"Accelerated timeline ({inputs.delivery_speed}) increases execution risk",
            )
        )

    if len(inputs.selected_features) > 8:
        warnings.append(
            RiskWarning(
                type="complexity",
                severity="medium",
                message=f"{len(inputs.selected_features)} features selected - high complexity project",
            )
        )

    if _has_ai(inputs):
        warnings.append(
            RiskWarning(type="complexity", severity="medium", message="AI features add technical complexity and uncertainty")
        )

    return warnings


def generate_client_cost_breakdown(internal_cost: InternalCost) -> list[CostBreakdown]:
    """Internal cost regrouped into the categories shown to clients.

    Percentages are of the total internal cost and are all zero when it is zero.
    """
    total = internal_cost.total_internal_cost
    role_costs = {cost.role: cost.total_cost for cost in internal_cost.labor_costs}
    extras = {"infrastructure": internal_cost.infrastructure_cost, "support": internal_cost.risk_buffer}

    breakdown: list[CostBreakdown] = []
    for label, color, description, role in CLIENT_COST_CATEGORIES:
        amount = role_costs.get(role, 0) + extras.get(role, 0)
        breakdown.append(
            CostBreakdown(
                label=label,
                percentage=_round(amount / total * 100) if total else 0,
                amount=_round(amount),
                color=color,
                description=description,
            )
        )
    return breakdown


def build_estimate(inputs: EstimateInputs, config: dict[str, Any] | None, config_version: int) -> Estimate:
    """Price inputs against a configuration payload.

    Raises:
        UnknownIdeaTypeError: idea type has no base hours
        PricingConfigError: a configuration value has the wrong type or shape
    """
    try:
        internal_cost = calculate_internal_cost(inputs, config)
        client_price = calculate_client_price(inputs, config)
        profit = calculate_profit(client_price, internal_cost)
        timeline = calculate_timeline(inputs, internal_cost, config)
    except UnknownIdeaTypeError:
        raise
    except (ArithmeticError, AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error(f"[PRICING] Configuration version {config_version} cannot price {inputs.idea_type}: {e!r}")
        raise PricingConfigError(f"Pricing configuration version {config_version} is invalid") from e

    return Estimate(
        inputs=inputs,
        internal_cost=internal_cost,
        client_price=client_price,
        profit_analysis=profit,
        timeline=timeline,
        cost_breakdown=generate_client_cost_breakdown(internal_cost),
        risk_warnings=generate_risk_warnings(inputs, profit),
        config_version_used=config_version,
    )
