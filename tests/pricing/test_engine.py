"""Tests for the estimate formulas."""

from __future__ import annotations

import pytest

from estimator.pricing.data import DEFAULT_PRICING_CONFIG, complexity_multiplier_for, risk_buffer_for
from estimator.pricing.engine import (
    PricingConfigError,
    UnknownIdeaTypeError,
    _round,
    _round_to_hundred,
    build_estimate,
    calculate_client_price,
    calculate_internal_cost,
    calculate_profit,
    calculate_timeline,
    generate_client_cost_breakdown,
    generate_risk_warnings,
)
from estimator.pricing.types import ClientPrice, EstimateInputs, InternalCost


def _website(**overrides) -> EstimateInputs:
    fields = {
        "idea_type": "business-website",
        "product_format": "website",
        "tech_stack": "react-nextjs",
        "selected_features": [],
        "delivery_speed": "standard",
        "support_duration": "none",
    }
    fields.update(overrides)
    return EstimateInputs(**fields)


def test_rounding_is_half_up() -> None:
    assert _round(2.5) == 3
    assert _round(3.5) == 4
    assert _round(2.49) == 2
    assert _round_to_hundred(150) == 200
    assert _round_to_hundred(10350) == 10400


def test_inputs_accept_camel_case() -> None:
    inputs = EstimateInputs.model_validate(
        {"ideaType": "mobile-app", "selectedFeatures": ["search"], "deliverySpeed": "faster"}
    )
    assert inputs.idea_type == "mobile-app"
    assert inputs.selected_features == ["search"]
    assert inputs.support_duration == "none"


class TestInternalCost:
    def test_basic_website(self) -> None:
        cost = calculate_internal_cost(_website(), DEFAULT_PRICING_CONFIG)

        by_role = {entry.role: entry for entry in cost.labor_costs}
        assert by_role["frontend"].hours == 80
        assert by_role["frontend"].total_cost == 2800
        assert by_role["qa"].hourly_rate == 25
        assert by_role["pm"].total_cost == 900

        # supporting roles take a share of the 7950 core labor cost
        assert by_role["infrastructure"].hours == 12
        assert by_role["security"].hours == 10
        assert by_role["support"].hours == 9

        assert cost.total_labor_cost == 9035
        assert cost.infrastructure_cost == 600
        assert cost.risk_buffer == pytest.approx(963.5)
        assert cost.total_internal_cost == pytest.approx(10598.5)

    def test_empty_idea_type_is_all_zero(self) -> None:
        cost = calculate_internal_cost(EstimateInputs(), DEFAULT_PRICING_CONFIG)
        assert cost == InternalCost()
        assert cost.total_internal_cost == 0

    def test_unknown_idea_type_raises(self) -> None:
        with pytest.raises(UnknownIdeaTypeError):
            calculate_internal_cost(_website(idea_type="space-elevator"), DEFAULT_PRICING_CONFIG)

    def test_faster_delivery_adds_hours(self) -> None:
        standard = calculate_internal_cost(_website(), DEFAULT_PRICING_CONFIG)
        faster = calculate_internal_cost(_website(delivery_speed="faster"), DEFAULT_PRICING_CONFIG)
        assert faster.labor_costs[0].hours == 96
        assert faster.total_internal_cost > standard.total_internal_cost

    def test_missing_config_keys_fall_back_to_defaults(self) -> None:
        partial = {"hourlyRates": {"frontend": 70}}
        cost = calculate_internal_cost(_website(), partial)
        by_role = {entry.role: entry for entry in cost.labor_costs}
        assert by_role["frontend"].hourly_rate == 70
        assert by_role["backend"].hourly_rate == 35
        assert cost.infrastructure_cost == 600


class TestClientPrice:
    def test_basic_website_uses_dynamic_rate(self) -> None:
        price = calculate_client_price(_website(), DEFAULT_PRICING_CONFIG)

        assert price.hourly_rate == 45
        assert price.total_dev_hours == 230
        assert price.total_price == 10400
        assert price.price_range.min == 8800
        assert price.price_range.max == 12000
        assert price.features_cost == 0
        assert price.support_cost == 0

    def test_price_is_capped_per_idea_type(self) -> None:
        config = dict(DEFAULT_PRICING_CONFIG, clientHourlyRate=200, dynamicHourlyRates={})
        price = calculate_client_price(_website(), config)
        assert price.hourly_rate == 200
        assert price.total_price == 25000

    def test_combined_multiplier_is_capped_except_for_enterprise(self) -> None:
        heavy = {
            "product_format": "full-ecosystem",
            "tech_stack": "native-ios",
            "complexity_level": "advanced",
            "delivery_speed": "priority",
        }
        startup = calculate_client_price(_website(idea_type="startup-product", **heavy), DEFAULT_PRICING_CONFIG)
        assert startup.total_dev_hours == 1995
        assert startup.total_price == 85000

        enterprise = calculate_client_price(_website(idea_type="enterprise software", **heavy), DEFAULT_PRICING_CONFIG)
        assert enterprise.total_dev_hours == round(1120 * 2.2 * 1.2 * 1.6 * 1.6)
        assert enterprise.total_price > 85000

    def test_support_is_priced_separately(self) -> None:
        price = calculate_client_price(_website(support_duration="6-months"), DEFAULT_PRICING_CONFIG)
        assert price.total_support_hours == 120
        assert price.support_cost == 5400
        assert price.total_price == 10400

    def test_features_split_base_and_feature_cost(self) -> None:
        price = calculate_client_price(_website(selected_features=["search"]), DEFAULT_PRICING_CONFIG)
        assert price.base_price + price.features_cost == price.total_price
        assert price.features_cost > 0

    def test_empty_idea_type(self) -> None:
        assert calculate_client_price(EstimateInputs(), DEFAULT_PRICING_CONFIG) == ClientPrice()


class TestComplexity:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, 1.0), (3, 1.0), (4, 1.15), (6, 1.15), (7, 1.3), (9, 1.3), (10, 1.5)],
    )
    def test_feature_count_multiplier(self, count: int, expected: float) -> None:
        assert complexity_multiplier_for(count) == expected

    def test_explicit_level_wins_when_higher(self) -> None:
        features = ["search", "chat", "payments", "analytics"]
        price = calculate_client_price(_website(selected_features=features, complexity_level="advanced"), DEFAULT_PRICING_CONFIG)
        assert price.complexity_multiplier == 1.6

        price = calculate_client_price(_website(selected_features=features, complexity_level="basic"), DEFAULT_PRICING_CONFIG)
        assert price.complexity_multiplier == 1.15

    def test_risk_buffer(self) -> None:
        assert risk_buffer_for(0, False) == pytest.approx(0.10)
        assert risk_buffer_for(7, False) == pytest.approx(0.13)
        assert risk_buffer_for(10, False) == pytest.approx(0.15)
        assert risk_buffer_for(10, True) == pytest.approx(0.20)


class TestProfit:
    @staticmethod
    def _analyse(price: float, cost: float):
        return calculate_profit(ClientPrice(total_price=price), InternalCost(total_internal_cost=cost))

    def test_health_thresholds(self) -> None:
        assert self._analyse(1000, 550).health_status == "healthy"
        assert self._analyse(1000, 700).health_status == "warning"
        assert self._analyse(1000, 701).health_status == "critical"

    def test_zero_price_is_critical(self) -> None:
        profit = self._analyse(0, 0)
        assert profit.profit_margin == 0
        assert profit.health_status == "critical"

    def test_margin_is_percentage(self) -> None:
        profit = self._analyse(2000, 1000)
        assert profit.profit == 1000
        assert profit.profit_margin == 50


class TestTimeline:
    def test_every_phase_gets_at_least_a_week(self) -> None:
        inputs = _website()
        timeline = calculate_timeline(inputs, calculate_internal_cost(inputs, DEFAULT_PRICING_CONFIG), DEFAULT_PRICING_CONFIG)

        assert [phase.name for phase in timeline.phases] == [
            "Discovery & Planning",
            "Design",
            "Development",
            "Testing & QA",
            "Launch & Handoff",
        ]
        assert all(phase.duration >= 1 for phase in timeline.phases)
        assert timeline.total_weeks == sum(phase.duration for phase in timeline.phases)
        assert timeline.team_size.min == 2
        assert timeline.team_size.max == 3

    def test_advanced_complexity_grows_team(self) -> None:
        inputs = _website(complexity_level="advanced")
        timeline = calculate_timeline(inputs, calculate_internal_cost(inputs, DEFAULT_PRICING_CONFIG), DEFAULT_PRICING_CONFIG)
        assert timeline.team_size.min == 4
        assert timeline.team_size.max == 6

    def test_faster_delivery_shortens_schedule(self) -> None:
        features = ["user-accounts", "payments", "chat", "search", "analytics", "reporting", "admin-control"]
        standard_inputs = _website(idea_type="enterprise software", selected_features=features)
        faster_inputs = _website(idea_type="enterprise software", selected_features=features, delivery_speed="priority")

        cost = calculate_internal_cost(standard_inputs, DEFAULT_PRICING_CONFIG)
        standard = calculate_timeline(standard_inputs, cost, DEFAULT_PRICING_CONFIG)
        faster = calculate_timeline(faster_inputs, cost, DEFAULT_PRICING_CONFIG)
        assert faster.total_weeks < standard.total_weeks


class TestRiskWarnings:
    def test_low_margin_priority_ai_project(self) -> None:
        inputs = _website(delivery_speed="priority", selected_features=["ai-recommendations"])
        profit = TestProfit._analyse(1000, 800)

        warnings = generate_risk_warnings(inputs, profit)
        kinds = [(w.type, w.severity) for w in warnings]
        assert ("margin", "high") in kinds
        assert ("timeline", "high") in kinds
        assert ("complexity", "medium") in kinds

    def test_healthy_standard_project_has_no_warnings(self) -> None:
        assert generate_risk_warnings(_website(), TestProfit._analyse(1000, 400)) == []


def test_build_estimate_records_config_version() -> None:
    estimate = build_estimate(_website(), DEFAULT_PRICING_CONFIG, 7)

    assert estimate.config_version_used == 7
    assert estimate.profit_analysis.client_price == estimate.client_price.total_price
    body = estimate.model_dump(by_alias=True)
    assert body["configVersionUsed"] == 7
    assert body["clientPrice"]["priceRange"] == {"min": 8800, "max": 12000}


class TestClientCostBreakdown:
    def test_basic_website_categories(self) -> None:
        cost = calculate_internal_cost(_website(), DEFAULT_PRICING_CONFIG)
        breakdown = {item.label: item for item in generate_client_cost_breakdown(cost)}

        assert list(breakdown) == [
            "Product Engineering",
            "UX & Design",
            "Business Logic & Automation",
            "QA & Testing",
            "Security & Data Protection",
            "Product Management",
            "Infrastructure & Tools",
            "Support & Risk Coverage",
        ]
        assert breakdown["Product Engineering"].amount == 2800
        assert breakdown["Product Engineering"].percentage == 26
        # infrastructure labor plus six months of hosting
        assert breakdown["Infrastructure & Tools"].amount == 1020
        assert breakdown["Infrastructure & Tools"].percentage == 10
        # support labor plus the risk buffer
        assert breakdown["Support & Risk Coverage"].amount == 1279
        assert breakdown["Support & Risk Coverage"].color == "#ef4444"

    def test_zero_cost_has_zero_percentages(self) -> None:
        breakdown = generate_client_cost_breakdown(InternalCost())
        assert len(breakdown) == 8
        assert all(item.percentage == 0 and item.amount == 0 for item in breakdown)

    def test_included_in_estimate(self) -> None:
        body = build_estimate(_website(), DEFAULT_PRICING_CONFIG, 1).model_dump(by_alias=True)
        assert body["costBreakdown"][1] == {
            "label": "UX & Design",
            "percentage": 20,
            "amount": 2100,
            "color": "#8b5cf6",
            "description": "User experience and visual design",
        }


@pytest.mark.parametrize(
    "config",
    [
        {"techMultipliers": {"react-nextjs": "fast"}},
        {"hourlyRates": "cheap"},
        {"baseIdeaHours": {"business-website": {"frontend": "lots"}}},
    ],
)
def test_malformed_configuration_raises_pricing_config_error(config) -> None:
    with pytest.raises(PricingConfigError, match="version 3"):
        build_estimate(_website(), config, 3)


def test_unknown_idea_type_is_not_reported_as_bad_configuration() -> None:
    with pytest.raises(UnknownIdeaTypeError):
        build_estimate(_website(idea_type="space-elevator"), DEFAULT_PRICING_CONFIG, 1)
