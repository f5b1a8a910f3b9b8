"""Pricing engine input and output models.

Field names are snake_case in Python and camelCase on the wire, matching
the calculator frontend and the stored project snapshots.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EstimateInputs(_CamelModel):
    """Calculator inputs."""

    idea_type: str = Field(default="", description="Idea type, e.g. business-website")
    product_format: str | None = Field(default=None, description="website | mobile-app | website-and-app | full-ecosystem")
    tech_stack: str | None = None
    selected_features: list[str] = Field(default_factory=list)
    delivery_speed: str = "standard"
    support_duration: str = "none"
    complexity_level: str | None = Field(default=None, description="basic | medium | advanced")


class RoleCost(_CamelModel):
    role: str
    hours: int
    hourly_rate: float
    total_cost: float


class InternalCost(_CamelModel):
    labor_costs: list[RoleCost] = Field(default_factory=list)
    total_labor_cost: float = 0
    infrastructure_cost: float = 0
    overhead_cost: float = 0
    risk_buffer: float = 0
    total_internal_cost: float = 0


class PriceRange(_CamelModel):
    min: float
    max: float


class ClientPrice(_CamelModel):
    base_price: float = 0
    features_cost: float = 0
    tech_multiplier: float = 1
    complexity_multiplier: float = 1
    timeline_multiplier: float = 1
    support_cost: float = 0
    total_price: float = 0
    price_range: PriceRange = Field(default_factory=lambda: PriceRange(min=0, max=0))
    total_dev_hours: int = 0
    total_support_hours: int = 0
    hourly_rate: float = 0


HealthStatus = Literal["healthy", "warning", "critical"]


class ProfitAnalysis(_CamelModel):
    client_price: float
    internal_cost: float
    profit: float
    profit_margin: float
    health_status: HealthStatus


class TeamSize(_CamelModel):
    min: int
    max: int


class Phase(_CamelModel):
    name: str
    duration: int


class Timeline(_CamelModel):
    phases: list[Phase] = Field(default_factory=list)
    total_weeks: int = 0
    team_size: TeamSize = Field(default_factory=lambda: TeamSize(min=0, max=0))


class RiskWarning(_CamelModel):
    type: Literal["margin", "timeline", "complexity"]
    severity: Literal["low", "medium", "high"]
    message: str


class CostBreakdown(_CamelModel):
    """One slice of the client-facing cost chart."""

    label: str
    percentage: int
    amount: int
    color: str
    description: str


class Estimate(_CamelModel):
    inputs: EstimateInputs
    internal_cost: InternalCost
    client_price: ClientPrice
    profit_analysis: ProfitAnalysis
    timeline: Timeline
    cost_breakdown: list[CostBreakdown] = Field(default_factory=list)
    risk_warnings: list[RiskWarning] = Field(default_factory=list)
    config_version_used: int
