"""Request schemas for the estimator API.

Bodies are camelCase on the wire. Fields the handlers must report as 400
(rather than FastAPI's 422) are optional here and checked in the handler.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from estimator.core.permissions import Role
from estimator.db.models import ProjectStatus
from estimator.pricing.types import EstimateInputs

# ============================================================================
# Auth
# ============================================================================


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


# ============================================================================
# Projects
# ============================================================================


class ProjectCreateRequest(BaseModel):
    """Public quote submission. Prices are always recalculated server-side."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    inputs: EstimateInputs
    client_name: str | None = None
    company_name: str | None = None
    client_email: EmailStr | None = None
    client_phone: str | None = None
    project_description: str | None = None


class ProjectStatusRequest(BaseModel):
    status: ProjectStatus


# ============================================================================
# Users
# ============================================================================


class UserCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role: Role = Role.client


# ============================================================================
# OTP
# ============================================================================


class OtpSendRequest(BaseModel):
    email: str | None = None


class OtpVerifyRequest(BaseModel):
    email: str | None = None
    code: str | None = None
