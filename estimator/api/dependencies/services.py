"""Dependencies resolving per-application services from app.state."""

from __future__ import annotations

from fastapi import Request

from estimator.config.settings import Settings
from estimator.config_store import ConfigRevisionStore
from estimator.otp.mailer import SmtpMailer


def get_config_store(request: Request) -> ConfigRevisionStore:
    return request.app.state.config_store


def get_mailer(request: Request) -> SmtpMailer:
    return request.app.state.mailer


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
