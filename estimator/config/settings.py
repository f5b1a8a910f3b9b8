import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is meant for local development only. Set DATABASE_URL to a
    PostgreSQL connection string in production.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info("Using DATABASE_URL from environment")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "estimator.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    auth_secret_key: str = Field(default="dev-secret-change-me", validation_alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field(default="HS256", validation_alias="AUTH_ALGORITHM")
    auth_token_expire_days: int = Field(default=7, validation_alias="AUTH_TOKEN_EXPIRE_DAYS")
    auth_url: str = Field(
        default="",
        validation_alias="AUTH_URL",
        description="Public base URL the login cookie is issued for",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE", description="Optional rotating log file path")

    smtp_host: str = Field(default="", validation_alias="SMTP_HOST")
    smtp_port: int = Field(default=587, validation_alias="SMTP_PORT")
    smtp_user: str = Field(default="", validation_alias="SMTP_USER")
    smtp_password: str = Field(default="", validation_alias="SMTP_PASSWORD")

    otp_ttl_minutes: int = Field(default=5, validation_alias="OTP_TTL_MINUTES")
    otp_purge_interval_minutes: int = Field(default=10, validation_alias="OTP_PURGE_INTERVAL_MINUTES")
    mail_breaker_max_failures: int = Field(default=3, validation_alias="MAIL_BREAKER_MAX_FAILURES")
    mail_breaker_reset_seconds: float = Field(default=300.0, validation_alias="MAIL_BREAKER_RESET_SECONDS")
    scheduler_enabled: bool = Field(
        default=True,
        validation_alias="SCHEDULER_ENABLED",
        description="Run the background OTP purge job",
    )

    seed_admin_email: str = Field(default="admin@demo.com", validation_alias="SEED_ADMIN_EMAIL")
    seed_admin_password: str = Field(default="admin123", validation_alias="SEED_ADMIN_PASSWORD")
    seed_head_email: str = Field(default="head@demo.com", validation_alias="SEED_HEAD_EMAIL")
    seed_head_password: str = Field(default="head1234", validation_alias="SEED_HEAD_PASSWORD")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("auth_secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        """Warn when the signing key is weak or still quoted from a .env paste."""
        if value.startswith(("'", '"')):
            logger.warning("AUTH_SECRET_KEY starts with a quote character. Remove the quotes from the environment value.")
        if len(value) < 10:
            logger.warning("AUTH_SECRET_KEY is shorter than 10 characters. Tokens are trivially forgeable.")
        return value

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)


settings = Settings()
