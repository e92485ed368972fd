"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from affiliate_ledger.config.business_constants import (
    DEFAULT_COMMISSION_RATE,
    REFERENCE_CURRENCY,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (Celery broker and sweep lock)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = "logs/affiliate_ledger.log"
    health_check_port: int = Field(
        default=8081, ge=1, le=65535, description="Health check HTTP server port"
    )

    # Commission ledger
    # NOTE: the admin settings screen historically defaulted to 80%, while
    # the ledger used 60%. Unresolved; the value is injected from here only.
    default_commission_rate: Decimal = Field(
        default=DEFAULT_COMMISSION_RATE,
        gt=0,
        le=1,
        description="Commission rate applied when an affiliate has no override",
    )
    reference_currency: str = Field(
        default=REFERENCE_CURRENCY,
        min_length=3,
        max_length=3,
        description="Currency all commission amounts are normalized into",
    )

    # Membership expiry notifications
    site_url: str = "https://digiafriq.com"
    email_events_url: str | None = None
    email_events_token: str | None = None
    notification_timeout_seconds: float = Field(default=15.0, gt=0)
    expiry_sweep_hour_utc: int = Field(
        default=8, ge=0, le=23, description="Hour (UTC) the daily expiry sweep is enqueued"
    )

    # Leaderboard
    leaderboard_page_size: int = Field(default=50, gt=0, le=500)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "DATABASE_URL must start with postgresql://, "
                "postgresql+asyncpg:// or sqlite+aiosqlite://"
            )
        if v.startswith("postgresql://"):
            # Engines are always async
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("reference_currency")
    @classmethod
    def validate_reference_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.upper()

    @field_validator("site_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Renewal links are built by appending a path."""
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )

            if self.database_url.startswith("sqlite"):
                raise ValueError(
                    "SQLite is only supported outside production. "
                    "Point DATABASE_URL at PostgreSQL."
                )

            if not self.email_events_url:
                logger.warning(
                    "EMAIL_EVENTS_URL is not set; membership expiry "
                    "notifications will fail and be retried on every sweep."
                )

        return self


# Global settings instance
settings = Settings()
