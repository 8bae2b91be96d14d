# backend/trailblazers/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the booking backend, read from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", description="Deployment mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # Storage
    database_url: str = Field(
        default="sqlite:///./trailblazers.db",
        description="SQLAlchemy URL for the hikes/bookings/users/notifications store",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Celery broker and key-value store",
    )
    broadcast_url: str = Field(
        default="memory://",
        description="Broadcaster backend used for notification fan-out",
    )

    # Identity
    app_url: str = Field(default="http://localhost:5173", description="Public site URL")
    secret_key: SecretStr = Field(
        default=SecretStr("trailblazers-dev-secret-change-me"),
        description="JWT signing key",
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=480, ge=1)
    password_reset_expire_minutes: int = Field(default=60, ge=1)
    guide_invitation_ttl_hours: int = Field(default=24, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt cost factor")

    # Booking rules
    site_timezone: str = Field(default="America/Toronto", description="Local calendar")
    tax_rate: float = Field(default=0.13, ge=0, le=1)
    max_participants_per_booking: int = Field(default=10, ge=1)
    cancellation_notice_hours: int = Field(default=24, ge=0)

    is_testing: bool = False

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: Optional[str]) -> str:
        return (value or "development").strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment in {"prod", "production"}

    @property
    def guide_dashboard_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/guide-dashboard"


settings = Settings()
if is_running_tests():
    settings.is_testing = True
