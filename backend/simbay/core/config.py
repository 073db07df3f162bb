# backend/simbay/core/config.py
import logging
import os
from decimal import Decimal
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME

load_dotenv()

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Deployment environment name",
    )
    is_testing: bool = False  # Set to True when running tests

    database_url: str = Field(
        default="sqlite:///./simbay.db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
        description="SQLAlchemy database URL",
    )
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")

    # Identity provider (GoTrue-compatible). Access tokens are HS256 JWTs whose
    # `sub` claim is the profile id.
    identity_jwt_secret: SecretStr = Field(
        default=SecretStr("dev-only-identity-secret-change-me"),
        alias="IDENTITY_JWT_SECRET",
    )
    identity_jwt_algorithm: str = Field(default="HS256", alias="IDENTITY_JWT_ALGORITHM")
    identity_jwt_audience: Optional[str] = Field(
        default="authenticated", alias="IDENTITY_JWT_AUDIENCE"
    )
    identity_provider: Literal["fake", "remote"] = Field(
        default="fake",
        alias="IDENTITY_PROVIDER",
        description="Use the in-memory identity admin client or the remote admin API",
    )
    identity_api_url: str = Field(default="http://localhost:9999", alias="IDENTITY_API_URL")
    identity_service_key: Optional[SecretStr] = Field(default=None, alias="IDENTITY_SERVICE_KEY")
    identity_timeout_seconds: float = Field(default=10.0, alias="IDENTITY_TIMEOUT_SECONDS")

    # Email settings
    email_provider: Literal["console", "resend"] = Field(
        default="console",
        alias="EMAIL_PROVIDER",
        description="Email provider name",
    )
    resend_api_key: str | None = Field(
        default=None,
        alias="RESEND_API_KEY",
        description="API key for Resend provider (optional)",
    )
    from_email: str = Field(default=f"{BRAND_NAME} <bookings@simbay.club>", alias="FROM_EMAIL")
    admin_notification_email: Optional[str] = Field(
        default=None,
        alias="ADMIN_NOTIFICATION_EMAIL",
        description="Recipient for membership inquiry notices",
    )

    # Facility rules
    default_guest_fee: Decimal = Field(default=Decimal("20.00"), alias="DEFAULT_GUEST_FEE")
    facility_timezone: str = Field(default="America/Denver", alias="FACILITY_TIMEZONE")

    slow_operation_threshold_seconds: float = Field(
        default=1.0, alias="SLOW_OPERATION_THRESHOLD_SECONDS"
    )

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], alias="CORS_ORIGINS"
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("default_guest_fee")
    @classmethod
    def _validate_guest_fee(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("DEFAULT_GUEST_FEE must be positive")
        return value

    def get_database_url(self) -> str:
        return self.database_url


settings = Settings()
logger.info(
    "[CONFIG] environment=%s email_provider=%s identity_provider=%s",
    settings.environment,
    settings.email_provider,
    settings.identity_provider,
)
