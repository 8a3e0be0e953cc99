"""
Validation Engine Configuration
Environment-driven settings for the submission validation engine.
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
Verified: 2025-12-18
"""

from datetime import date
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from claims_validation.utils.dates import parse_submission_period


class ValidationSettings(BaseSettings):
    """
    Validation engine configuration settings.

    All settings can be overridden with VALIDATION_-prefixed environment
    variables or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="VALIDATION_",
    )

    # =========================================================================
    # Application Settings
    # =========================================================================
    ENVIRONMENT: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Deployment environment"
    )
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FILE: Optional[str] = Field(default=None, description="Optional log file path")
    JSON_LOGS: bool = Field(default=False, description="Serialize logs as JSON")

    # =========================================================================
    # Collaborator Services
    # =========================================================================
    CLAIMS_DATA_BASE_URL: str = Field(
        default="http://localhost:8081/api/v0",
        description="Claims Data service base URL",
    )
    PROVIDER_DETAILS_BASE_URL: str = Field(
        default="http://localhost:8082/api/v2",
        description="Provider Details service base URL",
    )
    FEE_SCHEME_BASE_URL: str = Field(
        default="http://localhost:8083/api/v0",
        description="Fee Scheme service base URL",
    )
    API_ACCESS_TOKEN: Optional[str] = Field(
        default=None, description="Bearer token sent to collaborator services"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, description="Per-request timeout for collaborator calls"
    )
    SUBMISSION_PAGE_SIZE: int = Field(
        default=100, ge=1, description="Page size for submission and claim searches"
    )

    # =========================================================================
    # Provider Schedule Cache
    # =========================================================================
    PROVIDER_DETAILS_RETRY_ATTEMPTS: int = Field(
        default=3, ge=1, description="Total attempts for a provider schedule lookup"
    )
    PROVIDER_DETAILS_RETRY_DELAY_SECONDS: float = Field(
        default=0.5, ge=0, description="Delay before the first retry"
    )
    PROVIDER_DETAILS_RETRY_BACKOFF: float = Field(
        default=2.0, ge=1.0, description="Backoff multiplier between retries"
    )
    PROVIDER_SCHEDULE_CACHE_TTL_SECONDS: int = Field(
        default=3600, ge=1, description="Lifetime of positive and negative cache entries"
    )
    PROVIDER_SCHEDULE_CACHE_MAX_ENTRIES: int = Field(
        default=10000,
        ge=1,
        description="Most positive and most negative entries kept before LRU eviction",
    )

    # =========================================================================
    # Submission Rules
    # =========================================================================
    MINIMUM_SUBMISSION_PERIOD: Optional[str] = Field(
        default=None,
        description="Earliest accepted submission period (MMM-yyyy); unset disables the check",
    )

    @field_validator("MINIMUM_SUBMISSION_PERIOD")
    @classmethod
    def validate_minimum_period(cls, v: Optional[str]) -> Optional[str]:
        """Reject minimum periods that are not MMM-yyyy."""
        if v is None or not v.strip():
            return None
        parse_submission_period(v)
        return v.strip().upper()

    @property
    def minimum_submission_period(self) -> Optional[date]:
        """First day of the configured minimum period, if any."""
        if self.MINIMUM_SUBMISSION_PERIOD is None:
            return None
        return parse_submission_period(self.MINIMUM_SUBMISSION_PERIOD)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"


# Singleton instance
_validation_settings: Optional[ValidationSettings] = None


def get_validation_settings() -> ValidationSettings:
    """
    Get cached validation settings instance.

    Returns:
        ValidationSettings instance
    """
    global _validation_settings
    if _validation_settings is None:
        _validation_settings = ValidationSettings()
    return _validation_settings


def reset_validation_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _validation_settings
    _validation_settings = None
