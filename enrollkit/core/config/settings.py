# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for enrollkit.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from enrollkit.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.enrollment_api.base_url)
    'http://127.0.0.1:8000/api/v1'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnrollmentAPISettings(BaseSettings):
    """Remote Enrollment API configuration.

    The same server hosts the course catalog, so course lookups share
    the base URL and timeout.

    Attributes:
        base_url: Base URL of the API, including the version prefix.
        timeout: Request timeout in seconds.
        enrollments_path: Path of the "create enrollment" command.
        my_enrollments_path: Path of the "list my enrollments" query.
        courses_path: Path prefix of the course catalog.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENROLLMENT_API_",
        extra="ignore",
    )

    base_url: str = "http://127.0.0.1:8000/api/v1"
    timeout: float = 30.0
    enrollments_path: str = "/enrollments"
    my_enrollments_path: str = "/my-enrollments"
    courses_path: str = "/courses"

    @property
    def url(self) -> str:
        """Base URL without a trailing slash."""
        return self.base_url.rstrip("/")


class PaymentAccountSettings(BaseSettings):
    """Receiving accounts shown in payment instructions.

    Payment happens off-platform; these values are displayed verbatim so
    the student knows where to send the course fee.

    Attributes:
        account_title: Account holder name shown for every channel.
        jazzcash_number: JazzCash wallet receiving the fee.
        easypaisa_number: EasyPaisa wallet receiving the fee.
        bank_name: Bank holding the receiving account.
        bank_account_number: Receiving bank account number.
        bank_iban: Receiving IBAN, if any.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYMENT_",
        extra="ignore",
    )

    account_title: str = "Bitcoder Labs"
    jazzcash_number: str = "0300-1234567"
    easypaisa_number: str = "0345-1234567"
    bank_name: str = "Meezan Bank"
    bank_account_number: str = "0101-0104567890"
    bank_iban: str | None = None


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        enrollment_api: Remote Enrollment API settings.
        payment_accounts: Receiving account settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    enrollment_api: EnrollmentAPISettings = Field(default_factory=EnrollmentAPISettings)
    payment_accounts: PaymentAccountSettings = Field(default_factory=PaymentAccountSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production against a plain-HTTP API.
        """
        if self.environment == "production":
            if not self.enrollment_api.base_url.startswith("https://"):
                raise ValueError(
                    "Enrollment API must be reached over HTTPS in production. "
                    "Set ENROLLMENT_API_BASE_URL to an https:// URL."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
