# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from enrollkit.core.config.settings import (
    EnrollmentAPISettings,
    PaymentAccountSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestEnrollmentAPISettings:
    """Tests for EnrollmentAPISettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = EnrollmentAPISettings()

        assert settings.base_url == "http://127.0.0.1:8000/api/v1"
        assert settings.timeout == 30.0
        assert settings.enrollments_path == "/enrollments"
        assert settings.my_enrollments_path == "/my-enrollments"
        assert settings.courses_path == "/courses"

    def test_url_strips_trailing_slash(self) -> None:
        """Test URL property drops a trailing slash."""
        settings = EnrollmentAPISettings(base_url="https://lms.example.com/api/v1/")

        assert settings.url == "https://lms.example.com/api/v1"

    def test_loads_from_environment(self) -> None:
        """Test that settings load from environment variables."""
        env = {
            "ENROLLMENT_API_BASE_URL": "https://lms.example.com/api/v2",
            "ENROLLMENT_API_TIMEOUT": "5",
        }

        with patch.dict(os.environ, env, clear=False):
            settings = EnrollmentAPISettings()

        assert settings.base_url == "https://lms.example.com/api/v2"
        assert settings.timeout == 5.0


class TestPaymentAccountSettings:
    """Tests for PaymentAccountSettings."""

    def test_loads_from_environment(self) -> None:
        """Test receiving accounts can be overridden per deployment."""
        env = {
            "PAYMENT_ACCOUNT_TITLE": "Acme Academy",
            "PAYMENT_JAZZCASH_NUMBER": "0301-7654321",
            "PAYMENT_BANK_IBAN": "PK36MEZN0000010104567890",
        }

        with patch.dict(os.environ, env, clear=False):
            settings = PaymentAccountSettings()

        assert settings.account_title == "Acme Academy"
        assert settings.jazzcash_number == "0301-7654321"
        assert settings.bank_iban == "PK36MEZN0000010104567890"


class TestSettings:
    """Tests for the main Settings class."""

    def test_development_defaults(self) -> None:
        """Test development is the default environment."""
        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.is_development is True
        assert settings.is_production is False

    def test_production_requires_https(self) -> None:
        """Test production refuses a plain-HTTP API URL."""
        with pytest.raises(ValidationError, match="HTTPS"):
            Settings(
                _env_file=None,
                environment="production",
                enrollment_api=EnrollmentAPISettings(base_url="http://lms.example.com/api/v1"),
            )

    def test_production_accepts_https(self) -> None:
        """Test production accepts an HTTPS API URL."""
        settings = Settings(
            _env_file=None,
            environment="production",
            enrollment_api=EnrollmentAPISettings(base_url="https://lms.example.com/api/v1"),
        )

        assert settings.is_production is True


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_returns_cached_instance(self) -> None:
        """Test get_settings returns the same instance until cleared."""
        clear_settings_cache()
        first = get_settings()
        second = get_settings()

        assert first is second

        clear_settings_cache()
        assert get_settings() is not first
        clear_settings_cache()
