# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for enrollkit.

Example:
    >>> from enrollkit.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from enrollkit.core.config.settings import (
    EnrollmentAPISettings,
    PaymentAccountSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "EnrollmentAPISettings",
    "PaymentAccountSettings",
]
