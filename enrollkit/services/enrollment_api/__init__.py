# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API client package.

Usage:
    from enrollkit.services.enrollment_api import EnrollmentAPIClient

    client = EnrollmentAPIClient(api_url="...", token="...")
    records = await client.list_my_enrollments()
"""

from enrollkit.services.enrollment_api.client import EnrollmentAPIClient
from enrollkit.services.enrollment_api.exceptions import (
    CourseNotFoundError,
    EnrollmentAPIError,
    EnrollmentTransportError,
)

__all__ = [
    "EnrollmentAPIClient",
    "EnrollmentAPIError",
    "EnrollmentTransportError",
    "CourseNotFoundError",
]
