# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the Enrollment API client.

This module defines the exception hierarchy for remote calls:
- EnrollmentAPIError: Error response from the Enrollment API
- EnrollmentTransportError: The API could not be reached (connection, timeout)
- CourseNotFoundError: The course catalog has no such course
"""


class EnrollmentAPIError(Exception):
    """Error from the remote Enrollment API.

    Attributes:
        message: Human-readable error description, as sent by the server.
        status_code: HTTP status code from API response.
        response_body: Raw response body if available.
        details: Optional dictionary with additional error context.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        details: dict | None = None,
    ):
        """Initialize Enrollment API error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code from API response.
            response_body: Raw response body if available.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with status code."""
        base = f"{self.message}"
        if self.status_code:
            base = f"[{self.status_code}] {base}"
        if self.details:
            base = f"{base} - Details: {self.details}"
        return base

    @property
    def error_text(self) -> str:
        """All free text the server sent back, message first."""
        parts = [self.message]
        if self.response_body and self.response_body != self.message:
            parts.append(self.response_body)
        return "\n".join(parts)


class EnrollmentTransportError(EnrollmentAPIError):
    """The Enrollment API was unreachable or timed out.

    Carries no status code; the transport never produced a response.
    """

    pass


class CourseNotFoundError(EnrollmentAPIError):
    """Requested course does not exist in the catalog.

    Attributes:
        course_id: The ID of the course that was not found.
    """

    def __init__(
        self,
        message: str,
        course_id: str | None = None,
        status_code: int | None = 404,
        details: dict | None = None,
    ):
        self.course_id = course_id
        super().__init__(message, status_code=status_code, details=details)

    def __str__(self) -> str:
        """Return string representation with course ID."""
        base = self.message
        if self.course_id:
            base = f"{base} (course_id: {self.course_id})"
        return base
