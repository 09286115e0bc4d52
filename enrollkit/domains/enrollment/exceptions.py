# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the enrollment domain.

- UserInputError and subclasses: recovered locally, block dispatch.
- DraftLockedError: a dispatched draft was edited.
- ProofValidationError and subclasses: a file selection was refused.
- ProbeError: the status lookup failed.
- SubmissionBlockedError / SubmissionInProgressError: submit gating.
- InvalidTransitionError: resolver state machine misuse.
"""

from typing import Any

from enrollkit.models.enrollment import Destination


class EnrollmentError(Exception):
    """Base exception for enrollment domain errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UserInputError(EnrollmentError):
    """Local validation failure rendered inline next to the form."""

    pass


class NotAuthenticatedError(UserInputError):
    """No identity is available; the user must log in first."""

    redirect = Destination.LOGIN

    def __init__(self, message: str = "Please log in to complete enrollment."):
        super().__init__(message)


class CourseNotLoadedError(UserInputError):
    """Course details (and so the authoritative price) are not loaded."""

    def __init__(self, message: str = "Course details are still loading. Please try again."):
        super().__init__(message)


class ProofMissingError(UserInputError):
    """No proof-of-payment image is staged."""

    def __init__(self, message: str = "Please upload a screenshot of your payment."):
        super().__init__(message)


class IncompleteFieldsError(UserInputError):
    """Required draft fields are empty.

    Attributes:
        field_errors: Mapping of field name to error message.
    """

    def __init__(self, message: str, field_errors: dict[str, str]):
        self.field_errors = field_errors
        super().__init__(message, details={"fields": sorted(field_errors)})


class IncompleteContactDetailsError(IncompleteFieldsError):
    """A contact field (name, email, phone) is empty."""

    pass


class IncompletePaymentDetailsError(IncompleteFieldsError):
    """A field required by the selected payment method is empty."""

    pass


class DraftLockedError(EnrollmentError):
    """The draft was already dispatched or its form closed."""

    def __init__(self, message: str = "Draft can no longer be edited"):
        super().__init__(message)


class ProofValidationError(EnrollmentError):
    """A selected file cannot be staged as proof of payment."""

    pass


class InvalidFileType(ProofValidationError):
    """The selected file is not an image."""

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(
            "Please upload an image file.",
            details={"media_type": media_type},
        )


class FileTooLarge(ProofValidationError):
    """The selected file exceeds the size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            "File size must be less than 5MB.",
            details={"size": size, "limit": limit},
        )


class ProbeError(EnrollmentError):
    """The enrollment status lookup failed."""

    pass


class SubmissionBlockedError(EnrollmentError):
    """The current enrollment status forbids a new submission."""

    pass


class SubmissionInProgressError(EnrollmentError):
    """A submission is already in flight for this form."""

    def __init__(self, message: str = "Your enrollment is already being submitted."):
        super().__init__(message)


class InvalidTransitionError(EnrollmentError):
    """The conflict resolver was driven through an illegal transition."""

    pass
