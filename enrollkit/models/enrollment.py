# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the enrollment domain.

This module defines Pydantic models and enums for:
- Identity and course data consumed from collaborators
- Enrollment records owned by the remote authority
- The staged proof-of-payment artifact
- Discriminated results of submission, conflict resolution and the form

These models are used throughout the enrollment flow for type-safe data
transfer between components.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class EnrollmentStatus(str, Enum):
    """Status of a server-owned enrollment record.

    Only the administrative collaborator moves a record out of PENDING.
    A REJECTED record is terminal from the client's viewpoint.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: Any) -> "EnrollmentStatus | None":
        """Map a remote status string to a known status.

        The remote side reports granted access as either "approved" or
        "active"; both map to APPROVED.

        Args:
            value: Raw status value from the API.

        Returns:
            Matching status, or None if the value is not recognized.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if normalized == "active":
            return cls.APPROVED
        try:
            return cls(normalized)
        except ValueError:
            return None


class PaymentMethod(str, Enum):
    """Off-platform payment channels a student can pay through."""

    JAZZCASH = "jazzcash"
    EASYPAISA = "easypaisa"
    CARD = "card"
    BANK = "bank"


class Destination(str, Enum):
    """Navigation targets emitted by the enrollment form."""

    LOGIN = "/login"
    COURSES = "/courses"


def _to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class Identity(BaseModel):
    """Authenticated user, as provided by the session collaborator.

    Attributes:
        id: User identifier.
        name: Display name.
        email: Email address, used to pre-fill the draft.
        phone: Phone number, used to pre-fill the draft.
        token: Bearer token attached to every remote call.
    """

    id: str
    name: str = ""
    email: str = ""
    phone: str | None = None
    token: SecretStr | None = Field(default=None, repr=False)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _to_str(value)


class CourseSummary(BaseModel):
    """Course data consumed from the catalog.

    ``price`` is the authoritative amount submitted with an enrollment.

    Attributes:
        id: Course identifier.
        title: Course title.
        price: Current (discounted) price.
        instructor: Instructor display name.
        original_price: Pre-discount price, if the catalog reports one.
    """

    id: str
    title: str = ""
    price: Decimal
    instructor: str = "Instructor"
    original_price: Decimal | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _to_str(value)

    @field_validator("instructor", mode="before")
    @classmethod
    def instructor_name(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("name") or "Instructor"
        if value is None or value == "":
            return "Instructor"
        return value

    @property
    def discount_percent(self) -> int | None:
        """Rounded discount against the original price, if any."""
        if not self.original_price or self.original_price <= self.price:
            return None
        ratio = (self.original_price - self.price) / self.original_price
        return int((ratio * 100).quantize(Decimal("1")))


class EnrollmentRecord(BaseModel):
    """Server-owned enrollment record (read-only to the client).

    Attributes:
        id: Record identifier.
        course_id: Course the record belongs to.
        user_id: Owner of the record, when the API reports it.
        status: Current review status.
        created_at: Creation timestamp, when reported.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    course_id: str
    user_id: str | None = None
    status: EnrollmentStatus
    created_at: datetime | None = None

    @field_validator("id", "course_id", "user_id", mode="before")
    @classmethod
    def coerce_ids(cls, value: Any) -> Any:
        return _to_str(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> Any:
        status = EnrollmentStatus.parse(value)
        if status is None:
            raise ValueError(f"Unknown enrollment status: {value!r}")
        return status


class ProofArtifact(BaseModel):
    """A staged image evidencing an off-platform payment.

    Attributes:
        content: Raw image bytes.
        media_type: Declared MIME type (always ``image/*`` once staged).
        filename: Original file name.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(repr=False)
    media_type: str
    filename: str = "payment-proof"

    @property
    def size(self) -> int:
        """Size of the artifact in bytes."""
        return len(self.content)


class SubmissionResult(BaseModel):
    """Outcome of one "create enrollment" dispatch.

    Attributes:
        kind: "success" if the remote side accepted the request.
        record: Created record, when the response carried one.
        error_text: Text the duplicate classifier inspects.
        message: Human-readable failure message (shown verbatim).
        status_code: HTTP status of a failed call, if any.
    """

    kind: Literal["success", "failure"]
    record: EnrollmentRecord | None = None
    error_text: str = ""
    message: str = ""
    status_code: int | None = None


class Resolution(BaseModel):
    """How the conflict resolver settled a submission attempt.

    Attributes:
        kind: succeeded, resynced (duplicate confirmed by the authority)
            or failed.
        record: Created or resynced record.
        message: Message to surface; for a resync this is never the raw
            remote text.
    """

    kind: Literal["succeeded", "resynced", "failed"]
    record: EnrollmentRecord | None = None
    message: str = ""


class SubmitOutcome(BaseModel):
    """Result of EnrollmentForm.submit().

    Attributes:
        kind: submitted, resynced, failed, invalid (local validation
            blocked dispatch) or blocked (view gating blocked dispatch).
        message: User-facing message.
        status: View status after the attempt.
        redirect: Navigation target fired by the attempt, if any.
        field_errors: Per-field validation errors for "invalid".
    """

    kind: Literal["submitted", "resynced", "failed", "invalid", "blocked"]
    message: str = ""
    status: EnrollmentStatus | None = None
    redirect: Destination | None = None
    field_errors: dict[str, str] = Field(default_factory=dict)
