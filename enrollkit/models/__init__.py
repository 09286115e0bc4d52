# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models shared across enrollkit."""

from enrollkit.models.enrollment import (
    CourseSummary,
    Destination,
    EnrollmentRecord,
    EnrollmentStatus,
    Identity,
    PaymentMethod,
    ProofArtifact,
    Resolution,
    SubmissionResult,
    SubmitOutcome,
)

__all__ = [
    "CourseSummary",
    "Destination",
    "EnrollmentRecord",
    "EnrollmentStatus",
    "Identity",
    "PaymentMethod",
    "ProofArtifact",
    "Resolution",
    "SubmissionResult",
    "SubmitOutcome",
]
