# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the enrollment request lifecycle including:
- Enrollment status probing and submit gating
- Payment method selection and proof-of-payment staging
- Submission and duplicate-conflict resolution
"""

from enrollkit.domains.enrollment.conflict import (
    DUPLICATE_SIGNATURES,
    ConflictResolver,
    ResolverState,
)
from enrollkit.domains.enrollment.draft import EnrollmentDraft
from enrollkit.domains.enrollment.exceptions import (
    CourseNotLoadedError,
    DraftLockedError,
    EnrollmentError,
    FileTooLarge,
    IncompleteContactDetailsError,
    IncompleteFieldsError,
    IncompletePaymentDetailsError,
    InvalidFileType,
    InvalidTransitionError,
    NotAuthenticatedError,
    ProbeError,
    ProofMissingError,
    ProofValidationError,
    SubmissionBlockedError,
    SubmissionInProgressError,
    UserInputError,
)
from enrollkit.domains.enrollment.form import EnrollmentForm
from enrollkit.domains.enrollment.payment_methods import (
    PaymentMethodProfile,
    PaymentMethodSelector,
)
from enrollkit.domains.enrollment.proof import MAX_PROOF_BYTES, ProofOfPaymentCollector
from enrollkit.domains.enrollment.state_view import (
    EnrollmentStateView,
    GateState,
    StatusPanel,
)
from enrollkit.domains.enrollment.status_probe import EnrollmentStatusProbe
from enrollkit.domains.enrollment.submitter import EnrollmentSubmitter

__all__ = [
    "DUPLICATE_SIGNATURES",
    "MAX_PROOF_BYTES",
    "ConflictResolver",
    "CourseNotLoadedError",
    "DraftLockedError",
    "EnrollmentDraft",
    "EnrollmentError",
    "EnrollmentForm",
    "EnrollmentStateView",
    "EnrollmentStatusProbe",
    "EnrollmentSubmitter",
    "FileTooLarge",
    "GateState",
    "IncompleteContactDetailsError",
    "IncompleteFieldsError",
    "IncompletePaymentDetailsError",
    "InvalidFileType",
    "InvalidTransitionError",
    "NotAuthenticatedError",
    "PaymentMethodProfile",
    "PaymentMethodSelector",
    "ProbeError",
    "ProofMissingError",
    "ProofOfPaymentCollector",
    "ProofValidationError",
    "ResolverState",
    "StatusPanel",
    "SubmissionBlockedError",
    "SubmissionInProgressError",
    "UserInputError",
]
