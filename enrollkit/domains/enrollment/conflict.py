# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission outcome classification and duplicate-conflict resync.

The remote API has no machine-readable conflict code. A uniqueness
violation on (user, course) surfaces only as free text, so failures are
matched against DUPLICATE_SIGNATURES. A match never asserts a status by
itself: it only triggers one resync query, and the record the authority
returns decides what the view shows.

State machine::

    idle --begin--> submitting
    failed --begin--> submitting                  (retry)
    submitting --success--> succeeded             (terminal)
    submitting --failure, signature--> duplicate_detected
    submitting --failure, no signature--> failed
    duplicate_detected --resync finds record--> idle
    duplicate_detected --resync fails / empty--> failed
"""

import logging
from collections.abc import Callable, Iterable
from enum import Enum

from enrollkit.domains.enrollment.exceptions import (
    InvalidTransitionError,
    ProbeError,
    SubmissionInProgressError,
)
from enrollkit.domains.enrollment.state_view import EnrollmentStateView
from enrollkit.domains.enrollment.status_probe import EnrollmentStatusProbe
from enrollkit.models.enrollment import EnrollmentRecord, Resolution, SubmissionResult

logger = logging.getLogger(__name__)

# Substrings a (user, course) uniqueness violation may surface as.
# Swap for a typed check once the API returns a conflict code.
DUPLICATE_SIGNATURES: tuple[str, ...] = ("already enrolled", "Duplicate entry", "1062")

UNCONFIRMED_CONFLICT_MESSAGE = (
    "We could not submit your enrollment right now. Please try again."
)

DuplicateClassifier = Callable[[SubmissionResult], bool]


class ResolverState(str, Enum):
    """States of one form's submission lifecycle."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    DUPLICATE_DETECTED = "duplicate_detected"
    FAILED = "failed"


def matches_duplicate_signature(
    text: str,
    signatures: Iterable[str] = DUPLICATE_SIGNATURES,
) -> bool:
    """Case-insensitive substring match against the duplicate signatures."""
    haystack = text.lower()
    return any(sig.lower() in haystack for sig in signatures)


def classify_by_signature(result: SubmissionResult) -> bool:
    """Default classifier: does a failed result look like a duplicate?"""
    if result.kind != "failure":
        return False
    return matches_duplicate_signature(f"{result.message}\n{result.error_text}")


class ConflictResolver:
    """Drives the submission state machine of one enrollment form.

    Attributes:
        state: Current resolver state.
        resync_count: Resync queries issued over the resolver's lifetime.
    """

    def __init__(
        self,
        probe: EnrollmentStatusProbe,
        view: EnrollmentStateView,
        classifier: DuplicateClassifier | None = None,
    ) -> None:
        self._probe = probe
        self._view = view
        self._classify = classifier or classify_by_signature
        self.state = ResolverState.IDLE
        self.resync_count = 0

    @property
    def busy(self) -> bool:
        """True while a submit or its resync is in flight."""
        return self.state in (ResolverState.SUBMITTING, ResolverState.DUPLICATE_DETECTED)

    @property
    def can_begin(self) -> bool:
        return self.state in (ResolverState.IDLE, ResolverState.FAILED)

    def begin(self) -> None:
        """Enter ``submitting``.

        Raises:
            SubmissionInProgressError: If a submission is in flight.
            InvalidTransitionError: If the form already succeeded.
        """
        if self.busy:
            raise SubmissionInProgressError()
        if not self.can_begin:
            raise InvalidTransitionError(
                f"Cannot submit from state {self.state.value}",
                details={"state": self.state.value},
            )
        self.state = ResolverState.SUBMITTING

    def succeed(self, record: EnrollmentRecord | None) -> Resolution:
        """Settle a remote success: terminal ``succeeded``."""
        self._require(ResolverState.SUBMITTING)
        self.state = ResolverState.SUCCEEDED
        self._view.mark_submitted(record)
        return Resolution(
            kind="succeeded",
            record=record,
            message="Enrollment submitted successfully! Please wait for admin approval.",
        )

    def abort(self) -> None:
        """Leave ``submitting`` for ``failed`` when dispatch itself crashed."""
        if self.state == ResolverState.SUBMITTING:
            self.state = ResolverState.FAILED

    async def fail(
        self,
        result: SubmissionResult,
        user_id: str,
        course_id: str,
    ) -> Resolution:
        """Settle a remote failure, resyncing if it looks like a duplicate.

        The resync is awaited here, after the failed response has been
        received, and is issued at most once per failure.

        Args:
            result: The failed submission result.
            user_id: Submitting user.
            course_id: Target course.

        Returns:
            ``resynced`` with the authoritative record, or ``failed``.
        """
        self._require(ResolverState.SUBMITTING)

        if not self._classify(result):
            self.state = ResolverState.FAILED
            logger.info(
                "Enrollment submission failed: status=%s, message=%s",
                result.status_code,
                result.message,
            )
            return Resolution(kind="failed", message=result.message)

        self.state = ResolverState.DUPLICATE_DETECTED
        logger.info(
            "Submission failure looks like a duplicate enrollment, resyncing: course=%s",
            course_id,
        )
        return await self._resync(user_id, course_id)

    async def _resync(self, user_id: str, course_id: str) -> Resolution:
        self.resync_count += 1
        try:
            record = await self._probe.find(user_id, course_id)
        except ProbeError as e:
            logger.warning("Resync after duplicate signal failed: %s", e.message)
            record = None

        if record is None:
            self.state = ResolverState.FAILED
            logger.warning("Duplicate signal not substantiated: course=%s", course_id)
            return Resolution(kind="failed", message=UNCONFIRMED_CONFLICT_MESSAGE)

        self._view.apply_record(record)
        self.state = ResolverState.IDLE
        return Resolution(kind="resynced", record=record, message=self._view.panel.message)

    def _require(self, expected: ResolverState) -> None:
        if self.state != expected:
            raise InvalidTransitionError(
                f"Expected state {expected.value}, got {self.state.value}",
                details={"state": self.state.value},
            )
