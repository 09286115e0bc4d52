# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment submission.

This module provides the EnrollmentSubmitter class for:
- Checking the preconditions of a submission
- Assembling the multipart "create enrollment" request
- Dispatching it and handing the outcome to the ConflictResolver
"""

import logging
from collections.abc import Callable

from enrollkit.domains.enrollment.conflict import ConflictResolver
from enrollkit.domains.enrollment.draft import CONTACT_FIELDS, EnrollmentDraft
from enrollkit.domains.enrollment.exceptions import (
    CourseNotLoadedError,
    IncompleteContactDetailsError,
    IncompletePaymentDetailsError,
    NotAuthenticatedError,
    ProofMissingError,
    SubmissionBlockedError,
)
from enrollkit.domains.enrollment.state_view import EnrollmentStateView
from enrollkit.models.enrollment import (
    CourseSummary,
    Destination,
    EnrollmentStatus,
    Identity,
    ProofArtifact,
    Resolution,
    SubmissionResult,
)
from enrollkit.services.enrollment_api.client import EnrollmentAPIClient
from enrollkit.services.enrollment_api.exceptions import EnrollmentAPIError

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "This field is required."

Navigator = Callable[[Destination], None]


def build_fields(
    identity: Identity,
    course: CourseSummary,
    draft: EnrollmentDraft,
) -> dict[str, str]:
    """Flatten a draft into multipart form fields.

    The amount always comes from the course price. ``payment_details``
    carries only the active channel's fields plus a ``method`` tag, in
    bracket notation.

    Args:
        identity: Submitting user.
        course: Target course.
        draft: Validated draft.

    Returns:
        Multipart form fields.
    """
    fields = {
        "course_id": str(course.id),
        "user_id": str(identity.id),
        **draft.contact(),
        "payment_method": draft.payment_method.value,
        "amount": str(course.price),
        "status": EnrollmentStatus.PENDING.value,
        "payment_details[method]": draft.payment_method.value,
    }
    for name, value in draft.payment_details().items():
        fields[f"payment_details[{name}]"] = value
    return fields


class EnrollmentSubmitter:
    """Checks, assembles and dispatches enrollment requests.

    Attributes:
        client: Enrollment API client.
        resolver: Resolver that settles each attempt.
    """

    def __init__(
        self,
        client: EnrollmentAPIClient,
        resolver: ConflictResolver,
        view: EnrollmentStateView | None = None,
        navigate: Navigator | None = None,
    ) -> None:
        self.client = client
        self.resolver = resolver
        self.view = view
        self._navigate = navigate

    def check_gate(self) -> None:
        """Refuse dispatch while the known status forbids a new request.

        Raises:
            SubmissionBlockedError: If the view disables submission.
        """
        if self.view is None or self.view.submit_enabled:
            return
        panel = self.view.panel
        raise SubmissionBlockedError(
            panel.message,
            details={"state": panel.state.value, "policy_block": panel.policy_block},
        )

    def check_preconditions(
        self,
        identity: Identity | None,
        course: CourseSummary | None,
        draft: EnrollmentDraft,
        proof: ProofArtifact | None,
    ) -> None:
        """Validate a submission before anything is dispatched.

        Field errors are written onto the draft.

        Raises:
            NotAuthenticatedError: No identity.
            CourseNotLoadedError: No course.
            ProofMissingError: No staged proof.
            IncompleteContactDetailsError: A contact field is empty.
            IncompletePaymentDetailsError: No channel, or a channel field is empty.
        """
        if identity is None:
            raise NotAuthenticatedError()
        if course is None:
            raise CourseNotLoadedError()
        if proof is None:
            raise ProofMissingError()

        contact = draft.contact()
        missing = {name: REQUIRED_MESSAGE for name in CONTACT_FIELDS if not contact[name]}
        if missing:
            draft.errors.update(missing)
            raise IncompleteContactDetailsError(
                "Please fill in your personal information.", missing
            )

        if draft.payment_method is None:
            draft.errors["payment_method"] = "Please choose a payment method."
            raise IncompletePaymentDetailsError(
                "Please choose a payment method.",
                {"payment_method": "Please choose a payment method."},
            )

        missing = {
            name: REQUIRED_MESSAGE
            for name, value in draft.payment_details().items()
            if not value
        }
        if missing:
            draft.errors.update(missing)
            raise IncompletePaymentDetailsError(
                "Please complete your payment details.", missing
            )

    async def dispatch(self, fields: dict[str, str], proof: ProofArtifact) -> SubmissionResult:
        """Send one "create enrollment" request.

        API and transport errors are folded into a failure result.
        """
        try:
            record = await self.client.create_enrollment(fields, proof)
        except EnrollmentAPIError as e:
            return SubmissionResult(
                kind="failure",
                message=e.message,
                error_text=e.error_text,
                status_code=e.status_code,
            )
        return SubmissionResult(kind="success", record=record)

    async def submit(
        self,
        identity: Identity | None,
        course: CourseSummary | None,
        draft: EnrollmentDraft,
        proof: ProofArtifact | None,
    ) -> Resolution:
        """Check, dispatch and settle one enrollment attempt.

        Args:
            identity: Submitting user, if logged in.
            course: Target course, if loaded.
            draft: The form's draft.
            proof: The staged proof artifact.

        Returns:
            The resolver's settlement of the attempt.

        Raises:
            SubmissionBlockedError: If the known status forbids submitting.
            UserInputError: If a precondition fails. Nothing is dispatched.
            SubmissionInProgressError: If an attempt is already in flight.
            InvalidTransitionError: If the form already succeeded.
        """
        self.check_gate()
        self.check_preconditions(identity, course, draft, proof)
        fields = build_fields(identity, course, draft)

        self.resolver.begin()
        logger.info(
            "Submitting enrollment: course=%s, method=%s",
            course.id,
            draft.payment_method.value,
        )
        try:
            result = await self.dispatch(fields, proof)
        except BaseException:
            self.resolver.abort()
            raise

        if result.kind == "success":
            resolution = self.resolver.succeed(result.record)
            draft.lock()
            if self._navigate is not None:
                self._navigate(Destination.COURSES)
            return resolution

        return await self.resolver.fail(result, str(identity.id), str(course.id))
