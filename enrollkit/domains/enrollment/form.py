# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment form.

The EnrollmentForm owns every piece of state of one enrollment page:
the draft, the staged proof, the gate view and the submission lifecycle.
Nothing is shared between forms; each page visit builds its own.

Example:
    form = EnrollmentForm.from_settings(identity=identity, navigate=router.push)
    await form.load_course("42")
    form.select_payment_method("easypaisa")
    form.update_field("easypaisa_number", "03451234567")
    form.update_field("easypaisa_account_name", "Ayesha Khan")
    form.attach_proof(screenshot, "image/png", "receipt.png")
    outcome = await form.submit()
"""

import httpx

from enrollkit.domains.enrollment.conflict import (
    ConflictResolver,
    DuplicateClassifier,
    ResolverState,
)
from enrollkit.domains.enrollment.draft import EnrollmentDraft
from enrollkit.domains.enrollment.exceptions import (
    IncompleteFieldsError,
    NotAuthenticatedError,
    ProofValidationError,
    SubmissionBlockedError,
    SubmissionInProgressError,
    UserInputError,
)
from enrollkit.domains.enrollment.payment_methods import (
    PaymentMethodProfile,
    PaymentMethodSelector,
)
from enrollkit.domains.enrollment.proof import ProofOfPaymentCollector
from enrollkit.domains.enrollment.state_view import EnrollmentStateView, GateState
from enrollkit.domains.enrollment.status_probe import EnrollmentStatusProbe
from enrollkit.domains.enrollment.submitter import EnrollmentSubmitter, Navigator
from enrollkit.models.enrollment import (
    CourseSummary,
    Destination,
    EnrollmentStatus,
    Identity,
    PaymentMethod,
    ProofArtifact,
    SubmitOutcome,
)
from enrollkit.services.enrollment_api.client import EnrollmentAPIClient
from enrollkit.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)


def _status_of(state: GateState) -> EnrollmentStatus | None:
    if state == GateState.NONE:
        return None
    return EnrollmentStatus(state.value)


class EnrollmentForm:
    """One enrollment page: draft, proof, gate and submission lifecycle.

    Attributes:
        client: Enrollment API client.
        identity: Logged-in user, or None.
        course: Loaded course, or None.
        draft: The enrollment draft.
        selector: Payment method catalogue.
        collector: Proof-of-payment collector.
        view: Gate state view.
        probe: Status probe.
        resolver: Submission lifecycle.
        submitter: Request dispatcher.
        notice: Dismissible failure notice, or None.
        input_error: Inline error of the last refused file selection.
        last_redirect: Last navigation the form emitted.
    """

    def __init__(
        self,
        client: EnrollmentAPIClient,
        identity: Identity | None = None,
        course: CourseSummary | None = None,
        selector: PaymentMethodSelector | None = None,
        navigate: Navigator | None = None,
        classifier: DuplicateClassifier | None = None,
    ):
        self.client = client
        self.identity = identity
        self.course = course
        self.selector = selector or PaymentMethodSelector()
        self.collector = ProofOfPaymentCollector()
        self.view = EnrollmentStateView()
        self.probe = EnrollmentStatusProbe(client)
        self.resolver = ConflictResolver(self.probe, self.view, classifier)
        self.submitter = EnrollmentSubmitter(
            client, self.resolver, view=self.view, navigate=self._emit
        )
        self.draft = EnrollmentDraft.from_identity(identity, course.id if course else None)
        self.notice: str | None = None
        self.input_error: str | None = None
        self.last_redirect: Destination | None = None
        self._navigate = navigate
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        identity: Identity | None = None,
        course: CourseSummary | None = None,
        navigate: Navigator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "EnrollmentForm":
        """Build a form whose client authenticates as the given identity."""
        token = identity.token.get_secret_value() if identity and identity.token else None
        client = EnrollmentAPIClient.from_settings(token=token, transport=transport)
        return cls(client, identity=identity, course=course, navigate=navigate)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def payment_profile(self) -> PaymentMethodProfile | None:
        """Profile of the selected channel, with its instructions."""
        if self.draft.payment_method is None:
            return None
        return self.selector.profile(self.draft.payment_method)

    @property
    def proof(self) -> ProofArtifact | None:
        return self.collector.artifact

    @property
    def can_submit(self) -> bool:
        """Whether the submit control is enabled."""
        return (
            not self._closed
            and self.view.submit_enabled
            and self.collector.has_artifact
            and not self.resolver.busy
            and self.resolver.state != ResolverState.SUCCEEDED
        )

    async def load(
        self,
        identity: Identity | None = None,
        course: CourseSummary | None = None,
    ) -> GateState:
        """Take in identity and course, then probe the user's status.

        Call again whenever either becomes available or changes. The
        probe runs only once both are known.

        Returns:
            The gate state after the probe.
        """
        if identity is not None:
            self.identity = identity
            if not self.draft.locked:
                self.draft.prefill(identity)
        if course is not None:
            self.course = course
            self.draft.course_id = course.id

        if self.identity is None or self.course is None:
            return self.view.state
        return await self.probe.sync(self.view, self.identity.id, self.course.id)

    async def load_course(self, course_id: str) -> CourseSummary:
        """Fetch the course from the catalog and probe against it.

        Raises:
            CourseNotFoundError: If the catalog has no such course.
            EnrollmentAPIError: If the lookup failed.
        """
        course = await self.client.get_course(course_id)
        await self.load(course=course)
        return course

    def select_payment_method(self, method: PaymentMethod | str) -> PaymentMethodProfile | None:
        """Switch the active channel. Unknown values leave no channel selected."""
        self.selector.select(self.draft, method)
        return self.payment_profile

    def update_field(self, name: str, value: str) -> None:
        """Edit a contact or payment field of the draft.

        Raises:
            DraftLockedError: If the draft was submitted or the form closed.
            KeyError: If the field is unknown.
        """
        self.draft.set(name, value)

    def attach_proof(
        self,
        content: bytes,
        media_type: str | None,
        filename: str | None = None,
    ) -> ProofArtifact | None:
        """Stage a proof image, or record an inline error if it is refused.

        A refused file keeps any previously staged artifact.

        Returns:
            The staged artifact, or None if the file was refused.
        """
        try:
            artifact = self.collector.select(content, media_type, filename)
        except ProofValidationError as e:
            self.input_error = e.message
            logger.info("Payment proof refused", reason=e.message)
            return None
        self.input_error = None
        return artifact

    def remove_proof(self) -> None:
        self.collector.remove()
        self.input_error = None

    def dismiss_notice(self) -> None:
        self.notice = None

    async def submit(self) -> SubmitOutcome:
        """Submit the draft.

        A gated view refuses without any remote call. Local validation
        failures are reported as ``invalid`` with the field errors. On
        ``failed`` the draft and the staged proof are kept so the user can
        retry.

        Returns:
            The outcome of the attempt.
        """
        if self._closed:
            return self._outcome("blocked", "This enrollment form is closed.")

        if self.identity is not None:
            bind_context(user_id=self.identity.id)
        if self.course is not None:
            bind_context(course_id=self.course.id)
        try:
            return await self._submit()
        finally:
            clear_context()

    async def _submit(self) -> SubmitOutcome:
        try:
            resolution = await self.submitter.submit(
                self.identity,
                self.course,
                self.draft,
                self.collector.artifact,
            )
        except NotAuthenticatedError as e:
            self._emit(e.redirect)
            return self._outcome("invalid", e.message, redirect=e.redirect)
        except IncompleteFieldsError as e:
            return self._outcome("invalid", e.message, field_errors=dict(e.field_errors))
        except UserInputError as e:
            return self._outcome("invalid", e.message)
        except (SubmissionBlockedError, SubmissionInProgressError) as e:
            return self._outcome("blocked", e.message)

        logger.info(
            "Enrollment attempt settled",
            resolution=resolution.kind,
            status=self.view.state.value,
        )

        if resolution.kind == "succeeded":
            self.notice = None
            return self._outcome("submitted", resolution.message, redirect=Destination.COURSES)

        if resolution.kind == "resynced":
            self.notice = None
            return self._outcome("resynced", resolution.message)

        self.notice = resolution.message
        return self._outcome("failed", resolution.message)

    def close(self) -> None:
        """Tear the form down; staged proof and preview are released."""
        self.collector.remove()
        self.draft.lock()
        self._closed = True

    def _emit(self, destination: Destination) -> None:
        self.last_redirect = destination
        logger.info("Enrollment form navigating", destination=destination.value)
        if self._navigate is not None:
            self._navigate(destination)

    def _outcome(
        self,
        kind: str,
        message: str,
        redirect: Destination | None = None,
        field_errors: dict[str, str] | None = None,
    ) -> SubmitOutcome:
        return SubmitOutcome(
            kind=kind,
            message=message,
            status=_status_of(self.view.state),
            redirect=redirect,
            field_errors=field_errors or {},
        )
