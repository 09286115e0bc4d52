# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment status presentation and submit gating.

Four gate states are rendered:
- NONE: no record yet, submit enabled
- PENDING: awaiting review, submit disabled
- APPROVED: already active, submit disabled
- REJECTED: blocked by policy until an administrator clears the record
"""

from dataclasses import dataclass
from enum import Enum

from enrollkit.models.enrollment import EnrollmentRecord, EnrollmentStatus


class GateState(str, Enum):
    """What the view knows about the user's record for this course."""

    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def from_record(cls, record: EnrollmentRecord | None) -> "GateState":
        if record is None:
            return cls.NONE
        return cls(record.status.value)


@dataclass(frozen=True)
class StatusPanel:
    """Rendered view of a gate state.

    Attributes:
        state: The gate state rendered.
        submit_enabled: Whether the status allows submitting.
        headline: Short title.
        message: Explanation shown to the student.
        policy_block: True when submission is refused by policy, as
            opposed to a transient condition.
    """

    state: GateState
    submit_enabled: bool
    headline: str
    message: str
    policy_block: bool = False


_PANELS = {
    GateState.NONE: StatusPanel(
        state=GateState.NONE,
        submit_enabled=True,
        headline="Enroll in Your Course",
        message="Complete your enrollment in just a few simple steps.",
    ),
    GateState.PENDING: StatusPanel(
        state=GateState.PENDING,
        submit_enabled=False,
        headline="Enrollment awaiting review",
        message=(
            "Your enrollment request has been received and is awaiting admin "
            "review. You will get access once it is approved."
        ),
    ),
    GateState.APPROVED: StatusPanel(
        state=GateState.APPROVED,
        submit_enabled=False,
        headline="Already enrolled",
        message="Your enrollment in this course is already active.",
    ),
    GateState.REJECTED: StatusPanel(
        state=GateState.REJECTED,
        submit_enabled=False,
        headline="Enrollment rejected",
        message=(
            "Your enrollment request for this course was rejected. This is a "
            "policy decision, not a temporary error: a new request cannot be "
            "submitted until an administrator clears the existing one. "
            "Please contact the administrator."
        ),
        policy_block=True,
    ),
}


def render(state: GateState) -> StatusPanel:
    """Render a gate state. Pure."""
    return _PANELS[state]


class EnrollmentStateView:
    """Holds the current gate state of one enrollment form.

    Only the status probe and the conflict resolver move the state, and
    only from an authoritative record (or a confirmed submission).
    """

    def __init__(self) -> None:
        self.state = GateState.NONE
        self.record: EnrollmentRecord | None = None

    @property
    def panel(self) -> StatusPanel:
        return render(self.state)

    @property
    def submit_enabled(self) -> bool:
        return self.panel.submit_enabled

    def apply_record(self, record: EnrollmentRecord | None) -> GateState:
        """Update the gate from an authoritative lookup result."""
        self.record = record
        self.state = GateState.from_record(record)
        return self.state

    def mark_submitted(self, record: EnrollmentRecord | None = None) -> GateState:
        """Gate on a submission the remote side just accepted."""
        if record is not None and record.status != EnrollmentStatus.PENDING:
            return self.apply_record(record)
        self.record = record
        self.state = GateState.PENDING
        return self.state
