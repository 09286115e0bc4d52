# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment status probe.

Finds the current user's enrollment record for one course by listing all
of the user's records. Probing is advisory: the server stays
authoritative at submit time, so a failed probe never blocks the user.
"""

import logging

from enrollkit.domains.enrollment.exceptions import ProbeError
from enrollkit.domains.enrollment.state_view import EnrollmentStateView, GateState
from enrollkit.models.enrollment import EnrollmentRecord
from enrollkit.services.enrollment_api.client import EnrollmentAPIClient
from enrollkit.services.enrollment_api.exceptions import EnrollmentAPIError

logger = logging.getLogger(__name__)


def match_record(
    records: list[EnrollmentRecord],
    user_id: str,
    course_id: str,
) -> EnrollmentRecord | None:
    """Pick the record for a (user, course) pair.

    IDs are compared as strings. Records that do not report an owner are
    assumed to belong to the caller, since the list is already scoped to
    them. If several match, the most recently created one wins.
    """
    matches = [
        r
        for r in records
        if str(r.course_id) == str(course_id)
        and (r.user_id is None or str(r.user_id) == str(user_id))
    ]
    if not matches:
        return None
    dated = [r for r in matches if r.created_at is not None]
    if dated:
        return max(dated, key=lambda r: r.created_at)
    return matches[0]


class EnrollmentStatusProbe:
    """Looks up the authoritative enrollment record for a course.

    Attributes:
        client: Enrollment API client.
    """

    def __init__(self, client: EnrollmentAPIClient) -> None:
        self.client = client

    async def find(self, user_id: str, course_id: str) -> EnrollmentRecord | None:
        """Query the remote side for the user's record on a course.

        Args:
            user_id: Current user.
            course_id: Target course.

        Returns:
            The matching record, or None.

        Raises:
            ProbeError: If the lookup failed.
        """
        try:
            records = await self.client.list_my_enrollments()
        except EnrollmentAPIError as e:
            raise ProbeError(
                f"Enrollment status lookup failed: {e.message}",
                details={"status_code": e.status_code},
            ) from e

        record = match_record(records, user_id, course_id)
        logger.debug(
            "Probed enrollment: user=%s, course=%s, status=%s",
            user_id,
            course_id,
            record.status.value if record else None,
        )
        return record

    async def sync(
        self,
        view: EnrollmentStateView,
        user_id: str,
        course_id: str,
    ) -> GateState:
        """Refresh the view's gate from the remote side.

        On failure the view keeps its prior state.

        Returns:
            The view's gate state after the probe.
        """
        try:
            record = await self.find(user_id, course_id)
        except ProbeError as e:
            logger.warning(
                "Enrollment status probe failed, keeping %s: %s",
                view.state.value,
                e.message,
            )
            return view.state
        return view.apply_record(record)
