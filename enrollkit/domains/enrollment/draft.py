# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""The enrollment draft: client-owned, mutable until dispatched."""

from collections.abc import Callable
from typing import Any

from enrollkit.domains.enrollment.exceptions import DraftLockedError
from enrollkit.domains.enrollment.payment_methods import ALL_METHOD_FIELDS, METHOD_FIELDS
from enrollkit.models.enrollment import Identity, PaymentMethod

CONTACT_FIELDS = ("first_name", "last_name", "email", "phone")

DEFAULT_PAYMENT_METHOD = PaymentMethod.JAZZCASH


class EnrollmentDraft:
    """A not-yet-submitted enrollment request.

    The draft holds contact fields and the field values of every payment
    channel the student has touched. Only the active channel's values are
    ever read for submission. The proof artifact is staged separately by
    the ProofOfPaymentCollector.

    Attributes:
        course_id: Target course.
        user_id: Requesting user.
        payment_method: Active channel, or None.
        errors: Per-field validation errors.
    """

    def __init__(
        self,
        course_id: str | None = None,
        user_id: str | None = None,
        first_name: str = "",
        last_name: str = "",
        email: str = "",
        phone: str = "",
        payment_method: PaymentMethod | None = DEFAULT_PAYMENT_METHOD,
    ):
        self.course_id = course_id
        self.user_id = user_id
        self.payment_method = payment_method
        self.errors: dict[str, str] = {}
        self._contact = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone": phone,
        }
        self._method_values: dict[str, str] = {}
        self._locked = False

    @classmethod
    def from_identity(cls, identity: Identity | None, course_id: str | None) -> "EnrollmentDraft":
        """Create a draft pre-filled from the logged-in user."""
        draft = cls(course_id=course_id)
        if identity is not None:
            draft.prefill(identity)
        return draft

    def prefill(self, identity: Identity) -> None:
        """Bind the draft to a user, filling contact fields still empty."""
        self.user_id = identity.id
        first, _, last = identity.name.strip().partition(" ")
        defaults = {
            "first_name": first,
            "last_name": last.strip(),
            "email": identity.email,
            "phone": identity.phone or "",
        }
        for name, value in defaults.items():
            if not self._contact[name]:
                self._contact[name] = value

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        """Freeze the draft after a terminal outcome."""
        self._locked = True

    def get(self, name: str) -> str:
        if name in self._contact:
            return self._contact[name]
        if name in ALL_METHOD_FIELDS:
            return self._method_values.get(name, "")
        raise KeyError(name)

    def set(self, name: str, value: Any) -> None:
        """Set a contact or payment field and clear its error.

        Raises:
            DraftLockedError: If the draft was already dispatched.
            KeyError: If the field is unknown.
        """
        if self._locked:
            raise DraftLockedError()
        text = "" if value is None else str(value)
        if name in self._contact:
            self._contact[name] = text
        elif name in ALL_METHOD_FIELDS:
            self._method_values[name] = text
        else:
            raise KeyError(name)
        self.errors.pop(name, None)

    def clear_errors(self, predicate: Callable[[str], bool] | None = None) -> None:
        """Drop validation errors, all of them or those matching predicate."""
        if predicate is None:
            self.errors.clear()
            return
        for name in [n for n in self.errors if predicate(n)]:
            del self.errors[name]

    def contact(self) -> dict[str, str]:
        return {name: self._contact[name].strip() for name in CONTACT_FIELDS}

    def payment_details(self) -> dict[str, str]:
        """Field values of the active channel only."""
        if self.payment_method is None:
            return {}
        return {
            name: self._method_values.get(name, "").strip()
            for name in METHOD_FIELDS[self.payment_method]
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "user_id": self.user_id,
            **self.contact(),
            "payment_method": self.payment_method.value if self.payment_method else None,
            "payment_details": self.payment_details(),
        }
