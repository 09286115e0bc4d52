# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Payment method profiles and selection.

Each payment channel has a static profile: the fields the student must
fill in and the instructions telling them where to send the fee. The
mapping is pure; selecting a method only touches the draft it is given.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from enrollkit.core.config.settings import PaymentAccountSettings, get_settings
from enrollkit.models.enrollment import PaymentMethod

if TYPE_CHECKING:
    from enrollkit.domains.enrollment.draft import EnrollmentDraft

logger = logging.getLogger(__name__)

METHOD_FIELDS: dict[PaymentMethod, tuple[str, ...]] = {
    PaymentMethod.JAZZCASH: ("jazzcash_number", "jazzcash_account_name"),
    PaymentMethod.EASYPAISA: ("easypaisa_number", "easypaisa_account_name"),
    PaymentMethod.CARD: ("card_holder_name", "card_number", "card_expiry", "card_cvv"),
    PaymentMethod.BANK: ("bank_name", "bank_account_number", "bank_account_holder_name"),
}

ALL_METHOD_FIELDS = frozenset(f for fields in METHOD_FIELDS.values() for f in fields)

UPLOAD_HINT = (
    "Send the course fee to the {channel} number above, then upload the "
    "payment screenshot below to submit your enrollment request to admin."
)


@dataclass(frozen=True)
class PaymentMethodProfile:
    """Static description of one payment channel.

    Attributes:
        method: The channel.
        label: Display name.
        required_fields: Draft fields the channel requires.
        instructions: Text shown while the channel is selected.
        receiving_identifier: Account/number the fee is sent to, if any.
    """

    method: PaymentMethod
    label: str
    required_fields: tuple[str, ...]
    instructions: str
    receiving_identifier: str | None = None


def _wallet_instructions(label: str, title: str, number: str) -> str:
    return "\n".join(
        [
            f"Pay via {label}",
            f"Account Title: {title}",
            f"{label} Number: {number}",
            UPLOAD_HINT.format(channel=label),
        ]
    )


def build_profiles(accounts: PaymentAccountSettings) -> dict[PaymentMethod, PaymentMethodProfile]:
    """Build the profile of every channel from the receiving accounts.

    Args:
        accounts: Receiving account settings.

    Returns:
        Mapping of method to profile.
    """
    bank_lines = [
        "Pay via Bank Transfer",
        f"Bank: {accounts.bank_name}",
        f"Account Title: {accounts.account_title}",
        f"Account Number: {accounts.bank_account_number}",
    ]
    if accounts.bank_iban:
        bank_lines.append(f"IBAN: {accounts.bank_iban}")
    bank_lines.append(
        "Transfer the course fee to the account above, then upload the "
        "transfer receipt below to submit your enrollment request to admin."
    )

    return {
        PaymentMethod.JAZZCASH: PaymentMethodProfile(
            method=PaymentMethod.JAZZCASH,
            label="JazzCash",
            required_fields=METHOD_FIELDS[PaymentMethod.JAZZCASH],
            instructions=_wallet_instructions(
                "JazzCash", accounts.account_title, accounts.jazzcash_number
            ),
            receiving_identifier=accounts.jazzcash_number,
        ),
        PaymentMethod.EASYPAISA: PaymentMethodProfile(
            method=PaymentMethod.EASYPAISA,
            label="EasyPaisa",
            required_fields=METHOD_FIELDS[PaymentMethod.EASYPAISA],
            instructions=_wallet_instructions(
                "EasyPaisa", accounts.account_title, accounts.easypaisa_number
            ),
            receiving_identifier=accounts.easypaisa_number,
        ),
        PaymentMethod.CARD: PaymentMethodProfile(
            method=PaymentMethod.CARD,
            label="Card",
            required_fields=METHOD_FIELDS[PaymentMethod.CARD],
            instructions=(
                "Pay by Card\n"
                "Card payments are completed outside this site. Enter the card "
                "details used, then upload the payment confirmation below."
            ),
        ),
        PaymentMethod.BANK: PaymentMethodProfile(
            method=PaymentMethod.BANK,
            label="Bank Transfer",
            required_fields=METHOD_FIELDS[PaymentMethod.BANK],
            instructions="\n".join(bank_lines),
            receiving_identifier=accounts.bank_iban or accounts.bank_account_number,
        ),
    }


def parse_method(value: object) -> PaymentMethod | None:
    """Map a raw method value to a PaymentMethod, or None if unrecognized."""
    if isinstance(value, PaymentMethod):
        return value
    if isinstance(value, str):
        try:
            return PaymentMethod(value.strip().lower())
        except ValueError:
            return None
    return None


class PaymentMethodSelector:
    """Maps a payment channel to its required fields and instructions.

    Example:
        selector = PaymentMethodSelector()
        profile = selector.profile("jazzcash")
        print(profile.instructions)
    """

    def __init__(self, accounts: PaymentAccountSettings | None = None) -> None:
        self._profiles = build_profiles(accounts or get_settings().payment_accounts)

    @property
    def methods(self) -> list[PaymentMethod]:
        """Channels offered to the student, in display order."""
        return list(self._profiles)

    def profile(self, method: PaymentMethod | str | None) -> PaymentMethodProfile | None:
        """Get the profile of a channel.

        Args:
            method: Channel, raw channel name, or None.

        Returns:
            The profile, or None for an absent or unrecognized channel.
        """
        parsed = parse_method(method)
        if parsed is None:
            return None
        return self._profiles.get(parsed)

    def instructions(self, method: PaymentMethod | str | None) -> str | None:
        """Instructions for a channel; None when nothing is selected."""
        profile = self.profile(method)
        return profile.instructions if profile else None

    def required_fields(self, method: PaymentMethod | str | None) -> tuple[str, ...]:
        """Fields a channel requires; empty when nothing is selected."""
        profile = self.profile(method)
        return profile.required_fields if profile else ()

    def select(self, draft: "EnrollmentDraft", method: PaymentMethod | str | None) -> PaymentMethodProfile | None:
        """Make a channel the draft's active channel.

        Validation errors belonging to other channels are cleared. Their
        field values stay on the draft but are never submitted.

        Args:
            draft: Draft being edited.
            method: Channel to activate.

        Returns:
            Profile of the new channel, or None if it is unrecognized.
        """
        parsed = parse_method(method)
        profile = self._profiles.get(parsed) if parsed else None
        if profile is None and method is not None:
            logger.debug("Unrecognized payment method selected: %r", method)

        draft.payment_method = profile.method if profile else None
        keep = set(profile.required_fields) if profile else set()
        draft.clear_errors(lambda name: name in ALL_METHOD_FIELDS and name not in keep)
        return profile
