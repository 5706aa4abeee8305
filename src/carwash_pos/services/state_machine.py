"""Transaction status state machine with transition validation."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from carwash_pos.calculators.types import TransactionRecord


class TransactionStatus(str, Enum):
    """Transaction status values."""

    UNPAID = "unpaid"
    PAID = "paid"
    VOIDED = "voided"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class TransactionStateMachine:
    """State machine for transaction status transitions.

    Allowed transitions:
    - unpaid → paid (pay now)
    - unpaid → voided
    - paid → voided

    Voiding is performed by an administrative action outside this package;
    voided records are terminal and read-only.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        TransactionStatus.UNPAID: [TransactionStatus.PAID, TransactionStatus.VOIDED],
        TransactionStatus.PAID: [TransactionStatus.VOIDED],
        TransactionStatus.VOIDED: [],  # Terminal state
    }

    READ_ONLY = {
        TransactionStatus.PAID,
        TransactionStatus.VOIDED,
    }

    @staticmethod
    def status_of(record: TransactionRecord) -> TransactionStatus:
        if record.voided:
            return TransactionStatus.VOIDED
        if record.paid:
            return TransactionStatus.PAID
        return TransactionStatus.UNPAID

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def is_read_only(cls, record: TransactionRecord) -> bool:
        """Paid and voided records are shown as details only, never edited."""
        return cls.status_of(record) in cls.READ_ONLY
