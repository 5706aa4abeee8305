"""Transaction engine services."""

from carwash_pos.services.assembler import RecordAssembler
from carwash_pos.services.state_machine import (
    InvalidTransitionError,
    TransactionStateMachine,
    TransactionStatus,
)
from carwash_pos.services.transaction_service import ConfirmResult, DraftInput, TransactionService

__all__ = [
    "ConfirmResult",
    "DraftInput",
    "InvalidTransitionError",
    "RecordAssembler",
    "TransactionService",
    "TransactionStateMachine",
    "TransactionStatus",
]
