"""Error kinds raised by the transaction engine."""

from __future__ import annotations


class ValidationError(Exception):
    """Raised when a draft or payment cannot be confirmed.

    Always raised before any store write, so nothing is ever partially
    persisted.
    """

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        self.message = message or f"'{field}' is required"
        super().__init__(self.message)


class PersistenceError(Exception):
    """Raised when the transaction record write itself fails."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        msg = f"Failed to {operation}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class SideEffectError(Exception):
    """A post-commit task (stock decrement, loyalty accrual) failed.

    Never raised to callers of the transaction service; collected on the
    result for inspection.
    """

    def __init__(self, task_name: str, cause: Exception):
        self.task_name = task_name
        self.cause = cause
        super().__init__(f"Post-commit task '{task_name}' failed: {cause}")


class TransactionNotFoundError(Exception):
    """Raised when a transaction id does not exist in the store."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")
