"""Reconciles tendered amounts against the transaction total."""

from __future__ import annotations

from decimal import Decimal

from carwash_pos.calculators.types import PaymentMethod, Reconciliation, to_money
from carwash_pos.exceptions import ValidationError


class PaymentReconciler:
    """Decides whether a payment can be confirmed and computes change.

    - pay later: unpaid, no method/tendered/change
    - otherwise: tendered must be present and >= total; change = tendered - total
    """

    @staticmethod
    def can_confirm(
        total: Decimal, tendered: Decimal | None, pay_later: bool = False
    ) -> bool:
        """Whether the confirm action should be enabled."""
        if pay_later:
            return True
        return tendered is not None and to_money(tendered) >= total

    @staticmethod
    def reconcile(
        total: Decimal,
        tendered: Decimal | None,
        pay_later: bool = False,
        method: PaymentMethod | str = PaymentMethod.CASH,
    ) -> Reconciliation:
        if pay_later:
            return Reconciliation(paid=False)

        if tendered is None:
            raise ValidationError("amount_tendered", "Amount tendered is required")

        tendered = to_money(tendered)
        if tendered < total:
            raise ValidationError(
                "amount_tendered",
                f"Amount tendered {tendered} is less than the total {total}",
            )

        try:
            method = PaymentMethod(method)
        except ValueError:
            raise ValidationError("payment_method", f"Unknown payment method '{method}'")

        return Reconciliation(
            paid=True,
            payment_method=method,
            amount_tendered=tendered,
            change=tendered - total,
        )

    @staticmethod
    def display_change(total: Decimal, tendered: Decimal | None) -> Decimal:
        """Change shown while the cashier is still typing; never negative."""
        if tendered is None:
            return Decimal("0")
        return max(to_money(tendered) - total, Decimal("0"))


reconcile = PaymentReconciler.reconcile
