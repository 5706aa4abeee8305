"""Commission amounts derived from stored percentages."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar

from carwash_pos.calculators.types import EmployeeAssignment, ReferrerAssignment, to_money

A = TypeVar("A", bound=EmployeeAssignment)


class CommissionCalculator:
    """Applies commission percentages to a transaction total.

    Rounding:
    - Whole currency units, ROUND_HALF_UP (ties away from zero)
    - Percent range is not checked here; the draft layer clamps to [0, 100]
    """

    OUTPUT_PRECISION = Decimal("1")

    @staticmethod
    def round_to_units(amount: Decimal) -> Decimal:
        """Round amount to whole currency units."""
        return amount.quantize(CommissionCalculator.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def apply_percent(percent: Decimal, total: Decimal) -> Decimal:
        return CommissionCalculator.round_to_units(
            to_money(percent) / Decimal(100) * to_money(total)
        )

    @staticmethod
    def recompute(assignment: A, total: Decimal) -> A:
        return replace(
            assignment,
            commission=CommissionCalculator.apply_percent(assignment.percent, total),
        )

    @staticmethod
    def recompute_commissions(
        employees: Sequence[EmployeeAssignment],
        referrer: ReferrerAssignment | None,
        total: Decimal,
    ) -> tuple[tuple[EmployeeAssignment, ...], ReferrerAssignment | None]:
        """Refresh every commission against ``total``.

        Called after any change to the total so no stale amount survives.
        """
        refreshed = tuple(CommissionCalculator.recompute(e, total) for e in employees)
        if referrer is not None:
            referrer = CommissionCalculator.recompute(referrer, total)
        return refreshed, referrer

    @staticmethod
    def percent_from_commission(commission: Decimal, total: Decimal) -> Decimal:
        """Back-derive a whole percent from a stored commission.

        Used when reopening an unpaid record, where only amounts are stored.
        """
        if not commission or not total:
            return Decimal("0")
        return CommissionCalculator.round_to_units(
            to_money(commission) / to_money(total) * Decimal(100)
        )


apply_percent = CommissionCalculator.apply_percent
recompute_commissions = CommissionCalculator.recompute_commissions
