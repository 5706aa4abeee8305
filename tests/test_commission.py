"""Tests for commission calculation and rounding."""

from decimal import Decimal

from carwash_pos.calculators.commission import (
    CommissionCalculator,
    apply_percent,
    recompute_commissions,
)
from carwash_pos.calculators.types import EmployeeAssignment, ReferrerAssignment


class TestApplyPercent:
    def test_whole_amount(self):
        assert apply_percent(Decimal("10"), Decimal("950")) == Decimal("95")

    def test_half_rounds_up(self):
        """142.5 rounds to 143."""
        assert apply_percent(Decimal("15"), Decimal("950")) == Decimal("143")

    def test_below_half_rounds_down(self):
        """33.3 rounds to 33."""
        assert apply_percent(Decimal("10"), Decimal("333")) == Decimal("33")

    def test_zero_percent(self):
        assert apply_percent(Decimal("0"), Decimal("950")) == Decimal("0")

    def test_zero_total(self):
        assert apply_percent(Decimal("50"), Decimal("0")) == Decimal("0")

    def test_accepts_plain_numbers(self):
        assert apply_percent(20, 250) == Decimal("50")


class TestRecomputeCommissions:
    def test_every_assignment_refreshed(self):
        employees = [
            EmployeeAssignment(id="emp-1", name="Juan", percent=Decimal("10"), commission=Decimal("1")),
            EmployeeAssignment(id="emp-2", name="Maria", percent=Decimal("5"), commission=Decimal("1")),
        ]
        referrer = ReferrerAssignment(id="emp-3", name="Pedro", percent=Decimal("2"))

        refreshed, ref = recompute_commissions(employees, referrer, Decimal("1000"))

        assert [e.commission for e in refreshed] == [Decimal("100"), Decimal("50")]
        assert ref.commission == Decimal("20")
        assert isinstance(ref, ReferrerAssignment)

    def test_no_referrer(self):
        refreshed, ref = recompute_commissions([], None, Decimal("500"))
        assert refreshed == ()
        assert ref is None

    def test_percent_and_identity_preserved(self):
        emp = EmployeeAssignment(id="emp-1", name="Juan", percent=Decimal("12"))
        (refreshed,), _ = recompute_commissions([emp], None, Decimal("100"))
        assert refreshed.id == "emp-1"
        assert refreshed.name == "Juan"
        assert refreshed.percent == Decimal("12")
        assert refreshed.commission == Decimal("12")


class TestPercentFromCommission:
    def test_back_derives_whole_percent(self):
        assert CommissionCalculator.percent_from_commission(
            Decimal("143"), Decimal("950")
        ) == Decimal("15")

    def test_zero_price(self):
        assert CommissionCalculator.percent_from_commission(
            Decimal("50"), Decimal("0")
        ) == Decimal("0")

    def test_zero_commission(self):
        assert CommissionCalculator.percent_from_commission(
            Decimal("0"), Decimal("950")
        ) == Decimal("0")
