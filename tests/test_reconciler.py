"""Tests for payment reconciliation."""

from decimal import Decimal

import pytest

from carwash_pos.calculators.reconciler import PaymentReconciler, reconcile
from carwash_pos.calculators.types import PaymentMethod
from carwash_pos.exceptions import ValidationError


class TestReconcile:
    def test_exact_tender(self):
        result = reconcile(Decimal("950"), Decimal("950"), method=PaymentMethod.GCASH)
        assert result.paid is True
        assert result.payment_method == PaymentMethod.GCASH
        assert result.amount_tendered == Decimal("950")
        assert result.change == Decimal("0")

    def test_change_computed(self):
        result = reconcile(Decimal("950"), Decimal("1000"))
        assert result.change == Decimal("50")
        assert result.payment_method == PaymentMethod.CASH

    def test_pay_later_has_no_payment_fields(self):
        result = reconcile(Decimal("950"), Decimal("1000"), pay_later=True)
        assert result.paid is False
        assert result.payment_method is None
        assert result.amount_tendered is None
        assert result.change is None

    def test_underpayment_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            reconcile(Decimal("950"), Decimal("900"))
        assert exc_info.value.field == "amount_tendered"

    def test_missing_tender_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            reconcile(Decimal("950"), None)
        assert exc_info.value.field == "amount_tendered"

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            reconcile(Decimal("100"), Decimal("100"), method="bitcoin")
        assert exc_info.value.field == "payment_method"

    def test_method_string_accepted(self):
        result = reconcile(Decimal("100"), Decimal("100"), method="maya")
        assert result.payment_method == PaymentMethod.MAYA


class TestCanConfirm:
    def test_pay_later_always_allowed(self):
        assert PaymentReconciler.can_confirm(Decimal("950"), None, pay_later=True) is True

    def test_requires_enough_tender(self):
        assert PaymentReconciler.can_confirm(Decimal("950"), Decimal("949")) is False
        assert PaymentReconciler.can_confirm(Decimal("950"), Decimal("950")) is True
        assert PaymentReconciler.can_confirm(Decimal("950"), None) is False


class TestDisplayChange:
    def test_never_negative(self):
        assert PaymentReconciler.display_change(Decimal("950"), Decimal("500")) == Decimal("0")

    def test_no_tender(self):
        assert PaymentReconciler.display_change(Decimal("950"), None) == Decimal("0")

    def test_positive_change(self):
        assert PaymentReconciler.display_change(Decimal("950"), Decimal("1000")) == Decimal("50")
