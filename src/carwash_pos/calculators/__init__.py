"""Pricing, commission and payment reconciliation calculators."""

from carwash_pos.calculators.commission import CommissionCalculator, apply_percent
from carwash_pos.calculators.price_calculator import PriceCalculator, compute_total
from carwash_pos.calculators.reconciler import PaymentReconciler, reconcile

__all__ = [
    "CommissionCalculator",
    "PaymentReconciler",
    "PriceCalculator",
    "apply_percent",
    "compute_total",
    "reconcile",
]
