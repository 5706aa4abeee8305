"""ORM models."""

from carwash_pos.models.base import Base, TimestampMixin
from carwash_pos.models.catalog import Chemical, Service
from carwash_pos.models.payment import Payment
from carwash_pos.models.people import Employee, LoyaltyCustomer

__all__ = [
    "Base",
    "TimestampMixin",
    "Chemical",
    "Employee",
    "LoyaltyCustomer",
    "Payment",
    "Service",
]
