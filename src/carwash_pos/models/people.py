"""Staff and loyalty customer models."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from carwash_pos.models.base import Base, JSONDocument, TimestampMixin, new_id


class Employee(Base, TimestampMixin):
    """Car-wash staff member who can earn commissions."""

    __tablename__ = "employee"

    employee_id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class LoyaltyCustomer(Base, TimestampMixin):
    """Registered customer; ``cars`` is a list of ``{car_name, plate_number}``."""

    __tablename__ = "loyalty_customer"

    loyalty_customer_id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    cars: Mapped[list[dict[str, Any]]] = mapped_column(JSONDocument, nullable=False, default=list)
    points: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=Decimal("0"))
