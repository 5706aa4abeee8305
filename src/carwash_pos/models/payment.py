"""Transaction (payment) record model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from carwash_pos.models.base import Base, JSONDocument, new_id


class Payment(Base):
    """One car-wash visit.

    Nested collections (employees, referrer, manual services) are stored as
    JSON documents with amounts as decimal strings. ``manual_services`` and
    ``referrer`` are NULL when absent; ``employees`` is always a list.
    """

    __tablename__ = "payment"

    payment_id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    customer_name: Mapped[str] = mapped_column(String, nullable=False)
    car_name: Mapped[str] = mapped_column(String, nullable=False)
    plate_number: Mapped[str] = mapped_column(String, nullable=False)
    variety: Mapped[str] = mapped_column(String, nullable=False)
    service_ids: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    service_names: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    service_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    manual_services: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONDocument, nullable=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    cashier: Mapped[str] = mapped_column(String, nullable=False)
    cashier_full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    employees: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    referrer: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_method: Mapped[str | None] = mapped_column(String, nullable=True)
    amount_tendered: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    change: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    voided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint(
            "variety IN ('motor', 'small', 'medium', 'large', 'xlarge')",
            name="payment_variety_check",
        ),
        CheckConstraint(
            "payment_method IS NULL OR payment_method IN ('cash', 'gcash', 'card', 'maya')",
            name="payment_method_check",
        ),
        CheckConstraint(
            "(paid AND payment_method IS NOT NULL AND amount_tendered IS NOT NULL"
            " AND change IS NOT NULL AND amount_tendered >= price)"
            " OR (NOT paid AND payment_method IS NULL AND amount_tendered IS NULL"
            " AND change IS NULL)",
            name="payment_paid_fields_check",
        ),
    )
