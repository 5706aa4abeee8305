"""Service catalog and chemical inventory models."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from carwash_pos.models.base import Base, JSONDocument, TimestampMixin, new_id


class Service(Base, TimestampMixin):
    """Catalog service with per-variety prices and chemical usage.

    ``prices`` maps variety key to a decimal string. ``chemicals`` maps
    chemical id to ``{"name": str, "usage": {variety: decimal string}}``.
    """

    __tablename__ = "service"

    service_id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    prices: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False, default=dict)
    chemicals: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument, nullable=False, default=dict
    )


class Chemical(Base, TimestampMixin):
    """Consumable stocked for services."""

    __tablename__ = "chemical"

    chemical_id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    stock: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=Decimal("0"))
