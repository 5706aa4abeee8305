"""Client-side filtering and summary statistics over transaction history."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, tzinfo
from decimal import Decimal
from enum import Enum

from carwash_pos.calculators.types import ZERO, TransactionRecord
from carwash_pos.config import get_settings


class PaymentStatusFilter(str, Enum):
    """Status choices in the history filter; voided records follow their paid flag."""

    PAID = "paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class TransactionFilter:
    """All criteria are optional and combined with AND.

    - customer_query / plate_query: case-insensitive substring
    - date_from / date_to: inclusive whole local days on ``created_at``,
      in ``tz`` or the configured business timezone
    - customer / service_name: exact match (dropdown values)
    """

    customer_query: str = ""
    plate_query: str = ""
    status: PaymentStatusFilter | None = None
    date_from: date | None = None
    date_to: date | None = None
    customer: str | None = None
    service_name: str | None = None
    tz: tzinfo | None = None

    def matches(self, record: TransactionRecord) -> bool:
        if self.customer_query.lower() not in record.customer_name.lower():
            return False
        if self.plate_query.lower() not in (record.plate_number or "").lower():
            return False

        if self.status == PaymentStatusFilter.PAID and not record.paid:
            return False
        if self.status == PaymentStatusFilter.UNPAID and record.paid:
            return False

        day = record.created_at.astimezone(self.tz or get_settings().tzinfo).date()
        if self.date_from is not None and day < self.date_from:
            return False
        if self.date_to is not None and day > self.date_to:
            return False

        if self.customer and record.customer_name != self.customer:
            return False
        if self.service_name and record.service_name != self.service_name:
            return False
        return True


def filter_records(
    records: Iterable[TransactionRecord], criteria: TransactionFilter
) -> list[TransactionRecord]:
    return [r for r in records if criteria.matches(r)]


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def unique_customers(records: Iterable[TransactionRecord]) -> list[str]:
    return _unique(r.customer_name for r in records)


def unique_service_names(records: Iterable[TransactionRecord]) -> list[str]:
    return _unique(r.service_name for r in records)


@dataclass
class TransactionSummary:
    """Dashboard counters."""

    total_transactions: int = 0
    paid_count: int = 0
    unpaid_count: int = 0
    total_sales: Decimal = ZERO
    most_availed: list[tuple[str, int]] = field(default_factory=list)


def summarize(records: Iterable[TransactionRecord], top: int = 3) -> TransactionSummary:
    """Counters over every record, voided ones included.

    Sales sum the price of paid records. Most-availed ranks combined service
    names by count; ties keep first-seen order.
    """
    records = list(records)
    paid = [r for r in records if r.paid]
    counts = Counter(r.service_name for r in records if r.service_name)
    return TransactionSummary(
        total_transactions=len(records),
        paid_count=len(paid),
        unpaid_count=len(records) - len(paid),
        total_sales=sum((r.price for r in paid), ZERO),
        most_availed=counts.most_common(top),
    )
