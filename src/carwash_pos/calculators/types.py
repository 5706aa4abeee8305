"""Type definitions for the pricing and reconciliation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

ZERO = Decimal("0")


def to_money(value: Any) -> Decimal:
    """Coerce a numeric input (int, str, float, Decimal) to Decimal."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Variety(str, Enum):
    """Vehicle size tiers used as keys into service price tables."""

    MOTOR = "motor"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"

    @property
    def label(self) -> str:
        return "X-Large" if self is Variety.XLARGE else self.value.capitalize()


class PaymentMethod(str, Enum):
    """Accepted payment methods."""

    CASH = "cash"
    GCASH = "gcash"
    CARD = "card"
    MAYA = "maya"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.CASH: "Cash",
            PaymentMethod.GCASH: "GCash",
            PaymentMethod.CARD: "Card",
            PaymentMethod.MAYA: "Maya",
        }[self]


@dataclass(frozen=True)
class ChemicalUsage:
    """Quantity of one chemical consumed by a service, per variety."""

    name: str
    usage: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceCatalogEntry:
    """A catalog service with its per-variety price table.

    A variety missing from ``prices`` means the service is not offered at
    that tier; it is never treated as a zero price entry.
    """

    id: str
    name: str
    prices: dict[str, Decimal] = field(default_factory=dict)
    description: str = ""
    chemicals: dict[str, ChemicalUsage] = field(default_factory=dict)

    def price_for(self, variety: Variety | str) -> Decimal | None:
        return self.prices.get(Variety(variety).value)


@dataclass(frozen=True)
class ManualLineItem:
    """Ad-hoc charge not present in the catalog."""

    name: str
    price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "price": self.price}


@dataclass(frozen=True)
class StaffMember:
    """Employee as listed by the staff directory."""

    id: str
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class EmployeeAssignment:
    """Employee credited on a transaction.

    ``name`` is snapshotted when the employee is assigned. ``percent`` is the
    source of truth; ``commission`` is always derived from it and the
    current total.
    """

    id: str
    name: str
    percent: Decimal = ZERO
    commission: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "commission": self.commission}


@dataclass(frozen=True)
class ReferrerAssignment(EmployeeAssignment):
    """The (at most one) referrer credited on a transaction."""


@dataclass(frozen=True)
class LoyaltyCar:
    car_name: str
    plate_number: str


@dataclass(frozen=True)
class LoyaltyCustomer:
    """Registered customer eligible for loyalty points."""

    id: str
    name: str
    cars: tuple[LoyaltyCar, ...] = ()
    points: Decimal = ZERO


@dataclass(frozen=True)
class Identity:
    """Cashier identity supplied by the authentication context."""

    username: str
    first_name: str | None = None
    last_name: str | None = None

    @property
    def full_name(self) -> str | None:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None


@dataclass(frozen=True)
class Draft:
    """In-progress cashier selections for one visit.

    Drafts are never mutated; every edit goes through a transition function
    in ``carwash_pos.services.draft`` that returns a new draft with ``price``
    and all commissions already recomputed.
    """

    customer_name: str = ""
    car_name: str = ""
    plate_number: str = ""
    variety: Variety = Variety.MOTOR
    service_ids: tuple[str, ...] = ()
    manual_items: tuple[ManualLineItem, ...] = ()
    price: Decimal = ZERO
    employees: tuple[EmployeeAssignment, ...] = ()
    referrer: ReferrerAssignment | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH

    @classmethod
    def blank(cls) -> Draft:
        return cls()


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of reconciling the tendered amount against the total.

    Either paid (method, tendered and change all set) or unpaid (none set).
    """

    paid: bool
    payment_method: PaymentMethod | None = None
    amount_tendered: Decimal | None = None
    change: Decimal | None = None


@dataclass(frozen=True)
class TransactionRecord:
    """Persistence-ready transaction.

    Only ``RecordAssembler.assemble`` builds new records; stores read them
    back through ``from_document``.
    """

    customer_name: str
    car_name: str
    plate_number: str
    variety: Variety
    service_ids: tuple[str, ...]
    service_names: tuple[str, ...]
    price: Decimal
    cashier: str
    employees: tuple[EmployeeAssignment, ...]
    created_at: datetime
    paid: bool
    manual_services: tuple[ManualLineItem, ...] = ()
    cashier_full_name: str | None = None
    referrer: ReferrerAssignment | None = None
    payment_method: PaymentMethod | None = None
    amount_tendered: Decimal | None = None
    change: Decimal | None = None
    voided: bool = False
    id: str | None = None

    @property
    def service_name(self) -> str:
        return ", ".join(self.service_names)

    def to_document(self) -> dict[str, Any]:
        """Return the stored field set.

        Empty manual services, a missing referrer and unpaid payment fields
        are left out entirely rather than written as empty/null values.
        """
        doc: dict[str, Any] = {
            "customer_name": self.customer_name,
            "car_name": self.car_name,
            "plate_number": self.plate_number,
            "variety": self.variety.value,
            "service_ids": list(self.service_ids),
            "service_names": list(self.service_names),
            "service_name": self.service_name,
            "price": self.price,
            "cashier": self.cashier,
            "employees": [e.to_dict() for e in self.employees],
            "created_at": self.created_at,
            "paid": self.paid,
        }
        if self.cashier_full_name:
            doc["cashier_full_name"] = self.cashier_full_name
        if self.manual_services:
            doc["manual_services"] = [m.to_dict() for m in self.manual_services]
        if self.referrer is not None:
            doc["referrer"] = self.referrer.to_dict()
        if self.paid:
            doc["payment_method"] = self.payment_method.value
            doc["amount_tendered"] = self.amount_tendered
            doc["change"] = self.change
        if self.voided:
            doc["voided"] = True
        return doc

    @classmethod
    def from_document(cls, record_id: str | None, doc: dict[str, Any]) -> TransactionRecord:
        """Rebuild a record from its stored field set."""
        referrer = doc.get("referrer")
        method = doc.get("payment_method")
        tendered = doc.get("amount_tendered")
        change = doc.get("change")
        return cls(
            id=record_id,
            customer_name=doc["customer_name"],
            car_name=doc["car_name"],
            plate_number=doc["plate_number"],
            variety=Variety(doc["variety"]),
            service_ids=tuple(doc.get("service_ids") or ()),
            service_names=tuple(doc.get("service_names") or ()),
            price=to_money(doc["price"]),
            cashier=doc["cashier"],
            cashier_full_name=doc.get("cashier_full_name"),
            employees=tuple(
                EmployeeAssignment(
                    id=e["id"], name=e["name"], commission=to_money(e["commission"])
                )
                for e in doc.get("employees") or ()
            ),
            referrer=(
                ReferrerAssignment(
                    id=referrer["id"],
                    name=referrer["name"],
                    commission=to_money(referrer["commission"]),
                )
                if referrer
                else None
            ),
            manual_services=tuple(
                ManualLineItem(name=m["name"], price=to_money(m["price"]))
                for m in doc.get("manual_services") or ()
            ),
            created_at=doc["created_at"],
            paid=bool(doc.get("paid")),
            payment_method=PaymentMethod(method) if method else None,
            amount_tendered=to_money(tendered) if tendered is not None else None,
            change=to_money(change) if change is not None else None,
            voided=bool(doc.get("voided")),
        )


@dataclass(frozen=True)
class PatchSet:
    """Field updates that complete payment of an unpaid record."""

    payment_method: PaymentMethod
    amount_tendered: Decimal
    change: Decimal
    created_at: datetime
    paid: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "paid": self.paid,
            "payment_method": self.payment_method.value,
            "amount_tendered": self.amount_tendered,
            "change": self.change,
            "created_at": self.created_at,
        }

    def apply(self, record: TransactionRecord) -> TransactionRecord:
        """Return ``record`` with this patch applied."""
        return replace(
            record,
            paid=self.paid,
            payment_method=self.payment_method,
            amount_tendered=self.amount_tendered,
            change=self.change,
            created_at=self.created_at,
        )
