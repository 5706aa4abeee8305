"""SQLAlchemy-backed stores.

Each write commits on its own, so a record insert stays committed even when a
later stock or loyalty write fails.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_pos.calculators.types import (
    ChemicalUsage,
    LoyaltyCar,
    LoyaltyCustomer as LoyaltyCustomerEntry,
    ServiceCatalogEntry,
    StaffMember,
    TransactionRecord,
    to_money,
)
from carwash_pos.exceptions import TransactionNotFoundError
from carwash_pos.models import Chemical, Employee, LoyaltyCustomer, Payment, Service
from carwash_pos.models.base import new_id


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is written in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _jsonable(value: Any) -> Any:
    """Decimal amounts nested in JSON columns are stored as strings."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class SqlStore:
    """Shared session handling for the SQL stores."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise


class SqlCatalogStore(SqlStore):
    """Catalog snapshot read from the ``service`` table."""

    async def list_services(self) -> list[ServiceCatalogEntry]:
        result = await self.session.execute(select(Service).order_by(Service.name))
        return [self._to_entry(row) for row in result.scalars().all()]

    @staticmethod
    def _to_entry(row: Service) -> ServiceCatalogEntry:
        return ServiceCatalogEntry(
            id=row.service_id,
            name=row.name,
            description=row.description or "",
            prices={variety: to_money(p) for variety, p in (row.prices or {}).items()},
            chemicals={
                chem_id: ChemicalUsage(
                    name=chem.get("name", ""),
                    usage={v: to_money(q) for v, q in (chem.get("usage") or {}).items()},
                )
                for chem_id, chem in (row.chemicals or {}).items()
            },
        )


class SqlStaffDirectory(SqlStore):
    async def list_employees(self) -> list[StaffMember]:
        result = await self.session.execute(
            select(Employee).order_by(Employee.last_name, Employee.first_name)
        )
        return [
            StaffMember(id=e.employee_id, first_name=e.first_name, last_name=e.last_name)
            for e in result.scalars().all()
        ]


class SqlLoyaltyDirectory(SqlStore):
    async def list_loyalty_customers(self) -> list[LoyaltyCustomerEntry]:
        result = await self.session.execute(select(LoyaltyCustomer))
        return [
            LoyaltyCustomerEntry(
                id=c.loyalty_customer_id,
                name=c.name,
                cars=tuple(
                    LoyaltyCar(car_name=car.get("car_name", ""), plate_number=car.get("plate_number", ""))
                    for car in c.cars or ()
                ),
                points=to_money(c.points),
            )
            for c in result.scalars().all()
        ]

    async def increment_points(self, customer_id: str, delta: Decimal) -> None:
        result = await self.session.execute(
            update(LoyaltyCustomer)
            .where(LoyaltyCustomer.loyalty_customer_id == customer_id)
            .values(points=LoyaltyCustomer.points + delta)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise LookupError(f"Loyalty customer {customer_id} not found")
        await self._commit()


class SqlInventoryStore(SqlStore):
    async def decrement_stock(self, resource_id: str, amount: Decimal) -> None:
        result = await self.session.execute(
            update(Chemical)
            .where(Chemical.chemical_id == resource_id)
            .values(stock=Chemical.stock - amount)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise LookupError(f"Chemical {resource_id} not found")
        await self._commit()


class SqlTransactionStore(SqlStore):
    """Transaction records in the ``payment`` table."""

    async def insert(self, record: TransactionRecord) -> str:
        doc = record.to_document()
        row = Payment(
            payment_id=new_id(),
            customer_name=doc["customer_name"],
            car_name=doc["car_name"],
            plate_number=doc["plate_number"],
            variety=doc["variety"],
            service_ids=doc["service_ids"],
            service_names=doc["service_names"],
            service_name=doc["service_name"],
            manual_services=_jsonable(doc["manual_services"]) if "manual_services" in doc else None,
            price=doc["price"],
            cashier=doc["cashier"],
            cashier_full_name=doc.get("cashier_full_name"),
            employees=_jsonable(doc["employees"]),
            referrer=_jsonable(doc["referrer"]) if "referrer" in doc else None,
            created_at=_as_utc(doc["created_at"]),
            paid=doc["paid"],
            payment_method=doc.get("payment_method"),
            amount_tendered=doc.get("amount_tendered"),
            change=doc.get("change"),
            voided=doc.get("voided", False),
        )
        self.session.add(row)
        await self._commit()
        return row.payment_id

    async def update(self, record_id: str, patch: dict[str, Any]) -> None:
        values = dict(patch)
        if isinstance(values.get("created_at"), datetime):
            values["created_at"] = _as_utc(values["created_at"])
        result = await self.session.execute(
            update(Payment).where(Payment.payment_id == record_id).values(**values)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise TransactionNotFoundError(record_id)
        await self._commit()

    async def get(self, record_id: str) -> TransactionRecord | None:
        row = await self.session.get(Payment, record_id, populate_existing=True)
        return self._to_record(row) if row is not None else None

    async def list_all(self) -> list[TransactionRecord]:
        result = await self.session.execute(
            select(Payment)
            .order_by(Payment.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_record(row) for row in result.scalars().all()]

    @staticmethod
    def _to_record(row: Payment) -> TransactionRecord:
        doc = row.to_dict()
        doc["created_at"] = _as_utc(row.created_at)
        for optional in ("manual_services", "referrer", "cashier_full_name"):
            if doc.get(optional) is None:
                doc.pop(optional, None)
        return TransactionRecord.from_document(row.payment_id, doc)
