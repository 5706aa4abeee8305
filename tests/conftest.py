"""Pytest fixtures for car-wash POS tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carwash_pos.calculators.types import (
    ChemicalUsage,
    Identity,
    LoyaltyCar,
    LoyaltyCustomer,
    ServiceCatalogEntry,
    StaffMember,
    TransactionRecord,
)
from carwash_pos.exceptions import TransactionNotFoundError
from carwash_pos.models import Base, Chemical, Employee, Service
from carwash_pos.models import LoyaltyCustomer as LoyaltyCustomerRow
from carwash_pos.services.transaction_service import TransactionService

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


# =============================================================================
# Catalog, staff and loyalty data
# =============================================================================

BASIC_WASH = ServiceCatalogEntry(
    id="svc-basic",
    name="Basic Wash",
    prices={
        "motor": Decimal("100"),
        "small": Decimal("200"),
        "medium": Decimal("300"),
        "large": Decimal("400"),
        "xlarge": Decimal("500"),
    },
    chemicals={
        "chem-soap": ChemicalUsage(
            name="Car Soap",
            usage={"small": Decimal("0.5"), "medium": Decimal("1"), "large": Decimal("1.5")},
        ),
        "chem-foam": ChemicalUsage(name="Snow Foam", usage={"medium": Decimal("0")}),
    },
)

ARMOR_ALL = ServiceCatalogEntry(
    id="svc-armor",
    name="Armor All",
    prices={"small": Decimal("250"), "medium": Decimal("500"), "large": Decimal("600")},
    chemicals={
        "chem-armor": ChemicalUsage(name="Armor All", usage={"medium": Decimal("0.2")}),
    },
)

ENGINE_WASH = ServiceCatalogEntry(
    id="svc-engine",
    name="Engine Wash",
    prices={"motor": Decimal("0"), "medium": Decimal("350")},
)

CATALOG = [ARMOR_ALL, BASIC_WASH, ENGINE_WASH]

STAFF = [
    StaffMember(id="emp-1", first_name="Juan", last_name="Dela Cruz"),
    StaffMember(id="emp-2", first_name="Maria", last_name="Santos"),
    StaffMember(id="emp-3", first_name="Pedro", last_name="Reyes"),
]

LOYALTY_CUSTOMERS = [
    LoyaltyCustomer(
        id="cust-1",
        name="Ana Lim",
        cars=(
            LoyaltyCar(car_name="Vios", plate_number="ABC 123"),
            LoyaltyCar(car_name="Innova", plate_number="XYZ 789"),
        ),
        points=Decimal("1"),
    ),
]


@pytest.fixture
def catalog() -> list[ServiceCatalogEntry]:
    return list(CATALOG)


@pytest.fixture
def staff() -> list[StaffMember]:
    return list(STAFF)


@pytest.fixture
def identity() -> Identity:
    return Identity(username="cashier1", first_name="Carla", last_name="Cruz")


# =============================================================================
# In-memory stores
# =============================================================================


class InMemoryTransactionStore:
    """Transaction store backed by a dict; failures can be injected."""

    def __init__(self):
        self.records: dict[str, TransactionRecord] = {}
        self.fail_insert = False
        self.fail_update = False
        self.writes = 0

    async def insert(self, record: TransactionRecord) -> str:
        if self.fail_insert:
            raise ConnectionError("store unavailable")
        self.writes += 1
        record_id = f"txn-{len(self.records) + 1}"
        self.records[record_id] = replace(record, id=record_id)
        return record_id

    async def update(self, record_id: str, patch: dict[str, Any]) -> None:
        if self.fail_update:
            raise ConnectionError("store unavailable")
        if record_id not in self.records:
            raise TransactionNotFoundError(record_id)
        self.writes += 1
        doc = self.records[record_id].to_document()
        doc.update(patch)
        self.records[record_id] = TransactionRecord.from_document(record_id, doc)

    async def get(self, record_id: str) -> TransactionRecord | None:
        return self.records.get(record_id)

    async def list_all(self) -> list[TransactionRecord]:
        return sorted(self.records.values(), key=lambda r: r.created_at, reverse=True)


class InMemoryCatalog:
    def __init__(self, services: list[ServiceCatalogEntry]):
        self.services = services

    async def list_services(self) -> list[ServiceCatalogEntry]:
        return list(self.services)


class InMemoryStaff:
    def __init__(self, members: list[StaffMember]):
        self.members = members

    async def list_employees(self) -> list[StaffMember]:
        return list(self.members)


class InMemoryInventory:
    """Stock levels by chemical id; ids in ``failing`` raise on decrement."""

    def __init__(self):
        self.stock: dict[str, Decimal] = {
            "chem-soap": Decimal("10"),
            "chem-foam": Decimal("10"),
            "chem-armor": Decimal("5"),
        }
        self.failing: set[str] = set()
        self.calls: list[tuple[str, Decimal]] = []

    async def decrement_stock(self, resource_id: str, amount: Decimal) -> None:
        self.calls.append((resource_id, amount))
        if resource_id in self.failing:
            raise ConnectionError(f"cannot update {resource_id}")
        self.stock[resource_id] -= amount


class InMemoryLoyalty:
    def __init__(self, customers: list[LoyaltyCustomer]):
        self.customers = {c.id: c for c in customers}
        self.fail = False

    async def list_loyalty_customers(self) -> list[LoyaltyCustomer]:
        if self.fail:
            raise ConnectionError("loyalty directory unavailable")
        return list(self.customers.values())

    async def increment_points(self, customer_id: str, delta: Decimal) -> None:
        customer = self.customers[customer_id]
        self.customers[customer_id] = replace(customer, points=customer.points + delta)


@pytest.fixture
def transaction_store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def inventory() -> InMemoryInventory:
    return InMemoryInventory()


@pytest.fixture
def loyalty() -> InMemoryLoyalty:
    return InMemoryLoyalty(LOYALTY_CUSTOMERS)


@pytest.fixture
def service(transaction_store, inventory, loyalty) -> TransactionService:
    """Transaction service over in-memory stores with a fixed clock."""
    return TransactionService(
        transactions=transaction_store,
        catalog=InMemoryCatalog(CATALOG),
        staff=InMemoryStaff(STAFF),
        inventory=inventory,
        loyalty=loyalty,
        clock=lambda: FIXED_NOW,
        loyalty_points=Decimal("0.25"),
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """Session over a database holding the test catalog, staff and loyalty data."""
    for entry in CATALOG:
        session.add(
            Service(
                service_id=entry.id,
                name=entry.name,
                description=entry.description,
                prices={k: str(v) for k, v in entry.prices.items()},
                chemicals={
                    chem_id: {
                        "name": chem.name,
                        "usage": {k: str(v) for k, v in chem.usage.items()},
                    }
                    for chem_id, chem in entry.chemicals.items()
                },
            )
        )
    session.add_all(
        [
            Chemical(chemical_id="chem-soap", name="Car Soap", stock=Decimal("10")),
            Chemical(chemical_id="chem-foam", name="Snow Foam", stock=Decimal("10")),
            Chemical(chemical_id="chem-armor", name="Armor All", stock=Decimal("5")),
        ]
    )
    session.add_all(
        [
            Employee(employee_id=m.id, first_name=m.first_name, last_name=m.last_name)
            for m in STAFF
        ]
    )
    for customer in LOYALTY_CUSTOMERS:
        session.add(
            LoyaltyCustomerRow(
                loyalty_customer_id=customer.id,
                name=customer.name,
                cars=[
                    {"car_name": c.car_name, "plate_number": c.plate_number}
                    for c in customer.cars
                ],
                points=customer.points,
            )
        )
    await session.commit()
    return session
