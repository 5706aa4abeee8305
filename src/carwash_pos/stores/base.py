"""Abstract collaborators the transaction engine drives.

Every method is a single awaited call with no cancellation, retry or
timeout. Writes are independent: there is no transaction spanning more than
one call.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from carwash_pos.calculators.types import (
    LoyaltyCustomer,
    ServiceCatalogEntry,
    StaffMember,
    TransactionRecord,
)


@runtime_checkable
class CatalogStore(Protocol):
    """Read-only snapshot of the service catalog."""

    async def list_services(self) -> list[ServiceCatalogEntry]:
        ...


@runtime_checkable
class StaffDirectory(Protocol):
    """Read-only snapshot of employees."""

    async def list_employees(self) -> list[StaffMember]:
        ...


@runtime_checkable
class LoyaltyDirectory(Protocol):
    """Registered customers and their points balance."""

    async def list_loyalty_customers(self) -> list[LoyaltyCustomer]:
        ...

    async def increment_points(self, customer_id: str, delta: Decimal) -> None:
        """Atomically add ``delta`` points."""
        ...


@runtime_checkable
class InventoryStore(Protocol):
    """Chemical stock levels."""

    async def decrement_stock(self, resource_id: str, amount: Decimal) -> None:
        """Atomically subtract ``amount`` from stock."""
        ...


@runtime_checkable
class TransactionStore(Protocol):
    """Transaction records; reads return full snapshots."""

    async def insert(self, record: TransactionRecord) -> str:
        ...

    async def update(self, record_id: str, patch: dict[str, Any]) -> None:
        """Last-write-wins update of the given fields."""
        ...

    async def get(self, record_id: str) -> TransactionRecord | None:
        ...

    async def list_all(self) -> list[TransactionRecord]:
        ...
