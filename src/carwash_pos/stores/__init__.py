"""Store interfaces and their SQLAlchemy implementations."""

from carwash_pos.stores.base import (
    CatalogStore,
    InventoryStore,
    LoyaltyDirectory,
    StaffDirectory,
    TransactionStore,
)
from carwash_pos.stores.sql import (
    SqlCatalogStore,
    SqlInventoryStore,
    SqlLoyaltyDirectory,
    SqlStaffDirectory,
    SqlTransactionStore,
)

__all__ = [
    "CatalogStore",
    "InventoryStore",
    "LoyaltyDirectory",
    "StaffDirectory",
    "TransactionStore",
    "SqlCatalogStore",
    "SqlInventoryStore",
    "SqlLoyaltyDirectory",
    "SqlStaffDirectory",
    "SqlTransactionStore",
]
