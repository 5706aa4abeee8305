"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_pos.calculators.types import Identity
from carwash_pos.database import init_db
from carwash_pos.services.transaction_service import TransactionService
from carwash_pos.stores.sql import (
    SqlCatalogStore,
    SqlInventoryStore,
    SqlLoyaltyDirectory,
    SqlStaffDirectory,
    SqlTransactionStore,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_identity(
    x_cashier_username: Annotated[str | None, Header()] = None,
    x_cashier_first_name: Annotated[str | None, Header()] = None,
    x_cashier_last_name: Annotated[str | None, Header()] = None,
) -> Identity:
    """Extract the signed-in cashier from headers."""
    if not x_cashier_username or not x_cashier_username.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Cashier-Username header is required",
        )
    return Identity(
        username=x_cashier_username.strip(),
        first_name=x_cashier_first_name or None,
        last_name=x_cashier_last_name or None,
    )


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CashierIdentity = Annotated[Identity, Depends(get_identity)]


def get_transaction_service(db: DbSession) -> TransactionService:
    """Transaction service bound to the request's session."""
    return TransactionService(
        transactions=SqlTransactionStore(db),
        catalog=SqlCatalogStore(db),
        staff=SqlStaffDirectory(db),
        inventory=SqlInventoryStore(db),
        loyalty=SqlLoyaltyDirectory(db),
    )


Transactions = Annotated[TransactionService, Depends(get_transaction_service)]
