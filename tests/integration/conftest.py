"""Integration test fixtures with a real (sqlite) database."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_pos.api.app import create_app
from carwash_pos.api.dependencies import get_db_session
from carwash_pos.services.transaction_service import TransactionService
from carwash_pos.stores.sql import (
    SqlCatalogStore,
    SqlInventoryStore,
    SqlLoyaltyDirectory,
    SqlStaffDirectory,
    SqlTransactionStore,
)


@pytest.fixture
def cashier_headers() -> dict[str, str]:
    return {
        "X-Cashier-Username": "cashier1",
        "X-Cashier-First-Name": "Carla",
        "X-Cashier-Last-Name": "Cruz",
    }


@pytest_asyncio.fixture
async def sql_service(seeded_session: AsyncSession) -> TransactionService:
    """Transaction service over the SQL stores, sharing one session."""
    return TransactionService(
        transactions=SqlTransactionStore(seeded_session),
        catalog=SqlCatalogStore(seeded_session),
        staff=SqlStaffDirectory(seeded_session),
        inventory=SqlInventoryStore(seeded_session),
        loyalty=SqlLoyaltyDirectory(seeded_session),
    )


@pytest_asyncio.fixture
async def client(
    session_factory, seeded_session: AsyncSession
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
