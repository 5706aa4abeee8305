"""API routes."""

from carwash_pos.api.routes.catalog import router as catalog_router
from carwash_pos.api.routes.health import router as health_router
from carwash_pos.api.routes.transactions import router as transactions_router

__all__ = ["catalog_router", "health_router", "transactions_router"]
