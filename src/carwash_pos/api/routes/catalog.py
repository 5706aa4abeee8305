"""Catalog, staff and payment option endpoints."""

from fastapi import APIRouter, HTTPException, status

from carwash_pos.api.dependencies import DbSession
from carwash_pos.api.schemas import (
    EmployeeResponse,
    ErrorResponse,
    LoyaltyCustomerResponse,
    OptionResponse,
    PaymentOptionsResponse,
    ServiceResponse,
)
from carwash_pos.calculators.price_calculator import PriceCalculator
from carwash_pos.calculators.types import PaymentMethod, Variety
from carwash_pos.config import QUICK_TENDER_AMOUNTS
from carwash_pos.stores.sql import SqlCatalogStore, SqlLoyaltyDirectory, SqlStaffDirectory

router = APIRouter(tags=["catalog"])


@router.get(
    "/services",
    response_model=list[ServiceResponse],
    responses={422: {"model": ErrorResponse}},
)
async def list_services(
    db: DbSession,
    variety: str | None = None,
) -> list[ServiceResponse]:
    """List catalog services; with ``variety``, only those offered at it."""
    catalog = await SqlCatalogStore(db).list_services()
    if variety is not None:
        try:
            variety = Variety(variety)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown variety '{variety}'",
            )
        catalog = PriceCalculator.offered_services(catalog, variety)
    return [ServiceResponse.from_entry(entry) for entry in catalog]


@router.get("/employees", response_model=list[EmployeeResponse])
async def list_employees(db: DbSession) -> list[EmployeeResponse]:
    """List staff eligible for commission or referral."""
    staff = await SqlStaffDirectory(db).list_employees()
    return [EmployeeResponse.from_member(member) for member in staff]


@router.get("/loyalty-customers", response_model=list[LoyaltyCustomerResponse])
async def list_loyalty_customers(db: DbSession) -> list[LoyaltyCustomerResponse]:
    """List registered customers for prefilling the form."""
    customers = await SqlLoyaltyDirectory(db).list_loyalty_customers()
    return [LoyaltyCustomerResponse.from_customer(c) for c in customers]


@router.get("/payment-options", response_model=PaymentOptionsResponse)
async def payment_options() -> PaymentOptionsResponse:
    """Varieties, payment methods and quick tender amounts."""
    return PaymentOptionsResponse(
        varieties=[OptionResponse(key=v.value, label=v.label) for v in Variety],
        payment_methods=[OptionResponse(key=m.value, label=m.label) for m in PaymentMethod],
        quick_amounts=list(QUICK_TENDER_AMOUNTS),
    )
