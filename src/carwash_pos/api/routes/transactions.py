"""Transaction API endpoints."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from carwash_pos.api.dependencies import CashierIdentity, Transactions
from carwash_pos.api.schemas import (
    ConfirmRequest,
    ConfirmResponse,
    ErrorResponse,
    PayNowRequest,
    QuoteRequest,
    QuoteResponse,
    SummaryResponse,
    TransactionListResponse,
    TransactionResponse,
)
from carwash_pos.calculators.price_calculator import PriceCalculator
from carwash_pos.calculators.reconciler import PaymentReconciler
from carwash_pos.calculators.types import Draft, ServiceCatalogEntry, TransactionRecord
from carwash_pos.exceptions import PersistenceError, TransactionNotFoundError, ValidationError
from carwash_pos.services.assembler import RecordAssembler
from carwash_pos.services.history import (
    PaymentStatusFilter,
    TransactionFilter,
    filter_records,
    unique_customers,
    unique_service_names,
)
from carwash_pos.services.state_machine import InvalidTransitionError, TransactionStateMachine
from carwash_pos.services.transaction_service import ConfirmResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _http_error(exc: Exception) -> HTTPException:
    """Map an engine error onto an HTTP error."""
    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.message,
        )
    if isinstance(exc, TransactionNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found",
        )
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        )
    if isinstance(exc, PersistenceError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record payment",
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred",
    )


def _to_response(record: TransactionRecord) -> TransactionResponse:
    return TransactionResponse.from_record(
        record, read_only=TransactionStateMachine.is_read_only(record)
    )


def _confirm_response(result: ConfirmResult) -> ConfirmResponse:
    return ConfirmResponse(
        message=result.message,
        transaction=_to_response(result.record),
        side_effect_failures=[e.task_name for e in result.side_effect_errors],
    )


def _quote(
    draft: Draft,
    catalog: list[ServiceCatalogEntry],
    amount_tendered=None,
) -> QuoteResponse:
    offered = PriceCalculator.offered_services(catalog, draft.variety)
    return QuoteResponse.from_draft(
        draft,
        offered=[entry.id for entry in offered],
        change=PaymentReconciler.display_change(draft.price, amount_tendered),
        can_confirm=(
            RecordAssembler.is_complete(draft)
            and PaymentReconciler.can_confirm(draft.price, amount_tendered)
        ),
    )


# ============================================================================
# Drafts
# ============================================================================


@router.post(
    "/quote",
    response_model=QuoteResponse,
    responses={422: {"model": ErrorResponse}},
)
async def quote_transaction(
    service: Transactions,
    payload: QuoteRequest,
) -> QuoteResponse:
    """Price and commissions for a draft without recording anything."""
    try:
        draft = await service.build_draft(payload.to_input())
    except ValidationError as e:
        raise _http_error(e)
    catalog = await service.catalog.list_services()
    return _quote(draft, catalog, payload.amount_tendered)


# ============================================================================
# Confirmation
# ============================================================================


@router.post(
    "",
    response_model=ConfirmResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def confirm_transaction(
    service: Transactions,
    identity: CashierIdentity,
    payload: ConfirmRequest,
) -> ConfirmResponse:
    """Record a visit, paid now or deferred."""
    try:
        draft = await service.build_draft(payload.to_input())
        result = await service.confirm(
            draft,
            identity,
            amount_tendered=payload.amount_tendered,
            pay_later=payload.pay_later,
        )
    except (ValidationError, PersistenceError) as e:
        raise _http_error(e)
    return _confirm_response(result)


@router.post(
    "/{transaction_id}/pay",
    response_model=ConfirmResponse,
    response_model_exclude_none=True,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def pay_transaction(
    service: Transactions,
    identity: CashierIdentity,
    transaction_id: Annotated[str, Path()],
    payload: PayNowRequest,
) -> ConfirmResponse:
    """Complete payment of an unpaid transaction."""
    try:
        result = await service.pay_now(
            transaction_id, payload.amount_tendered, payload.payment_method
        )
    except (
        ValidationError,
        TransactionNotFoundError,
        InvalidTransitionError,
        PersistenceError,
    ) as e:
        raise _http_error(e)
    logger.info("Cashier %s completed payment for %s", identity.username, transaction_id)
    return _confirm_response(result)


# ============================================================================
# History
# ============================================================================


@router.get(
    "",
    response_model=TransactionListResponse,
    response_model_exclude_none=True,
)
async def list_transactions(
    service: Transactions,
    customer_query: str = "",
    plate_query: str = "",
    status_filter: Annotated[PaymentStatusFilter | None, Query(alias="status")] = None,
    date_from: date | None = None,
    date_to: date | None = None,
    customer: str | None = None,
    service_name: str | None = None,
) -> TransactionListResponse:
    """List transactions, newest first, with optional filters."""
    records = await service.list_transactions()
    criteria = TransactionFilter(
        customer_query=customer_query,
        plate_query=plate_query,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        customer=customer,
        service_name=service_name,
    )
    matched = filter_records(records, criteria)
    return TransactionListResponse(
        items=[_to_response(r) for r in matched],
        total=len(matched),
        customers=unique_customers(records),
        service_names=unique_service_names(records),
    )


@router.get("/summary", response_model=SummaryResponse)
async def transaction_summary(service: Transactions) -> SummaryResponse:
    """Dashboard counters over all transactions."""
    return SummaryResponse.from_summary(await service.summary())


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_transaction(
    service: Transactions,
    transaction_id: Annotated[str, Path()],
) -> TransactionResponse:
    """Get a specific transaction by ID."""
    try:
        record = await service.get(transaction_id)
    except TransactionNotFoundError as e:
        raise _http_error(e)
    return _to_response(record)


@router.get(
    "/{transaction_id}/draft",
    response_model=QuoteResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reopen_transaction(
    service: Transactions,
    transaction_id: Annotated[str, Path()],
) -> QuoteResponse:
    """Reopen an unpaid transaction as a draft for payment."""
    try:
        draft = await service.reopen(transaction_id)
    except (TransactionNotFoundError, InvalidTransitionError) as e:
        raise _http_error(e)
    catalog = await service.catalog.list_services()
    return _quote(draft, catalog)
