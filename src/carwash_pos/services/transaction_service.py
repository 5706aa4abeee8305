"""Confirms, completes and lists car-wash transactions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal

from carwash_pos.calculators.price_calculator import PriceCalculator
from carwash_pos.calculators.reconciler import PaymentReconciler
from carwash_pos.calculators.types import (
    Draft,
    Identity,
    PaymentMethod,
    ServiceCatalogEntry,
    StaffMember,
    TransactionRecord,
    Variety,
)
from carwash_pos.config import get_settings
from carwash_pos.exceptions import PersistenceError, SideEffectError, TransactionNotFoundError
from carwash_pos.services import draft as drafts
from carwash_pos.services.assembler import RecordAssembler
from carwash_pos.services.history import (
    TransactionFilter,
    TransactionSummary,
    filter_records,
    summarize,
)
from carwash_pos.services.side_effects import (
    PostCommitTask,
    loyalty_accrual_task,
    run_post_commit_tasks,
    stock_decrement_tasks,
)
from carwash_pos.services.state_machine import TransactionStateMachine, TransactionStatus
from carwash_pos.stores.base import (
    CatalogStore,
    InventoryStore,
    LoyaltyDirectory,
    StaffDirectory,
    TransactionStore,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConfirmResult:
    """Outcome of a confirmation; side-effect failures never fail it."""

    record: TransactionRecord
    side_effect_errors: list[SideEffectError] = field(default_factory=list)
    completed_existing: bool = False

    @property
    def message(self) -> str:
        if self.completed_existing:
            return "Payment completed!"
        return "Payment recorded!" if self.record.paid else "Service recorded as unpaid."


@dataclass(frozen=True)
class DraftInput:
    """Raw cashier inputs, as received from a form or API payload."""

    customer_name: str = ""
    car_name: str = ""
    plate_number: str = ""
    variety: Variety | str = Variety.MOTOR
    service_ids: Sequence[str] = ()
    manual_items: Sequence[tuple[str, Decimal]] = ()
    employee_percents: Sequence[tuple[str, Decimal]] = ()
    referrer_id: str | None = None
    referrer_percent: Decimal = Decimal("0")
    payment_method: PaymentMethod | str = PaymentMethod.CASH


class TransactionService:
    """Drives the calculation engine against the stores.

    Confirmation sequence (no grouping across writes):
    1) read catalog, recompute price, reconcile payment
    2) assemble the record (all validation happens here, before any write)
    3) insert or update the record
    4) when paid: stock decrements per chemical, then loyalty accrual
    """

    def __init__(
        self,
        transactions: TransactionStore,
        catalog: CatalogStore,
        staff: StaffDirectory,
        inventory: InventoryStore,
        loyalty: LoyaltyDirectory,
        clock: Callable[[], datetime] = utc_now,
        loyalty_points: Decimal | None = None,
    ):
        self.transactions = transactions
        self.catalog = catalog
        self.staff = staff
        self.inventory = inventory
        self.loyalty = loyalty
        self.clock = clock
        self.loyalty_points = (
            loyalty_points
            if loyalty_points is not None
            else get_settings().loyalty_points_per_visit
        )

    async def build_draft(self, data: DraftInput) -> Draft:
        """Replay raw inputs through the draft transitions."""
        catalog = await self.catalog.list_services()
        staff = await self.staff.list_employees()
        return self.apply_inputs(Draft.blank(), data, catalog, staff)

    @staticmethod
    def apply_inputs(
        draft: Draft,
        data: DraftInput,
        catalog: Sequence[ServiceCatalogEntry],
        staff: Sequence[StaffMember],
    ) -> Draft:
        draft = drafts.set_customer(
            draft,
            customer_name=data.customer_name,
            car_name=data.car_name,
            plate_number=data.plate_number,
        )
        draft = drafts.change_variety(draft, data.variety, catalog)
        draft = drafts.select_services(draft, data.service_ids, catalog)
        for name, price in data.manual_items:
            draft = drafts.add_manual_item(draft, name, price, catalog)
        draft = drafts.assign_employees(draft, [emp_id for emp_id, _ in data.employee_percents], staff)
        for emp_id, percent in data.employee_percents:
            draft = drafts.set_employee_percent(draft, emp_id, percent)
        draft = drafts.set_referrer(draft, data.referrer_id, staff)
        if draft.referrer is not None:
            draft = drafts.set_referrer_percent(draft, data.referrer_percent)
        return drafts.set_payment_method(draft, data.payment_method)

    async def confirm(
        self,
        draft: Draft,
        identity: Identity,
        amount_tendered: Decimal | None = None,
        pay_later: bool = False,
    ) -> ConfirmResult:
        """Record a new transaction, paid now or deferred."""
        RecordAssembler.validate_draft(draft)
        catalog = await self._load_catalog()
        price = PriceCalculator.compute_total(
            draft.service_ids, draft.variety, draft.manual_items, catalog
        )
        reconciliation = PaymentReconciler.reconcile(
            price, amount_tendered, pay_later, draft.payment_method
        )
        record = RecordAssembler.assemble(
            draft, reconciliation, identity, self.clock(), catalog
        )

        try:
            record_id = await self.transactions.insert(record)
        except Exception as e:
            logger.exception("Failed to insert transaction for %s", record.plate_number)
            raise PersistenceError("record payment", e) from e
        record = replace(record, id=record_id)

        errors: list[SideEffectError] = []
        if record.paid:
            errors = await run_post_commit_tasks(self._payment_tasks(record, catalog))

        logger.info(
            "Recorded transaction %s (%s, paid=%s, price=%s)",
            record_id,
            record.plate_number,
            record.paid,
            record.price,
        )
        return ConfirmResult(record=record, side_effect_errors=errors)

    async def pay_now(
        self,
        record_id: str,
        amount_tendered: Decimal | None,
        payment_method: PaymentMethod | str = PaymentMethod.CASH,
    ) -> ConfirmResult:
        """Complete payment of an existing unpaid record."""
        record = await self.get(record_id)
        TransactionStateMachine.validate_transition(
            TransactionStateMachine.status_of(record), TransactionStatus.PAID
        )
        reconciliation = PaymentReconciler.reconcile(
            record.price, amount_tendered, False, payment_method
        )
        patch = RecordAssembler.mark_paid(record, reconciliation, self.clock())
        catalog = await self._load_catalog()

        try:
            await self.transactions.update(record_id, patch.to_dict())
        except TransactionNotFoundError:
            raise
        except Exception as e:
            logger.exception("Failed to complete payment for transaction %s", record_id)
            raise PersistenceError("complete payment", e) from e
        record = patch.apply(record)

        errors = await run_post_commit_tasks(self._payment_tasks(record, catalog))
        logger.info("Completed payment for transaction %s", record_id)
        return ConfirmResult(record=record, side_effect_errors=errors, completed_existing=True)

    async def get(self, record_id: str) -> TransactionRecord:
        record = await self.transactions.get(record_id)
        if record is None:
            raise TransactionNotFoundError(record_id)
        return record

    async def reopen(self, record_id: str) -> Draft:
        """Draft for paying an unpaid record later."""
        return drafts.draft_from_record(await self.get(record_id))

    async def list_transactions(
        self, criteria: TransactionFilter | None = None
    ) -> list[TransactionRecord]:
        records = await self.transactions.list_all()
        return filter_records(records, criteria or TransactionFilter())

    async def summary(self) -> TransactionSummary:
        return summarize(await self.transactions.list_all())

    def _payment_tasks(
        self, record: TransactionRecord, catalog: Sequence[ServiceCatalogEntry]
    ) -> list[PostCommitTask]:
        tasks = stock_decrement_tasks(
            record.service_ids, record.variety, catalog, self.inventory
        )
        tasks.append(
            loyalty_accrual_task(
                record.customer_name, record.plate_number, self.loyalty, self.loyalty_points
            )
        )
        return tasks

    async def _load_catalog(self) -> list[ServiceCatalogEntry]:
        try:
            return await self.catalog.list_services()
        except Exception as e:
            raise PersistenceError("load service catalog", e) from e
