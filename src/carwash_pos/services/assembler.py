"""Builds persistence-ready transaction records and payment patches."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from carwash_pos.calculators.commission import CommissionCalculator
from carwash_pos.calculators.price_calculator import PriceCalculator
from carwash_pos.calculators.types import (
    ZERO,
    Draft,
    Identity,
    ManualLineItem,
    PatchSet,
    Reconciliation,
    ServiceCatalogEntry,
    TransactionRecord,
    Variety,
)
from carwash_pos.config import get_settings
from carwash_pos.exceptions import ValidationError
from carwash_pos.services.state_machine import TransactionStateMachine, TransactionStatus


def format_money(amount, symbol: str | None = None) -> str:
    """Format an amount the way it is shown on receipts, e.g. ``₱1,250``."""
    if symbol is None:
        symbol = get_settings().currency_symbol
    return f"{symbol}{amount.normalize():,f}" if amount % 1 else f"{symbol}{int(amount):,}"


class RecordAssembler:
    """Single choke point for producing transaction records.

    Enforces, in order:
    1) customer, car and plate are present after trimming
    2) at least one catalog service or manual item
    3) price recomputed from the catalog, commissions from the price
    4) employees always a list, referrer fully present or absent
    5) paid fields present together or not at all
    """

    REQUIRED_FIELDS = ("customer_name", "car_name", "plate_number")

    @staticmethod
    def assemble(
        draft: Draft,
        reconciliation: Reconciliation,
        identity: Identity,
        timestamp: datetime,
        catalog: Iterable[ServiceCatalogEntry] | None = None,
    ) -> TransactionRecord:
        required = RecordAssembler.validate_draft(draft)

        if not identity.username or not identity.username.strip():
            raise ValidationError("cashier")

        try:
            variety = Variety(draft.variety)
        except ValueError:
            raise ValidationError("variety", f"Unknown variety '{draft.variety}'")

        catalog = list(catalog) if catalog is not None else None
        price = (
            PriceCalculator.compute_total(
                draft.service_ids, variety, draft.manual_items, catalog
            )
            if catalog is not None
            else draft.price
        )
        employees, referrer = CommissionCalculator.recompute_commissions(
            [e for e in draft.employees if e.id and e.id.strip()],
            draft.referrer if draft.referrer and draft.referrer.id else None,
            price,
        )

        if reconciliation.paid:
            RecordAssembler._validate_paid(reconciliation, price)

        return TransactionRecord(
            customer_name=required["customer_name"],
            car_name=required["car_name"],
            plate_number=required["plate_number"],
            variety=variety,
            service_ids=tuple(draft.service_ids),
            service_names=RecordAssembler.service_names(
                draft.service_ids, draft.manual_items, catalog or ()
            ),
            manual_services=tuple(draft.manual_items),
            price=price,
            cashier=identity.username.strip(),
            cashier_full_name=identity.full_name,
            employees=employees,
            referrer=referrer,
            created_at=timestamp,
            paid=reconciliation.paid,
            payment_method=reconciliation.payment_method if reconciliation.paid else None,
            amount_tendered=reconciliation.amount_tendered if reconciliation.paid else None,
            change=(
                reconciliation.amount_tendered - price if reconciliation.paid else None
            ),
        )

    @staticmethod
    def mark_paid(
        record: TransactionRecord,
        reconciliation: Reconciliation,
        timestamp: datetime,
    ) -> PatchSet:
        """Patch completing payment of an unpaid record.

        Identity fields, services, price and commissions are left untouched.
        """
        TransactionStateMachine.validate_transition(
            TransactionStateMachine.status_of(record), TransactionStatus.PAID
        )
        if not reconciliation.paid:
            raise ValidationError("paid", "A pay-later reconciliation cannot complete payment")
        RecordAssembler._validate_paid(reconciliation, record.price)

        return PatchSet(
            payment_method=reconciliation.payment_method,
            amount_tendered=reconciliation.amount_tendered,
            change=reconciliation.amount_tendered - record.price,
            created_at=timestamp,
        )

    @staticmethod
    def service_names(
        service_ids: Iterable[str],
        manual_items: Iterable[ManualLineItem],
        catalog: Iterable[ServiceCatalogEntry],
    ) -> tuple[str, ...]:
        """Catalog names in selection order, then ``Name (₱price)`` manual items."""
        by_id = PriceCalculator.index_catalog(catalog)
        names = [by_id[sid].name for sid in service_ids if sid in by_id]
        names.extend(f"{m.name} ({format_money(m.price)})" for m in manual_items)
        return tuple(names)

    @staticmethod
    def validate_draft(draft: Draft) -> dict[str, str]:
        """Check the draft-only rules; returns the trimmed required fields."""
        values: dict[str, str] = {}
        for name in RecordAssembler.REQUIRED_FIELDS:
            value = getattr(draft, name)
            value = value.strip() if isinstance(value, str) else ""
            if not value:
                raise ValidationError(name)
            values[name] = value

        if not draft.service_ids and not draft.manual_items:
            raise ValidationError(
                "service_ids", "Select at least one service or add a manual service"
            )
        for item in draft.manual_items:
            RecordAssembler._validate_manual_item(item)
        return values

    @staticmethod
    def is_complete(draft: Draft) -> bool:
        """Whether the draft passes ``validate_draft``; gates the confirm action."""
        try:
            RecordAssembler.validate_draft(draft)
        except ValidationError:
            return False
        return True

    @staticmethod
    def _validate_manual_item(item: ManualLineItem) -> None:
        if not item.name or not item.name.strip():
            raise ValidationError("manual_services", "Manual service name is required")
        if item.price < ZERO:
            raise ValidationError(
                "manual_services", f"Manual service '{item.name}' has a negative price"
            )

    @staticmethod
    def _validate_paid(reconciliation: Reconciliation, price) -> None:
        if reconciliation.payment_method is None:
            raise ValidationError("payment_method")
        if reconciliation.amount_tendered is None:
            raise ValidationError("amount_tendered")
        if reconciliation.amount_tendered < price:
            raise ValidationError(
                "amount_tendered",
                f"Amount tendered {reconciliation.amount_tendered} is less than the total {price}",
            )


assemble = RecordAssembler.assemble
mark_paid = RecordAssembler.mark_paid
