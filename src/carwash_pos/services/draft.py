"""Pure transitions over the cashier's in-progress draft.

Every transition returns a new ``Draft``. Transitions that can change the
total (service selection, variety, manual items) recompute the price and
then every commission, so a draft never carries a stale amount.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal

from carwash_pos.calculators.commission import CommissionCalculator
from carwash_pos.calculators.price_calculator import PriceCalculator
from carwash_pos.calculators.types import (
    Draft,
    EmployeeAssignment,
    LoyaltyCar,
    LoyaltyCustomer,
    ManualLineItem,
    PaymentMethod,
    ReferrerAssignment,
    ServiceCatalogEntry,
    StaffMember,
    TransactionRecord,
    Variety,
    to_money,
)
from carwash_pos.exceptions import ValidationError
from carwash_pos.services.state_machine import (
    InvalidTransitionError,
    TransactionStateMachine,
    TransactionStatus,
)

MIN_PERCENT = Decimal("0")
MAX_PERCENT = Decimal("100")


def clamp_percent(percent) -> Decimal:
    return min(max(to_money(percent), MIN_PERCENT), MAX_PERCENT)


def recalculate(draft: Draft, catalog: Iterable[ServiceCatalogEntry]) -> Draft:
    """Recompute the total, then every commission against it."""
    price = PriceCalculator.compute_total(
        draft.service_ids, draft.variety, draft.manual_items, catalog
    )
    employees, referrer = CommissionCalculator.recompute_commissions(
        draft.employees, draft.referrer, price
    )
    return replace(draft, price=price, employees=employees, referrer=referrer)


def select_services(
    draft: Draft, service_ids: Sequence[str], catalog: Iterable[ServiceCatalogEntry]
) -> Draft:
    return recalculate(replace(draft, service_ids=tuple(service_ids)), catalog)


def change_variety(
    draft: Draft, variety: Variety | str, catalog: Iterable[ServiceCatalogEntry]
) -> Draft:
    """Switch tier; selected services are kept and repriced."""
    try:
        variety = Variety(variety)
    except ValueError:
        raise ValidationError("variety", f"Unknown variety '{variety}'")
    return recalculate(replace(draft, variety=variety), catalog)


def add_manual_item(
    draft: Draft, name: str, price, catalog: Iterable[ServiceCatalogEntry]
) -> Draft:
    name = (name or "").strip()
    if not name:
        raise ValidationError("manual_services", "Manual service name is required")
    if price is None or price == "":
        raise ValidationError("manual_services", "Manual service price is required")
    price = to_money(price)
    if price < 0:
        raise ValidationError("manual_services", "Manual service price cannot be negative")

    items = draft.manual_items + (ManualLineItem(name=name, price=price),)
    return recalculate(replace(draft, manual_items=items), catalog)


def remove_manual_item(
    draft: Draft, index: int, catalog: Iterable[ServiceCatalogEntry]
) -> Draft:
    if not 0 <= index < len(draft.manual_items):
        return draft
    items = draft.manual_items[:index] + draft.manual_items[index + 1 :]
    return recalculate(replace(draft, manual_items=items), catalog)


def assign_employees(
    draft: Draft, employee_ids: Sequence[str], staff: Iterable[StaffMember]
) -> Draft:
    """Set the credited employees.

    Employees already on the draft keep their percent and name snapshot;
    new ones start at 0% with the name taken from the staff list. A repeated
    id is credited once.
    """
    by_id = {s.id: s for s in staff}
    existing = {e.id: e for e in draft.employees}
    employees = []
    for emp_id in dict.fromkeys(employee_ids):
        if emp_id in existing:
            employees.append(existing[emp_id])
            continue
        member = by_id.get(emp_id)
        employees.append(
            EmployeeAssignment(id=emp_id, name=member.full_name if member else "")
        )
    employees, _ = CommissionCalculator.recompute_commissions(employees, None, draft.price)
    return replace(draft, employees=employees)


def set_employee_percent(draft: Draft, employee_id: str, percent) -> Draft:
    percent = clamp_percent(percent)
    employees = tuple(
        CommissionCalculator.recompute(replace(e, percent=percent), draft.price)
        if e.id == employee_id
        else e
        for e in draft.employees
    )
    return replace(draft, employees=employees)


def set_referrer(
    draft: Draft, referrer_id: str | None, staff: Iterable[StaffMember]
) -> Draft:
    """Choose the referrer; a blank id removes it. The percent is kept."""
    if not referrer_id:
        return clear_referrer(draft)
    member = {s.id: s for s in staff}.get(referrer_id)
    percent = draft.referrer.percent if draft.referrer else MIN_PERCENT
    referrer = ReferrerAssignment(
        id=referrer_id, name=member.full_name if member else "", percent=percent
    )
    return replace(draft, referrer=CommissionCalculator.recompute(referrer, draft.price))


def clear_referrer(draft: Draft) -> Draft:
    return replace(draft, referrer=None)


def set_referrer_percent(draft: Draft, percent) -> Draft:
    if draft.referrer is None:
        raise ValidationError("referrer", "Choose a referrer before setting a commission")
    referrer = replace(draft.referrer, percent=clamp_percent(percent))
    return replace(draft, referrer=CommissionCalculator.recompute(referrer, draft.price))


def set_customer(
    draft: Draft,
    customer_name: str | None = None,
    car_name: str | None = None,
    plate_number: str | None = None,
) -> Draft:
    changes = {
        k: v
        for k, v in (
            ("customer_name", customer_name),
            ("car_name", car_name),
            ("plate_number", plate_number),
        )
        if v is not None
    }
    return replace(draft, **changes)


def use_loyalty_customer(
    draft: Draft, customer: LoyaltyCustomer, car: LoyaltyCar
) -> Draft:
    """Prefill customer and car details from a registered customer."""
    return replace(
        draft,
        customer_name=customer.name,
        car_name=car.car_name,
        plate_number=car.plate_number,
    )


def set_payment_method(draft: Draft, method: PaymentMethod | str) -> Draft:
    try:
        method = PaymentMethod(method)
    except ValueError:
        raise ValidationError("payment_method", f"Unknown payment method '{method}'")
    return replace(draft, payment_method=method)


def draft_from_record(record: TransactionRecord) -> Draft:
    """Reopen an unpaid record for payment.

    Only commission amounts are stored, so percents are back-derived from
    them and the stored price.
    """
    status = TransactionStateMachine.status_of(record)
    if status != TransactionStatus.UNPAID:
        raise InvalidTransitionError(
            status, TransactionStatus.PAID, "only unpaid records can be reopened"
        )

    employees = tuple(
        replace(
            e,
            percent=CommissionCalculator.percent_from_commission(e.commission, record.price),
        )
        for e in record.employees
    )
    referrer = None
    if record.referrer is not None:
        referrer = replace(
            record.referrer,
            percent=CommissionCalculator.percent_from_commission(
                record.referrer.commission, record.price
            ),
        )

    return Draft(
        customer_name=record.customer_name,
        car_name=record.car_name,
        plate_number=record.plate_number,
        variety=record.variety,
        service_ids=record.service_ids,
        manual_items=record.manual_services,
        price=record.price,
        employees=employees,
        referrer=referrer,
    )
