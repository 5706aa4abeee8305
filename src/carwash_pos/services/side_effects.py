"""Best-effort tasks run after a paid transaction is written.

Stock decrements and loyalty accrual are independent tasks. Each one is
isolated: a failure is logged and collected, never raised, and never stops
the remaining tasks or affects the already-written record.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from carwash_pos.calculators.price_calculator import PriceCalculator
from carwash_pos.calculators.types import (
    LoyaltyCustomer,
    ServiceCatalogEntry,
    Variety,
)
from carwash_pos.exceptions import SideEffectError
from carwash_pos.stores.base import InventoryStore, LoyaltyDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostCommitTask:
    """A named, individually-failable write issued after the record write."""

    name: str
    action: Callable[[], Awaitable[None]]


async def run_post_commit_tasks(tasks: Iterable[PostCommitTask]) -> list[SideEffectError]:
    """Run every task once, in order.

    Returns the failures. Tasks are not retried.
    """
    errors: list[SideEffectError] = []
    for task in tasks:
        try:
            await task.action()
        except Exception as e:
            logger.exception("Post-commit task %s failed", task.name)
            errors.append(SideEffectError(task.name, e))
    return errors


def stock_decrement_tasks(
    service_ids: Sequence[str],
    variety: Variety | str,
    catalog: Iterable[ServiceCatalogEntry],
    inventory: InventoryStore,
) -> list[PostCommitTask]:
    """One decrement per chemical with a positive usage at ``variety``.

    A service selected twice consumes its chemicals twice.
    """
    variety = Variety(variety).value
    by_id = PriceCalculator.index_catalog(catalog)
    tasks: list[PostCommitTask] = []

    for service_id in service_ids:
        service = by_id.get(service_id)
        if service is None:
            continue
        for chemical_id, chemical in service.chemicals.items():
            usage = chemical.usage.get(variety)
            if usage is None or usage <= 0:
                continue
            tasks.append(
                PostCommitTask(
                    name=f"decrement_stock:{chemical_id}",
                    action=_decrement(inventory, chemical_id, usage),
                )
            )
    return tasks


def _decrement(
    inventory: InventoryStore, chemical_id: str, usage: Decimal
) -> Callable[[], Awaitable[None]]:
    async def action() -> None:
        await inventory.decrement_stock(chemical_id, usage)

    return action


def find_loyalty_match(
    customers: Iterable[LoyaltyCustomer], customer_name: str, plate_number: str
) -> LoyaltyCustomer | None:
    """Customer whose name and one of whose plates match, ignoring case."""
    name = customer_name.strip().lower()
    plate = plate_number.strip().lower()
    if not name or not plate:
        return None
    for customer in customers:
        if customer.name.strip().lower() != name:
            continue
        if any(car.plate_number.strip().lower() == plate for car in customer.cars):
            return customer
    return None


def loyalty_accrual_task(
    customer_name: str,
    plate_number: str,
    loyalty: LoyaltyDirectory,
    points: Decimal,
) -> PostCommitTask:
    """Accrue ``points`` to a matched registered customer; no match is a no-op."""

    async def action() -> None:
        customers = await loyalty.list_loyalty_customers()
        matched = find_loyalty_match(customers, customer_name, plate_number)
        if matched is None:
            logger.debug("No loyalty customer matches %s / %s", customer_name, plate_number)
            return
        await loyalty.increment_points(matched.id, points)

    return PostCommitTask(name="loyalty_accrual", action=action)
