"""Transaction total from catalog services and manual line items."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from carwash_pos.calculators.types import (
    ZERO,
    ManualLineItem,
    ServiceCatalogEntry,
    Variety,
)


class PriceCalculator:
    """Computes transaction totals.

    total = Σ(catalog price at variety for each selected id) + Σ(manual prices)

    A selected service with no price at the chosen variety, or an id missing
    from the catalog, contributes 0 instead of failing.
    """

    @staticmethod
    def index_catalog(
        catalog: Iterable[ServiceCatalogEntry],
    ) -> dict[str, ServiceCatalogEntry]:
        return {entry.id: entry for entry in catalog}

    @staticmethod
    def catalog_price(
        entry: ServiceCatalogEntry | None, variety: Variety | str
    ) -> Decimal:
        """Price of one service at a variety, 0 when not offered."""
        if entry is None:
            return ZERO
        price = entry.price_for(variety)
        return price if price is not None else ZERO

    @staticmethod
    def compute_total(
        selected_service_ids: Sequence[str],
        variety: Variety | str,
        manual_items: Sequence[ManualLineItem],
        catalog: Iterable[ServiceCatalogEntry],
    ) -> Decimal:
        by_id = PriceCalculator.index_catalog(catalog)
        catalog_total = sum(
            (
                PriceCalculator.catalog_price(by_id.get(sid), variety)
                for sid in selected_service_ids
            ),
            ZERO,
        )
        manual_total = sum((item.price for item in manual_items), ZERO)
        return catalog_total + manual_total

    @staticmethod
    def offered_services(
        catalog: Iterable[ServiceCatalogEntry], variety: Variety | str
    ) -> list[ServiceCatalogEntry]:
        """Services the cashier can pick at a variety (priced above zero)."""
        offered = []
        for entry in catalog:
            price = entry.price_for(variety)
            if price is not None and price > 0:
                offered.append(entry)
        return offered


compute_total = PriceCalculator.compute_total
offered_services = PriceCalculator.offered_services
