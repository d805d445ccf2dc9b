"""Domain service: quantity-based price resolution.

Tier data, where present, always takes precedence over flat pricing:

  1. Active tiers whose range contains the quantity are candidates.
  2. One candidate -> its price per unit.
  3. Several candidates (overlapping ranges) -> the tier with the highest
     ``min_quantity`` wins, so the largest bulk bracket applies.
  4. No candidate -> variant base price, then product base price, else
     ``PriceUnavailable``.

Every function here is pure; results never depend on the order tiers are
stored in.
"""

from __future__ import annotations

from mart.domain.exceptions import PriceUnavailable, ValidationError
from mart.domain.model.product import PriceTier, Product, Variant
from mart.domain.model.value_objects import Money, Quantity


def applicable_tiers(variant: Variant, quantity: int) -> list[PriceTier]:
    """Active tiers covering *quantity*, most specific first."""
    matches = [t for t in variant.active_tiers if t.covers(quantity)]
    # Secondary keys keep the choice deterministic for identical thresholds
    return sorted(
        matches,
        key=lambda t: (t.min_quantity.value, -t.price_per_unit.amount),
        reverse=True,
    )


def resolve_unit_price(variant: Variant, product: Product, quantity: int) -> Money:
    """Return the unit price a buyer pays for *quantity* of *variant*."""
    Quantity(quantity)

    tiers = applicable_tiers(variant, quantity)
    if tiers:
        return tiers[0].price_per_unit

    if variant.base_price is not None:
        return variant.base_price
    if product.base_price is not None:
        return product.base_price

    raise PriceUnavailable(
        f"No price for {quantity} x '{variant.label}' of '{product.name}'"
    )


def price_breaks(variant: Variant) -> list[PriceTier]:
    """Active tiers in ascending quantity order, as shown to buyers."""
    return sorted(variant.active_tiers, key=lambda t: t.min_quantity.value)


def find_overlapping_tiers(tiers: list[PriceTier]) -> list[tuple[PriceTier, PriceTier]]:
    """Pairs of active tiers whose quantity ranges overlap.

    Overlaps are tolerated at resolution time; this only reports them.
    """
    active = sorted(
        (t for t in tiers if t.active), key=lambda t: t.min_quantity.value
    )
    pairs: list[tuple[PriceTier, PriceTier]] = []
    for i, first in enumerate(active):
        for second in active[i + 1:]:
            if first.overlaps(second):
                pairs.append((first, second))
    return pairs


def display_price(variant: Variant, product: Product) -> Money | None:
    """Headline price for listings: the price at the product's MOQ.

    Returns None when nothing prices that quantity; listings show "N/A".
    """
    try:
        return resolve_unit_price(variant, product, product.minimum_order_quantity)
    except (PriceUnavailable, ValidationError):
        return None
