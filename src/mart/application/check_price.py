"""Application service: price check for a variant/quantity selection.

What a product page or cart shows before anything is added to a quote:
the unit price for the quantity, the line total, and whether the quantity
meets the product's MOQ (with the suggested quantity if it does not).
"""

from __future__ import annotations

from mart.application.dto import PriceCheckDTO
from mart.domain.exceptions import EntityNotFoundError
from mart.domain.model.context import CallerContext
from mart.domain.repository.product_repository import ProductRepository
from mart.domain.service.moq_guard import validate_quantity
from mart.domain.service.price_resolver import price_breaks, resolve_unit_price


class CheckPriceHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(
        self,
        product_id: str,
        variant_id: str,
        quantity: int,
        ctx: CallerContext,
    ) -> PriceCheckDTO:
        """Raises PriceUnavailable when nothing prices this quantity."""
        ctx.require()
        product = await self._product_repo.get_by_id(product_id, ctx)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        variant = product.find_variant(variant_id)

        check = validate_quantity(quantity, product.minimum_order_quantity)
        unit_price = resolve_unit_price(variant, product, quantity)

        return PriceCheckDTO(
            product_name=product.name,
            variant_label=variant.label,
            quantity=quantity,
            minimum_order_quantity=product.minimum_order_quantity,
            meets_minimum=check.accepted,
            suggested_quantity=check.quantity,
            unit_price=str(unit_price),
            line_total=str(unit_price * quantity),
            price_breaks=[tier.label for tier in price_breaks(variant)],
        )
