"""Application service: Create Quote use case.

Orchestrates the flow between repositories and the Quote aggregate:
resolve each requested variant, let the aggregate validate MOQ and
snapshot tier prices, then persist the DRAFT.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, timedelta
from decimal import Decimal

from mart.application.dto import QuoteDTO, QuoteItemSpec
from mart.domain.exceptions import EntityNotFoundError, ValidationError
from mart.domain.model.context import CallerContext
from mart.domain.model.product import Product
from mart.domain.model.quote import Quote
from mart.domain.repository.product_repository import ProductRepository
from mart.domain.repository.quote_repository import QuoteRepository


class CreateQuoteHandler:

    def __init__(
        self,
        quote_repo: QuoteRepository,
        product_repo: ProductRepository,
        tax_rate: Decimal,
        validity_days: int = 30,
        currency: str = "USD",
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._quote_repo = quote_repo
        self._product_repo = product_repo
        self._tax_rate = tax_rate
        self._validity_days = validity_days
        self._currency = currency
        self._clock = clock

    async def handle(
        self,
        buyer_id: str,
        item_specs: list[QuoteItemSpec],
        ctx: CallerContext,
        valid_until: date | None = None,
        notes: str | None = None,
        quote_number: str | None = None,
    ) -> QuoteDTO:
        """Create a DRAFT quote from the caller (the seller) to *buyer_id*.

        Steps:
        1. Build an empty DRAFT (valid for the configured number of days
           unless *valid_until* is given).
        2. Add each item; the aggregate checks MOQ and snapshots the price.
        3. Persist and return a DTO.
        """
        ctx.require()
        if not item_specs:
            raise ValidationError("A quote needs at least one item")

        today = self._clock()
        quote = Quote.create(
            buyer_id=buyer_id,
            seller_id=ctx.user_id,  # type: ignore[arg-type]
            valid_until=valid_until or today + timedelta(days=self._validity_days),
            tax_rate=self._tax_rate,
            today=today,
            quote_number=quote_number,
            notes=notes,
            currency=self._currency,
        )

        products: dict[str, Product] = {}
        for spec in item_specs:
            if spec.product_id not in products:
                product = await self._product_repo.get_by_id(spec.product_id, ctx)
                if product is None:
                    raise EntityNotFoundError(f"Product not found: '{spec.product_id}'")
                products[spec.product_id] = product
            product = products[spec.product_id]
            quote.add_item(product, product.find_variant(spec.variant_id), spec.quantity)

        await self._quote_repo.save(quote, ctx)
        return QuoteDTO.from_domain(quote)
