"""Application services: add, remove and re-size quote line items.

Each change is only allowed on a DRAFT quote; the aggregate recomputes
subtotal, tax and total after every one. A quote whose validity has lapsed
is expired (and saved as such) before the change is attempted, so the
change is then refused with QuoteNotEditable.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from mart.application.dto import QuoteDTO, QuoteItemSpec
from mart.domain.exceptions import EntityNotFoundError
from mart.domain.model.context import CallerContext
from mart.domain.model.quote import Quote
from mart.domain.repository.product_repository import ProductRepository
from mart.domain.repository.quote_repository import QuoteRepository


class _QuoteItemsHandler:

    def __init__(
        self,
        quote_repo: QuoteRepository,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._quote_repo = quote_repo
        self._clock = clock

    async def _load_draft(self, quote_id: str, ctx: CallerContext) -> Quote:
        ctx.require()
        quote = await self._quote_repo.get_by_id(quote_id, ctx)
        if quote is None:
            raise EntityNotFoundError(f"Quote '{quote_id}' not found")
        if quote.refresh_expiry(self._clock()):
            await self._quote_repo.save(quote, ctx)
        return quote


class AddQuoteItemHandler(_QuoteItemsHandler):

    def __init__(
        self,
        quote_repo: QuoteRepository,
        product_repo: ProductRepository,
        clock: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(quote_repo, clock)
        self._product_repo = product_repo

    async def handle(
        self, quote_id: str, spec: QuoteItemSpec, ctx: CallerContext
    ) -> QuoteDTO:
        quote = await self._load_draft(quote_id, ctx)

        product = await self._product_repo.get_by_id(spec.product_id, ctx)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{spec.product_id}'")

        quote.add_item(product, product.find_variant(spec.variant_id), spec.quantity)
        await self._quote_repo.save(quote, ctx)
        return QuoteDTO.from_domain(quote)


class RemoveQuoteItemHandler(_QuoteItemsHandler):

    async def handle(self, quote_id: str, line_id: str, ctx: CallerContext) -> QuoteDTO:
        quote = await self._load_draft(quote_id, ctx)
        quote.remove_item(line_id)
        await self._quote_repo.save(quote, ctx)
        return QuoteDTO.from_domain(quote)


class ChangeQuoteItemQuantityHandler(_QuoteItemsHandler):

    async def handle(
        self, quote_id: str, line_id: str, quantity: int, ctx: CallerContext
    ) -> QuoteDTO:
        """Re-size a line; its unit price stays the one quoted at add-time."""
        quote = await self._load_draft(quote_id, ctx)
        quote.change_quantity(line_id, quantity)
        await self._quote_repo.save(quote, ctx)
        return QuoteDTO.from_domain(quote)
