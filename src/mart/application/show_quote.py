"""Application service: Show / List Quotes use cases (queries)."""

from __future__ import annotations

from mart.application.dto import QuoteDTO
from mart.domain.exceptions import EntityNotFoundError
from mart.domain.model.context import CallerContext
from mart.domain.model.quote import QuoteStatus
from mart.domain.repository.quote_repository import QuoteRepository


class ShowQuoteHandler:

    def __init__(self, quote_repo: QuoteRepository) -> None:
        self._quote_repo = quote_repo

    async def handle(self, quote_id: str, ctx: CallerContext) -> QuoteDTO:
        ctx.require()
        quote = await self._quote_repo.get_by_id(quote_id, ctx)
        if quote is None:
            raise EntityNotFoundError(f"Quote '{quote_id}' not found")
        return QuoteDTO.from_domain(quote)


class ListQuotesHandler:

    def __init__(self, quote_repo: QuoteRepository) -> None:
        self._quote_repo = quote_repo

    async def handle(
        self,
        ctx: CallerContext,
        buyer_id: str | None = None,
        seller_id: str | None = None,
        status: QuoteStatus | None = None,
    ) -> list[QuoteDTO]:
        ctx.require()
        quotes = await self._quote_repo.list(
            ctx, buyer_id=buyer_id, seller_id=seller_id, status=status
        )
        return [QuoteDTO.from_domain(q) for q in quotes]
