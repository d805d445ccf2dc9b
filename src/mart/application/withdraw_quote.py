"""Application service: Withdraw Quote use case.

A quote still in DRAFT has not reached the buyer, so the seller may take
it back entirely. Anything past DRAFT is part of the negotiation record
and can only be rejected or left to expire.
"""

from __future__ import annotations

import logging

from mart.application.dto import QuoteDTO
from mart.domain.exceptions import EntityNotFoundError
from mart.domain.model.context import CallerContext
from mart.domain.repository.quote_repository import QuoteRepository

logger = logging.getLogger(__name__)


class WithdrawQuoteHandler:

    def __init__(self, quote_repo: QuoteRepository) -> None:
        self._quote_repo = quote_repo

    async def handle(self, quote_id: str, ctx: CallerContext) -> QuoteDTO:
        """Delete a DRAFT quote and return what it held."""
        ctx.require()
        quote = await self._quote_repo.get_by_id(quote_id, ctx)
        if quote is None:
            raise EntityNotFoundError(f"Quote '{quote_id}' not found")

        quote.assert_withdrawable()
        await self._quote_repo.delete(quote_id, ctx)
        logger.info("Withdrew quote %s (%s)", quote.quote_number, quote_id)
        return QuoteDTO.from_domain(quote)
