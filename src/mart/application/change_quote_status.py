"""Application service: move a quote through its lifecycle.

The Quote aggregate owns the transition table; this handler only loads,
applies and saves. A refused transition raises InvalidTransition and
nothing is saved.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from mart.application.dto import QuoteDTO
from mart.domain.exceptions import EntityNotFoundError, InvalidTransition
from mart.domain.model.context import CallerContext
from mart.domain.model.quote import QuoteStatus
from mart.domain.repository.quote_repository import QuoteRepository


class ChangeQuoteStatusHandler:

    def __init__(
        self,
        quote_repo: QuoteRepository,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._quote_repo = quote_repo
        self._clock = clock

    async def handle(
        self, quote_id: str, target: QuoteStatus, ctx: CallerContext
    ) -> QuoteDTO:
        ctx.require()
        quote = await self._quote_repo.get_by_id(quote_id, ctx)
        if quote is None:
            raise EntityNotFoundError(f"Quote '{quote_id}' not found")

        today = self._clock()
        if target == QuoteStatus.SENT:
            quote.send()
        elif target == QuoteStatus.ACCEPTED:
            quote.accept(today)
        elif target == QuoteStatus.REJECTED:
            quote.reject()
        elif target == QuoteStatus.EXPIRED:
            quote.expire(today)
        else:
            raise InvalidTransition(f"Quotes cannot be moved back to {target.value}")

        await self._quote_repo.save(quote, ctx)
        return QuoteDTO.from_domain(quote)
