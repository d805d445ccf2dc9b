"""Abstract repository for the Quote aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from mart.domain.model.context import CallerContext
from mart.domain.model.quote import Quote, QuoteStatus



class QuoteRepository(ABC):

    @abstractmethod
    async def get_by_id(self, quote_id: str, ctx: CallerContext) -> Quote | None:
        """Return a quote by its ID, or None if not found."""

    @abstractmethod
    async def list(
        self,
        ctx: CallerContext,
        buyer_id: str | None = None,
        seller_id: str | None = None,
        status: QuoteStatus | None = None,
    ) -> list[Quote]:
        """Return quotes matching every filter given."""

    @abstractmethod
    async def save(self, quote: Quote, ctx: CallerContext) -> None:
        """Persist a new or updated quote; assigns ``quote.id`` when new."""

    @abstractmethod
    async def delete(self, quote_id: str, ctx: CallerContext) -> None:
        """Remove a quote outright."""
