"""HTTP-backed implementation of QuoteRepository."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from mart.domain.exceptions import RemoteError
from mart.domain.model.context import CallerContext
from mart.domain.model.quote import Quote, QuoteLineItem, QuoteStatus
from mart.domain.model.value_objects import Money, Quantity
from mart.domain.repository.quote_repository import QuoteRepository
from mart.infrastructure.http.api_client import ApiClient


class HttpQuoteRepository(QuoteRepository):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    # --- QuoteRepository interface --------------------------------------------

    async def get_by_id(self, quote_id: str, ctx: CallerContext) -> Quote | None:
        try:
            raw = await self._client.get(f"/quotes/{quote_id}", ctx)
        except RemoteError as exc:
            if exc.status_code == 404:
                return None
            raise
        return self._to_domain(raw)

    async def list(
        self,
        ctx: CallerContext,
        buyer_id: str | None = None,
        seller_id: str | None = None,
        status: QuoteStatus | None = None,
    ) -> list[Quote]:
        params: dict[str, str] = {}
        if buyer_id:
            params["buyerId"] = buyer_id
        if seller_id:
            params["sellerId"] = seller_id
        if status is not None:
            params["status"] = status.value
        raw = await self._client.get("/quotes", ctx, params=params or None)
        return [self._to_domain(q) for q in raw or []]

    async def save(self, quote: Quote, ctx: CallerContext) -> None:
        if quote.id is None:
            data = await self._client.post("/quotes", ctx, self._to_raw(quote))
            if not isinstance(data, dict) or data.get("id") is None:
                raise RemoteError("Backend response did not include a quote id")
            quote.id = str(data["id"])
        else:
            await self._client.put(f"/quotes/{quote.id}", ctx, self._to_raw(quote))

    async def delete(self, quote_id: str, ctx: CallerContext) -> None:
        await self._client.delete(f"/quotes/{quote_id}", ctx)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(quote: Quote) -> dict:
        # Totals are sent for the backend's convenience; they are always
        # recomputed from the items on the way back in.
        return {
            "quoteNumber": quote.quote_number,
            "buyerId": quote.buyer_id,
            "sellerId": quote.seller_id,
            "status": quote.status.value,
            "validUntil": quote.valid_until.isoformat(),
            "taxRate": str(quote.tax_rate),
            "currency": quote.currency,
            "notes": quote.notes,
            "subtotal": str(quote.subtotal.amount),
            "taxAmount": str(quote.tax_amount.amount),
            "totalAmount": str(quote.total_amount.amount),
            "items": [
                {
                    "id": item.id,
                    "productId": item.product_id,
                    "variantId": item.variant_id,
                    "productName": item.product_name,
                    "variantLabel": item.variant_label,
                    "quantity": item.quantity.value,
                    "quotedPrice": str(item.quoted_price.amount),
                    "totalPrice": str(item.total_price.amount),
                    "minimumOrderQuantity": item.minimum_order_quantity,
                }
                for item in quote.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Quote:
        currency = raw.get("currency", "USD")
        items = [
            QuoteLineItem(
                id=str(i["id"]),
                product_id=str(i["productId"]),
                variant_id=str(i["variantId"]),
                product_name=i.get("productName", ""),
                variant_label=i.get("variantLabel", ""),
                quantity=Quantity(i["quantity"]),
                quoted_price=Money.of(i["quotedPrice"], currency),
                minimum_order_quantity=i.get("minimumOrderQuantity") or 1,
            )
            for i in raw.get("items") or []
        ]
        return Quote(
            id=str(raw["id"]),
            quote_number=raw["quoteNumber"],
            buyer_id=str(raw["buyerId"]),
            seller_id=str(raw["sellerId"]),
            valid_until=date.fromisoformat(raw["validUntil"][:10]),
            tax_rate=Decimal(str(raw.get("taxRate", "0"))),
            items=items,
            status=QuoteStatus(raw.get("status", "DRAFT")),
            notes=raw.get("notes"),
            currency=currency,
        )
