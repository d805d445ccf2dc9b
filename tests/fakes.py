"""In-memory fake repositories and builders for testing.

These implement the same abstract interfaces as the HTTP repositories
but keep everything in a dict. No network, no side effects. The mock
backend at the bottom answers the real HTTP repositories in-process.
"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from decimal import Decimal

import httpx

from mart.domain.exceptions import DomainException
from mart.domain.model.composition import EntityType, SubEntity
from mart.domain.model.context import CallerContext
from mart.domain.model.product import PriceTier, Product, Specification, Variant
from mart.domain.model.quote import Quote, QuoteStatus
from mart.domain.model.value_objects import Money
from mart.domain.repository.product_repository import ProductRepository
from mart.domain.repository.quote_repository import QuoteRepository
from mart.infrastructure.http.api_client import ApiClient

CTX = CallerContext(user_id="seller-1", access_token="token-abc")
ANONYMOUS = CallerContext(user_id=None, access_token=None)

TODAY = date(2024, 6, 1)


def make_variant(
    tiers: list[tuple[int, int | None, str]] | None = None,
    id: str = "v1",
    sku: str = "SKU-1",
    name: str | None = "Red",
    base_price: str | None = None,
    available: bool = True,
) -> Variant:
    """Tiers are given as ``(min, max, price)`` triples."""
    if tiers is None:
        tiers = [(1, None, "10.00")]
    return Variant(
        id=id,
        sku=sku,
        name=name,
        base_price=Money.optional(base_price),
        available=available,
        price_tiers=[PriceTier.create(lo, hi, price) for lo, hi, price in tiers],
    )


def make_product(
    variants: list[Variant] | None = None,
    id: str = "p1",
    name: str = "Steel Bolt",
    moq: int = 1,
    base_price: str | None = None,
    available: bool = True,
) -> Product:
    return Product(
        id=id,
        name=name,
        sku=f"{id.upper()}-SKU",
        base_price=Money.optional(base_price),
        minimum_order_quantity=moq,
        available=available,
        variants=variants if variants is not None else [make_variant()],
        specifications=[Specification(name="Material", value="Steel")],
    )


class FakeProductRepository(ProductRepository):
    """Records every call; failures and delays are injected per label."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = p
        self._next_id = 100
        self.calls: list[tuple[str, str]] = []
        self.completed: list[str] = []
        self.fail_product: DomainException | None = None
        self.fail_labels: dict[str, BaseException] = {}
        self.delays: dict[str, float] = {}
        self.deleted: list[tuple[str, EntityType, str]] = []

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    async def get_by_id(self, product_id: str, ctx: CallerContext) -> Product | None:
        self.calls.append(("get_by_id", product_id))
        return self._store.get(product_id)

    async def add(self, product: Product, ctx: CallerContext) -> str:
        self.calls.append(("add", product.name))
        if self.fail_product is not None:
            raise self.fail_product
        product.id = self._new_id()
        self._store[product.id] = product
        return product.id

    async def update(self, product: Product, ctx: CallerContext) -> str:
        self.calls.append(("update", product.name))
        if self.fail_product is not None:
            raise self.fail_product
        self._store[product.id] = product
        return product.id

    async def delete(self, product_id: str, ctx: CallerContext) -> None:
        self.calls.append(("delete", product_id))
        self._store.pop(product_id, None)

    async def add_sub_entity(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> str:
        self.calls.append(("add_sub_entity", sub.label))
        return await self._settle(sub)

    async def update_sub_entity(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> str:
        self.calls.append(("update_sub_entity", sub.label))
        await self._settle(sub)
        return sub.entity_id

    async def delete_sub_entity(
        self,
        product_id: str,
        entity_type: EntityType,
        entity_id: str,
        ctx: CallerContext,
    ) -> None:
        self.deleted.append((product_id, entity_type, entity_id))

    async def _settle(self, sub: SubEntity) -> str:
        await asyncio.sleep(self.delays.get(sub.label, 0))
        if sub.label in self.fail_labels:
            raise self.fail_labels[sub.label]
        self.completed.append(sub.label)
        return self._new_id()

    def sub_entity_calls(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0].endswith("_sub_entity")]


class FakeQuoteRepository(QuoteRepository):

    def __init__(self, quotes: list[Quote] | None = None) -> None:
        self._store: dict[str, Quote] = {}
        for q in quotes or []:
            self._store[q.id] = q
        self._next_id = 1
        self.saves = 0
        self.deleted: list[str] = []

    async def get_by_id(self, quote_id: str, ctx: CallerContext) -> Quote | None:
        return self._store.get(quote_id)

    async def list(
        self,
        ctx: CallerContext,
        buyer_id: str | None = None,
        seller_id: str | None = None,
        status: QuoteStatus | None = None,
    ) -> list[Quote]:
        return [
            q
            for q in self._store.values()
            if (buyer_id is None or q.buyer_id == buyer_id)
            and (seller_id is None or q.seller_id == seller_id)
            and (status is None or q.status == status)
        ]

    async def save(self, quote: Quote, ctx: CallerContext) -> None:
        self.saves += 1
        if quote.id is None:
            quote.id = str(self._next_id)
            self._next_id += 1
        self._store[quote.id] = quote

    async def delete(self, quote_id: str, ctx: CallerContext) -> None:
        self.deleted.append(quote_id)
        self._store.pop(quote_id, None)


def make_quote(
    id: str | None = "q1",
    status: QuoteStatus = QuoteStatus.DRAFT,
    valid_until: date = date(2024, 7, 1),
    tax_rate: str = "0.15",
) -> Quote:
    return Quote(
        id=id,
        quote_number="QT-2024-0001",
        buyer_id="buyer-1",
        seller_id="seller-1",
        valid_until=valid_until,
        tax_rate=Decimal(tax_rate),
        status=status,
    )


# --- Mock backend ---------------------------------------------------------

PRODUCT_JSON = {
    "id": 5,
    "name": "Steel Bolt",
    "sku": "BOLT",
    "basePrice": None,
    "minimumOrderQuantity": 10,
    "available": True,
    "isBulkOnly": True,
    "category": {"id": 3},
    "seller": {"id": 42},
    "variants": [
        {
            "id": 11,
            "sku": "BOLT-M8",
            "variantName": "M8",
            "basePrice": 12.5,
            "available": True,
            "priceTiers": [
                {"id": 21, "minQuantity": 10, "maxQuantity": 49, "pricePerUnit": 10.0, "isActive": True},
                {"id": 22, "minQuantity": 50, "maxQuantity": None, "pricePerUnit": 8.0, "isActive": True},
            ],
            "images": [{"id": 31, "imageUrl": "https://cdn/m8.png", "isPrimary": True}],
        }
    ],
    "specifications": [{"id": 41, "specName": "Material", "specValue": "Steel"}],
}

QUOTE_JSON = {
    "id": 9,
    "quoteNumber": "QT-2024-0042",
    "buyerId": 7,
    "sellerId": 42,
    "status": "SENT",
    "validUntil": "2024-07-01T00:00:00",
    "taxRate": "0.15",
    "currency": "USD",
    "subtotal": "999",
    "items": [
        {
            "id": "line-1",
            "productId": 5,
            "variantId": 11,
            "productName": "Steel Bolt",
            "variantLabel": "M8",
            "quantity": 2,
            "quotedPrice": "10.00",
        },
        {
            "id": "line-2",
            "productId": 5,
            "variantId": 12,
            "productName": "Steel Bolt",
            "variantLabel": "M10",
            "quantity": 3,
            "quotedPrice": "5.00",
        },
    ],
}


class Backend:
    """Records requests and answers from a path -> response table."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        return self.routes.get(key, httpx.Response(404, json={"message": "Not found"}))

    def client(self) -> ApiClient:
        return ApiClient("http://api.test", transport=httpx.MockTransport(self))

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)
