"""Tests for the HTTP repositories' wire mapping."""

from decimal import Decimal

import httpx
import pytest

from mart.application.compose_product import ComposeProductHandler
from mart.application.dto import (
    CompositionOutcome,
    ImageDraft,
    PriceTierDraft,
    ProductDraft,
    SpecificationDraft,
    VariantDraft,
)
from mart.domain.model.composition import EntityType, SubEntity
from mart.domain.model.product import PriceTier
from mart.domain.model.quote import QuoteStatus
from mart.domain.model.value_objects import Money
from mart.infrastructure.http.api_client import ApiClient
from mart.infrastructure.http.http_product_repository import HttpProductRepository
from mart.infrastructure.http.http_quote_repository import HttpQuoteRepository
from tests.fakes import (
    CTX,
    PRODUCT_JSON,
    QUOTE_JSON,
    Backend,
    make_product,
    make_quote,
)


class TestHttpProductRepository:

    @pytest.mark.asyncio
    async def test_get_reconstitutes_full_graph(self):
        backend = Backend({("GET", "/products/5"): httpx.Response(200, json={"data": PRODUCT_JSON})})
        async with backend.client() as client:
            product = await HttpProductRepository(client).get_by_id("5", CTX)

        assert product.id == "5"
        assert product.minimum_order_quantity == 10
        assert product.category_id == "3"
        assert product.seller_id == "42"
        variant = product.variants[0]
        assert variant.id == "11"
        assert variant.base_price == Money.of("12.5")
        assert [t.price_per_unit for t in variant.price_tiers] == [Money.of("10"), Money.of("8")]
        assert variant.price_tiers[1].max_quantity is None
        assert variant.primary_image.url == "https://cdn/m8.png"
        assert product.specifications[0].label == "Material: Steel"

    @pytest.mark.asyncio
    async def test_get_missing_is_none(self):
        backend = Backend({})
        async with backend.client() as client:
            assert await HttpProductRepository(client).get_by_id("9", CTX) is None

    @pytest.mark.asyncio
    async def test_add_posts_product_alone(self):
        backend = Backend({("POST", "/products"): httpx.Response(201, json={"data": {"id": 101}})})
        product = make_product(id="p1")
        product.id = None
        async with backend.client() as client:
            new_id = await HttpProductRepository(client).add(product, CTX)

        assert new_id == "101"
        body = backend.body()
        assert body["name"] == "Steel Bolt"
        assert body["minimumOrderQuantity"] == 1
        assert "variants" not in body

    @pytest.mark.asyncio
    async def test_add_price_tier_under_product(self):
        backend = Backend(
            {("POST", "/products/101/price-tiers"): httpx.Response(201, json={"data": {"id": 7}})}
        )
        tier = PriceTier.create(50, None, "8.00")
        sub = SubEntity(EntityType.PRICE_TIER, "Price tier 50+", tier, variant_sku="BOLT-M8")
        async with backend.client() as client:
            new_id = await HttpProductRepository(client).add_sub_entity("101", sub, CTX)

        assert new_id == "7"
        assert backend.body() == {
            "variantSku": "BOLT-M8",
            "minQuantity": 50,
            "maxQuantity": None,
            "pricePerUnit": 8.0,
            "isActive": True,
        }

    @pytest.mark.asyncio
    async def test_update_sub_entity_puts_to_its_id(self):
        backend = Backend(
            {("PUT", "/products/101/price-tiers/21"): httpx.Response(200, json={"data": {}})}
        )
        tier = PriceTier.create(50, None, "8.00", id="21")
        sub = SubEntity(EntityType.PRICE_TIER, "Price tier 50+", tier, variant_sku="BOLT-M8")
        async with backend.client() as client:
            assert await HttpProductRepository(client).update_sub_entity("101", sub, CTX) == "21"

    @pytest.mark.asyncio
    async def test_delete_sub_entity(self):
        backend = Backend({("DELETE", "/products/5/images/31"): httpx.Response(204)})
        async with backend.client() as client:
            await HttpProductRepository(client).delete_sub_entity("5", EntityType.IMAGE, "31", CTX)
        assert backend.requests[0].method == "DELETE"


class TestComposeOverHttp:

    @pytest.mark.asyncio
    async def test_redirect_loop_on_product_step_is_total_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TooManyRedirects("redirect loop", request=request)

        draft = ProductDraft(
            name="Steel Bolt",
            sku="BOLT",
            variants=[
                VariantDraft(
                    sku="BOLT-M8",
                    price_tiers=[PriceTierDraft(min_quantity=1, price_per_unit="10.00")],
                    images=[ImageDraft(url="https://cdn/m8.png")],
                )
            ],
            specifications=[SpecificationDraft(name="Material", value="Steel")],
        )
        client = ApiClient("http://api.test", transport=httpx.MockTransport(handler))
        async with client:
            result = await ComposeProductHandler(HttpProductRepository(client)).handle(draft, CTX)

        assert result.outcome == CompositionOutcome.TOTAL_FAILURE
        assert "redirect loop" in result.error.reason


class TestHttpQuoteRepository:

    @pytest.mark.asyncio
    async def test_get_recomputes_totals(self):
        backend = Backend({("GET", "/quotes/9"): httpx.Response(200, json={"data": QUOTE_JSON})})
        async with backend.client() as client:
            quote = await HttpQuoteRepository(client).get_by_id("9", CTX)

        assert quote.status == QuoteStatus.SENT
        assert quote.buyer_id == "7"
        assert quote.valid_until.isoformat() == "2024-07-01"
        assert quote.tax_rate == Decimal("0.15")
        assert quote.subtotal == Money.of("35")
        assert quote.total_amount == Money.of("40.25")

    @pytest.mark.asyncio
    async def test_save_new_posts_and_assigns_id(self):
        backend = Backend({("POST", "/quotes"): httpx.Response(201, json={"data": {"id": 12}})})
        quote = make_quote(id=None)
        async with backend.client() as client:
            await HttpQuoteRepository(client).save(quote, CTX)

        assert quote.id == "12"
        body = backend.body()
        assert body["status"] == "DRAFT"
        assert body["validUntil"] == "2024-07-01"
        assert body["items"] == []

    @pytest.mark.asyncio
    async def test_save_existing_puts(self):
        backend = Backend({("PUT", "/quotes/q1"): httpx.Response(200, json={"data": {}})})
        async with backend.client() as client:
            await HttpQuoteRepository(client).save(make_quote(), CTX)
        assert backend.requests[0].method == "PUT"

    @pytest.mark.asyncio
    async def test_list_sends_filters(self):
        backend = Backend({("GET", "/quotes"): httpx.Response(200, json={"data": [QUOTE_JSON]})})
        async with backend.client() as client:
            quotes = await HttpQuoteRepository(client).list(
                CTX, buyer_id="7", status=QuoteStatus.SENT
            )

        assert [q.id for q in quotes] == ["9"]
        params = backend.requests[0].url.params
        assert params["buyerId"] == "7"
        assert params["status"] == "SENT"
        assert "sellerId" not in params

    @pytest.mark.asyncio
    async def test_delete(self):
        backend = Backend({("DELETE", "/quotes/9"): httpx.Response(204)})
        async with backend.client() as client:
            await HttpQuoteRepository(client).delete("9", CTX)
        assert backend.requests[0].method == "DELETE"
        assert backend.requests[0].url.path == "/quotes/9"
