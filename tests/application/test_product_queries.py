"""Integration tests for showing and deleting products and their parts,
and for listing quotes."""

import pytest

from mart.application.delete_product import DeleteProductHandler
from mart.application.remove_sub_entity import RemoveSubEntityHandler
from mart.application.show_product import ShowProductHandler
from mart.application.show_quote import ListQuotesHandler, ShowQuoteHandler
from mart.domain.exceptions import EntityNotFoundError, Unauthorized, ValidationError
from mart.domain.model.composition import EntityType
from mart.domain.model.quote import QuoteStatus
from tests.fakes import (
    ANONYMOUS,
    CTX,
    FakeProductRepository,
    FakeQuoteRepository,
    make_product,
    make_quote,
)


class TestShowProduct:

    @pytest.mark.asyncio
    async def test_found(self):
        handler = ShowProductHandler(FakeProductRepository([make_product()]))
        product = await handler.handle("p1", CTX)
        assert product.name == "Steel Bolt"

    @pytest.mark.asyncio
    async def test_not_found(self):
        handler = ShowProductHandler(FakeProductRepository())
        with pytest.raises(EntityNotFoundError):
            await handler.handle("p1", CTX)


class TestDeleteProduct:

    @pytest.mark.asyncio
    async def test_deletes(self):
        repo = FakeProductRepository([make_product()])
        await DeleteProductHandler(repo).handle("p1", CTX)
        assert await repo.get_by_id("p1", CTX) is None

    @pytest.mark.asyncio
    async def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            await DeleteProductHandler(FakeProductRepository()).handle("p1", CTX)

    @pytest.mark.asyncio
    async def test_requires_credential(self):
        repo = FakeProductRepository([make_product()])
        with pytest.raises(Unauthorized):
            await DeleteProductHandler(repo).handle("p1", ANONYMOUS)
        assert repo.calls == []


class TestRemoveSubEntity:

    @pytest.mark.asyncio
    async def test_removes_one_part(self):
        repo = FakeProductRepository([make_product()])
        await RemoveSubEntityHandler(repo).handle("p1", EntityType.PRICE_TIER, "t7", CTX)
        assert repo.deleted == [("p1", EntityType.PRICE_TIER, "t7")]

    @pytest.mark.asyncio
    async def test_product_itself_refused(self):
        repo = FakeProductRepository([make_product()])
        with pytest.raises(ValidationError):
            await RemoveSubEntityHandler(repo).handle("p1", EntityType.PRODUCT, "p1", CTX)
        assert repo.deleted == []


class TestQuoteQueries:

    @pytest.mark.asyncio
    async def test_show(self):
        handler = ShowQuoteHandler(FakeQuoteRepository([make_quote()]))
        dto = await handler.handle("q1", CTX)
        assert dto.quote_number == "QT-2024-0001"

    @pytest.mark.asyncio
    async def test_show_unknown(self):
        with pytest.raises(EntityNotFoundError):
            await ShowQuoteHandler(FakeQuoteRepository()).handle("q1", CTX)

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self):
        repo = FakeQuoteRepository(
            [make_quote(id="q1"), make_quote(id="q2", status=QuoteStatus.SENT)]
        )
        dtos = await ListQuotesHandler(repo).handle(CTX, status=QuoteStatus.SENT)
        assert [d.id for d in dtos] == ["q2"]
