"""Application service: Show Product use case (query)."""

from __future__ import annotations

from mart.domain.exceptions import EntityNotFoundError
from mart.domain.model.context import CallerContext
from mart.domain.model.product import Product
from mart.domain.repository.product_repository import ProductRepository


class ShowProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(self, product_id: str, ctx: CallerContext) -> Product:
        ctx.require()
        product = await self._product_repo.get_by_id(product_id, ctx)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product
