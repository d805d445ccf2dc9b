"""Application service: Delete Product use case.

Deletion itself is the backend's job; this only issues the request for a
product the caller can see.
"""

from __future__ import annotations

import logging

from mart.domain.exceptions import EntityNotFoundError
from mart.domain.model.context import CallerContext
from mart.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class DeleteProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(self, product_id: str, ctx: CallerContext) -> None:
        ctx.require()
        product = await self._product_repo.get_by_id(product_id, ctx)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        await self._product_repo.delete(product_id, ctx)
        logger.info("Deleted product %s ('%s')", product_id, product.name)
