"""Application service: Remove one variant, image, specification or tier.

Saving a product never deletes sub-entities that were left out of the
draft; removing one is always this explicit call.
"""

from __future__ import annotations

import logging

from mart.domain.exceptions import ValidationError
from mart.domain.model.composition import EntityType
from mart.domain.model.context import CallerContext
from mart.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class RemoveSubEntityHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(
        self,
        product_id: str,
        entity_type: EntityType,
        entity_id: str,
        ctx: CallerContext,
    ) -> None:
        ctx.require()
        if entity_type == EntityType.PRODUCT:
            raise ValidationError("Use product deletion to remove the product itself")

        await self._product_repo.delete_sub_entity(product_id, entity_type, entity_id, ctx)
        logger.info(
            "Removed %s %s from product %s", entity_type.value, entity_id, product_id
        )
