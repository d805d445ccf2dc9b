"""Abstract repository for the Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. The backend saves one entity per call with no
cross-entity transaction, so the interface mirrors that: the product
record and each of its sub-entities are saved separately.

Every method takes the caller's ``CallerContext``; repositories never read
session state on their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mart.domain.model.composition import EntityType, SubEntity
from mart.domain.model.context import CallerContext
from mart.domain.model.product import Product



class ProductRepository(ABC):

    @abstractmethod
    async def get_by_id(self, product_id: str, ctx: CallerContext) -> Product | None:
        """Return a product with its full object graph, or None."""

    @abstractmethod
    async def add(self, product: Product, ctx: CallerContext) -> str:
        """Create the product record alone and return its new id."""

    @abstractmethod
    async def update(self, product: Product, ctx: CallerContext) -> str:
        """Update an existing product record and return its id."""

    @abstractmethod
    async def delete(self, product_id: str, ctx: CallerContext) -> None:
        """Ask the backend to delete a product."""

    @abstractmethod
    async def add_sub_entity(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> str:
        """Create one variant/image/specification/tier; return its id."""

    @abstractmethod
    async def update_sub_entity(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> str:
        """Update one existing sub-entity (``sub.entity_id`` is set)."""

    @abstractmethod
    async def delete_sub_entity(
        self,
        product_id: str,
        entity_type: EntityType,
        entity_id: str,
        ctx: CallerContext,
    ) -> None:
        """Delete one sub-entity."""
