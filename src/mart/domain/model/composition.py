"""The dependent records that make up a product's object graph.

The backend only saves one entity per call. A ``SubEntity`` is one such
call's worth of data: the entity itself, plus the variant SKU that images
and price tiers hang off (the variant may be created in the same batch, so
its id is not known yet).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mart.domain.model.product import Image, PriceTier, Specification, Variant


class EntityType(Enum):
    PRODUCT = "product"
    VARIANT = "variant"
    IMAGE = "image"
    SPECIFICATION = "specification"
    PRICE_TIER = "price tier"

    @property
    def collection(self) -> str:
        """URL segment of the entity's collection under a product."""
        return {
            EntityType.PRODUCT: "products",
            EntityType.VARIANT: "variants",
            EntityType.IMAGE: "images",
            EntityType.SPECIFICATION: "specifications",
            EntityType.PRICE_TIER: "price-tiers",
        }[self]

    @staticmethod
    def parse(raw: str) -> EntityType:
        normalized = raw.strip().lower().replace("-", " ").replace("_", " ")
        for kind in EntityType:
            # singular ("price tier") or collection form ("price tiers")
            if normalized in (kind.value, kind.collection.replace("-", " ")):
                return kind
        raise ValueError(f"Unknown entity type: {raw!r}")


@dataclass(frozen=True)
class SubEntity:
    entity_type: EntityType
    label: str
    entity: Variant | Image | Specification | PriceTier
    variant_sku: str | None = None

    @property
    def entity_id(self) -> str | None:
        return self.entity.id

    @property
    def is_new(self) -> bool:
        return self.entity.id is None
