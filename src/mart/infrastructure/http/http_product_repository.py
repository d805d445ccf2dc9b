"""HTTP-backed implementation of ProductRepository."""

from __future__ import annotations

from typing import Any

from mart.domain.exceptions import RemoteError
from mart.domain.model.composition import EntityType, SubEntity
from mart.domain.model.context import CallerContext
from mart.domain.model.product import Image, PriceTier, Product, Specification, Variant
from mart.domain.model.value_objects import Money, Quantity
from mart.domain.repository.product_repository import ProductRepository
from mart.infrastructure.http.api_client import ApiClient


class HttpProductRepository(ProductRepository):

    def __init__(self, client: ApiClient, currency: str = "USD") -> None:
        self._client = client
        self._currency = currency

    # --- ProductRepository interface ------------------------------------------

    async def get_by_id(self, product_id: str, ctx: CallerContext) -> Product | None:
        try:
            raw = await self._client.get(f"/products/{product_id}", ctx)
        except RemoteError as exc:
            if exc.status_code == 404:
                return None
            raise
        return self._to_domain(raw)

    async def add(self, product: Product, ctx: CallerContext) -> str:
        data = await self._client.post("/products", ctx, self._product_to_raw(product))
        return _extract_id(data)

    async def update(self, product: Product, ctx: CallerContext) -> str:
        data = await self._client.put(
            f"/products/{product.id}", ctx, self._product_to_raw(product)
        )
        return _extract_id(data, fallback=product.id)

    async def delete(self, product_id: str, ctx: CallerContext) -> None:
        await self._client.delete(f"/products/{product_id}", ctx)

    async def add_sub_entity(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> str:
        path = f"/products/{product_id}/{sub.entity_type.collection}"
        data = await self._client.post(path, ctx, self._sub_to_raw(sub))
        return _extract_id(data)

    async def update_sub_entity(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> str:
        path = f"/products/{product_id}/{sub.entity_type.collection}/{sub.entity_id}"
        data = await self._client.put(path, ctx, self._sub_to_raw(sub))
        return _extract_id(data, fallback=sub.entity_id)

    async def delete_sub_entity(
        self,
        product_id: str,
        entity_type: EntityType,
        entity_id: str,
        ctx: CallerContext,
    ) -> None:
        await self._client.delete(
            f"/products/{product_id}/{entity_type.collection}/{entity_id}", ctx
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _product_to_raw(product: Product) -> dict:
        return {
            "name": product.name,
            "description": product.description,
            "sku": product.sku,
            "basePrice": _money_to_raw(product.base_price),
            "minimumOrderQuantity": product.minimum_order_quantity,
            "available": product.available,
            "isBulkOnly": product.is_bulk_only,
            "category": {"id": product.category_id} if product.category_id else None,
            "seller": {"id": product.seller_id} if product.seller_id else None,
            "weight": product.weight,
            "weightUnit": product.weight_unit,
            "dimensions": product.dimensions,
        }

    @staticmethod
    def _sub_to_raw(sub: SubEntity) -> dict:
        entity = sub.entity
        if isinstance(entity, Variant):
            return {
                "sku": entity.sku,
                "variantName": entity.name,
                "basePrice": _money_to_raw(entity.base_price),
                "additionalPrice": _money_to_raw(entity.additional_price),
                "available": entity.available,
            }
        if isinstance(entity, Image):
            return {
                "variantSku": sub.variant_sku,
                "imageUrl": entity.url,
                "altText": entity.alt_text,
                "displayOrder": entity.display_order,
                "isPrimary": entity.is_primary,
            }
        if isinstance(entity, Specification):
            return {
                "specName": entity.name,
                "specValue": entity.value,
                "unit": entity.unit,
                "displayOrder": entity.display_order,
            }
        return {
            "variantSku": sub.variant_sku,
            "minQuantity": entity.min_quantity.value,
            "maxQuantity": entity.max_quantity.value if entity.max_quantity else None,
            "pricePerUnit": _money_to_raw(entity.price_per_unit),
            "isActive": entity.active,
        }

    def _to_domain(self, raw: dict) -> Product:
        return Product(
            id=str(raw["id"]),
            name=raw["name"],
            sku=raw.get("sku") or "",
            description=raw.get("description"),
            base_price=self._money(raw.get("basePrice")),
            minimum_order_quantity=raw.get("minimumOrderQuantity") or 1,
            available=raw.get("available", True),
            is_bulk_only=raw.get("isBulkOnly", False),
            category_id=_nested_id(raw.get("category")),
            seller_id=_nested_id(raw.get("seller")),
            weight=raw.get("weight"),
            weight_unit=raw.get("weightUnit"),
            dimensions=raw.get("dimensions"),
            variants=[self._variant_to_domain(v) for v in raw.get("variants") or []],
            specifications=[
                Specification(
                    id=_optional_str(s.get("id")),
                    name=s["specName"],
                    value=s["specValue"],
                    unit=s.get("unit"),
                    display_order=s.get("displayOrder"),
                )
                for s in raw.get("specifications") or []
            ],
        )

    def _variant_to_domain(self, raw: dict) -> Variant:
        return Variant(
            id=_optional_str(raw.get("id")),
            sku=raw["sku"],
            name=raw.get("variantName"),
            base_price=self._money(raw.get("basePrice")),
            additional_price=self._money(raw.get("additionalPrice")),
            available=raw.get("available", True),
            price_tiers=[
                PriceTier(
                    id=_optional_str(t.get("id")),
                    min_quantity=Quantity(t["minQuantity"]),
                    max_quantity=(
                        Quantity(t["maxQuantity"]) if t.get("maxQuantity") is not None else None
                    ),
                    price_per_unit=Money.of(t["pricePerUnit"], self._currency),
                    active=t.get("isActive", True),
                )
                for t in raw.get("priceTiers") or []
            ],
            images=[
                Image(
                    id=_optional_str(i.get("id")),
                    url=i["imageUrl"],
                    alt_text=i.get("altText"),
                    display_order=i.get("displayOrder"),
                    is_primary=i.get("isPrimary", False),
                )
                for i in raw.get("images") or []
            ],
        )

    def _money(self, value: Any) -> Money | None:
        return Money.optional(value, self._currency)


def _money_to_raw(money: Money | None) -> float | None:
    return float(money.amount) if money is not None else None


def _nested_id(raw: Any) -> str | None:
    if isinstance(raw, dict):
        return _optional_str(raw.get("id"))
    return _optional_str(raw)


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _extract_id(data: Any, fallback: str | None = None) -> str:
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    if isinstance(data, (str, int)) and not isinstance(data, bool):
        return str(data)
    if fallback is not None:
        return fallback
    raise RemoteError("Backend response did not include an id")
