"""Application service: Compose Product use case.

Creates or updates a product together with its variants, images,
specifications and price tiers. The backend saves one entity per call and
cannot roll back across entities, so an all-or-nothing save is not
possible. Instead:

  1. Save the product record alone. If that fails nothing was persisted:
     stop, and attempt no sub-entity.
  2. Save every sub-entity concurrently and independently, tagged with the
     product id. One failure never cancels or blocks another.
  3. Wait for all of them, then classify the whole as FULL_SUCCESS,
     PARTIAL_SUCCESS or TOTAL_FAILURE, naming every failed sub-entity so a
     retry can target just those.

Drafts carrying an id update the existing record; drafts without one are
created. Sub-entities missing from the draft are left alone (deleting them
is the separate RemoveSubEntityHandler).
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import TypeVar

from mart.application.dto import (
    CompositionOutcome,
    CompositionResult,
    ProductDraft,
    SubEntityResult,
)
from mart.domain.exceptions import (
    DomainException,
    ProductCreationFailed,
    RemoteUnavailable,
    SubEntityCreationFailed,
)
from mart.domain.model.composition import EntityType, SubEntity
from mart.domain.model.context import CallerContext
from mart.domain.model.product import Image, PriceTier, Product, Specification, Variant
from mart.domain.model.value_objects import Money
from mart.domain.repository.product_repository import ProductRepository
from mart.domain.service.price_resolver import find_overlapping_tiers

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ComposeProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        timeout: float = 10.0,
        currency: str = "USD",
    ) -> None:
        self._product_repo = product_repo
        self._timeout = timeout
        self._currency = currency

    async def handle(
        self,
        draft: ProductDraft,
        ctx: CallerContext,
        on_full_success: Callable[[], None] | None = None,
    ) -> CompositionResult:
        """Save *draft* and return the classified outcome.

        Raises ValidationError (before any remote call) for an incomplete
        or malformed draft and Unauthorized without a credential. Remote
        failures are never raised; they are reported in the result.
        ``on_full_success`` runs only when every entity was saved, e.g. to
        clear the input form.
        """
        ctx.require()
        product = build_product(draft, seller_id=ctx.user_id, currency=self._currency)
        product.assert_complete()
        self._warn_about_overlaps(product)

        # Step 1: the product record alone
        mode = "update" if draft.is_update else "create"
        logger.info("Saving product '%s' (%s)", product.name, mode)
        try:
            if draft.is_update:
                product_id = await self._call(self._product_repo.update(product, ctx))
            else:
                product_id = await self._call(self._product_repo.add(product, ctx))
        except DomainException as exc:
            error = ProductCreationFailed(EntityType.PRODUCT.value, product.name, str(exc))
            logger.error("Product '%s' was not saved: %s", product.name, exc)
            return CompositionResult(
                outcome=CompositionOutcome.TOTAL_FAILURE,
                product_id=None,
                error=error,
            )

        # Step 2: every sub-entity at once, each settling on its own
        subs = flatten_sub_entities(product)
        logger.info("Product %s saved; submitting %d sub-entities", product_id, len(subs))
        tasks = [
            asyncio.ensure_future(self._submit(product_id, sub, ctx)) for sub in subs
        ]
        # Shielded: if our caller goes away, requests already issued still finish
        settled = await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))

        # Step 3: classify
        sub_results = [
            outcome if isinstance(outcome, SubEntityResult) else self._unexpected(sub, outcome)
            for sub, outcome in zip(subs, settled)
        ]
        failed = [r for r in sub_results if not r.success]
        if failed:
            logger.warning(
                "Product %s saved with %d of %d sub-entities failing",
                product_id, len(failed), len(sub_results),
            )
            outcome = CompositionOutcome.PARTIAL_SUCCESS
        else:
            logger.info("Product %s and all %d sub-entities saved", product_id, len(sub_results))
            outcome = CompositionOutcome.FULL_SUCCESS
            if on_full_success is not None:
                on_full_success()

        return CompositionResult(
            outcome=outcome,
            product_id=product_id,
            sub_results=sub_results,
        )

    # --- Internal helpers -----------------------------------------------------

    async def _submit(
        self, product_id: str, sub: SubEntity, ctx: CallerContext
    ) -> SubEntityResult:
        try:
            if sub.is_new:
                entity_id = await self._call(
                    self._product_repo.add_sub_entity(product_id, sub, ctx)
                )
            else:
                entity_id = await self._call(
                    self._product_repo.update_sub_entity(product_id, sub, ctx)
                )
        except DomainException as exc:
            logger.warning("%s '%s' failed: %s", sub.entity_type.value, sub.label, exc)
            return SubEntityResult(
                entity_type=sub.entity_type,
                label=sub.label,
                success=False,
                error=SubEntityCreationFailed(sub.entity_type.value, sub.label, str(exc)),
                entity_id=sub.entity_id,
            )
        return SubEntityResult(
            entity_type=sub.entity_type,
            label=sub.label,
            success=True,
            entity_id=entity_id,
        )

    async def _call(self, call: Awaitable[T]) -> T:
        """Await one remote call under its own timeout."""
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise RemoteUnavailable(f"No response within {self._timeout:g}s") from exc

    @staticmethod
    def _unexpected(sub: SubEntity, exc: BaseException) -> SubEntityResult:
        logger.error(
            "%s '%s' failed unexpectedly", sub.entity_type.value, sub.label, exc_info=exc
        )
        return SubEntityResult(
            entity_type=sub.entity_type,
            label=sub.label,
            success=False,
            error=SubEntityCreationFailed(
                sub.entity_type.value, sub.label, f"{type(exc).__name__}: {exc}"
            ),
            entity_id=sub.entity_id,
        )

    @staticmethod
    def _warn_about_overlaps(product: Product) -> None:
        for variant in product.variants:
            for first, second in find_overlapping_tiers(variant.price_tiers):
                logger.warning(
                    "Variant '%s' has overlapping price tiers %s and %s; "
                    "the higher threshold wins",
                    variant.sku, first.label, second.label,
                )


# --- Draft -> domain mapping --------------------------------------------------


def build_product(draft: ProductDraft, seller_id: str | None, currency: str = "USD") -> Product:
    """Turn form input into a validated Product aggregate.

    Raises ValidationError on the first malformed value.
    """
    variants = [
        Variant.create(
            sku=v.sku,
            name=v.name,
            base_price=Money.optional(v.base_price, currency),
            additional_price=Money.optional(v.additional_price, currency),
            available=v.available,
            price_tiers=[
                PriceTier.create(
                    min_quantity=t.min_quantity,
                    max_quantity=t.max_quantity,
                    price_per_unit=t.price_per_unit,
                    active=t.active,
                    id=t.id,
                    currency=currency,
                )
                for t in v.price_tiers
            ],
            images=[
                Image(
                    url=i.url,
                    alt_text=i.alt_text,
                    display_order=i.display_order,
                    is_primary=i.is_primary,
                    id=i.id,
                )
                for i in v.images
            ],
            id=v.id,
        )
        for v in draft.variants
    ]
    specifications = [
        Specification(
            name=s.name,
            value=s.value,
            unit=s.unit,
            display_order=s.display_order,
            id=s.id,
        )
        for s in draft.specifications
    ]
    return Product.create(
        name=draft.name,
        sku=draft.sku,
        variants=variants,
        specifications=specifications,
        minimum_order_quantity=draft.minimum_order_quantity,
        id=draft.id,
        description=draft.description,
        base_price=Money.optional(draft.base_price, currency),
        available=draft.available,
        is_bulk_only=draft.is_bulk_only,
        category_id=draft.category_id,
        seller_id=seller_id,
        weight=draft.weight,
        weight_unit=draft.weight_unit,
        dimensions=draft.dimensions,
    )


def flatten_sub_entities(product: Product) -> list[SubEntity]:
    """Every dependent record of *product*, one per backend call."""
    subs: list[SubEntity] = []
    for variant in product.variants:
        subs.append(SubEntity(EntityType.VARIANT, f"Variant {variant.label}", variant))
        for image in variant.images:
            subs.append(
                SubEntity(
                    EntityType.IMAGE,
                    f"Image {image.alt_text or image.url} ({variant.sku})",
                    image,
                    variant_sku=variant.sku,
                )
            )
        for tier in variant.price_tiers:
            subs.append(
                SubEntity(
                    EntityType.PRICE_TIER,
                    f"Price tier {tier.label} ({variant.sku})",
                    tier,
                    variant_sku=variant.sku,
                )
            )
    for spec in product.specifications:
        subs.append(SubEntity(EntityType.SPECIFICATION, f"Specification {spec.label}", spec))
    return _disambiguate(subs)


def _disambiguate(subs: list[SubEntity]) -> list[SubEntity]:
    """Number repeated labels (" #1", " #2") so each failure names one record."""
    counts = Counter(sub.label for sub in subs)
    seen: Counter[str] = Counter()
    unique: list[SubEntity] = []
    for sub in subs:
        if counts[sub.label] > 1:
            seen[sub.label] += 1
            sub = replace(sub, label=f"{sub.label} #{seen[sub.label]}")
        unique.append(sub)
    return unique
