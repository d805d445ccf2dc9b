"""CLI commands for the Product aggregate."""

from __future__ import annotations

import asyncio
import json

import click

from mart.application.compose_product import ComposeProductHandler
from mart.application.delete_product import DeleteProductHandler
from mart.application.dto import (
    CompositionOutcome,
    CompositionResult,
    ImageDraft,
    PriceTierDraft,
    ProductDraft,
    SpecificationDraft,
    VariantDraft,
)
from mart.application.remove_sub_entity import RemoveSubEntityHandler
from mart.application.show_product import ShowProductHandler
from mart.domain.exceptions import DomainException
from mart.domain.model.composition import EntityType
from mart.domain.model.product import Product
from mart.domain.service.price_resolver import display_price, price_breaks
from mart.infrastructure import bootstrap

# Exit status when the product was saved but some parts were not
EXIT_PARTIAL = 2


def _parse_draft(raw: dict) -> ProductDraft:
    """Build a ProductDraft from the snake_case JSON a seller prepared."""
    try:
        variants = [
            VariantDraft(
                **{
                    **v,
                    "price_tiers": [PriceTierDraft(**t) for t in v.get("price_tiers", [])],
                    "images": [ImageDraft(**i) for i in v.get("images", [])],
                }
            )
            for v in raw.get("variants", [])
        ]
        specifications = [SpecificationDraft(**s) for s in raw.get("specifications", [])]
        return ProductDraft(
            **{**raw, "variants": variants, "specifications": specifications}
        )
    except TypeError as exc:
        raise click.BadParameter(f"Invalid product draft: {exc}")


def _display_composition(result: CompositionResult) -> None:
    if result.outcome == CompositionOutcome.FULL_SUCCESS:
        click.echo(
            f"Product #{result.product_id} saved with all "
            f"{len(result.sub_results)} variants, images, specifications and tiers."
        )
        return

    click.echo(f"Product #{result.product_id} saved, but some parts were not:")
    click.echo()
    click.echo(f"  {'Type':<15} {'Item':<45} Error")
    click.echo(f"  {'-'*80}")
    for failure in result.failures:
        reason = failure.error.reason if failure.error else "unknown error"
        click.echo(f"  {failure.entity_type.value:<15} {failure.label:<45} {reason}")
    click.echo()
    click.echo(
        f"  {len(result.successes)} saved, {len(result.failures)} failed. "
        f"Re-submit just the failed items to finish."
    )


@click.command("compose")
@click.option(
    "--file", "draft_file", required=True,
    type=click.Path(exists=True, dir_okay=False), help="Product draft JSON file.",
)
@click.option("--product-id", default=None, help="Update this existing product.")
def product_compose(draft_file: str, product_id: str | None) -> None:
    """Create or update a product with all its parts."""
    try:
        with open(draft_file, encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{draft_file} is not valid JSON: {exc}")
    if product_id is not None:
        raw["id"] = product_id
    draft = _parse_draft(raw)

    async def _compose() -> CompositionResult:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = ComposeProductHandler(
                bootstrap.product_repository(client, config),
                timeout=config.request_timeout,
                currency=config.currency,
            )
            return await handler.handle(draft, bootstrap.caller_context(config))

    try:
        result = asyncio.run(_compose())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.outcome == CompositionOutcome.TOTAL_FAILURE:
        raise click.ClickException(f"Nothing was saved. {result.error}")

    _display_composition(result)
    if result.outcome == CompositionOutcome.PARTIAL_SUCCESS:
        raise SystemExit(EXIT_PARTIAL)


def _display_product(product: Product) -> None:
    click.echo(f"Product #{product.id} '{product.name}'  (SKU {product.sku})")
    click.echo(f"MOQ: {product.minimum_order_quantity}   Available: {product.available}")
    click.echo()
    for variant in product.variants:
        price = display_price(variant, product)
        click.echo(
            f"  Variant {variant.label:<25} from {str(price) if price else 'N/A':>10}"
        )
        for tier in price_breaks(variant):
            click.echo(f"      {tier.label}")
        primary = variant.primary_image
        if primary is not None:
            click.echo(f"      image: {primary.url}")
    if product.specifications:
        click.echo()
        for spec in product.specifications:
            click.echo(f"  {spec.label}")


@click.command("show")
@click.option("--id", "product_id", required=True, help="Product ID to display.")
def product_show(product_id: str) -> None:
    """Show a product with its variants and price breaks."""

    async def _show() -> Product:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = ShowProductHandler(bootstrap.product_repository(client, config))
            return await handler.handle(product_id, bootstrap.caller_context(config))

    try:
        product = asyncio.run(_show())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_product(product)


@click.command("delete")
@click.option("--id", "product_id", required=True, help="Product ID to delete.")
def product_delete(product_id: str) -> None:
    """Delete a product."""

    async def _delete() -> None:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = DeleteProductHandler(bootstrap.product_repository(client, config))
            await handler.handle(product_id, bootstrap.caller_context(config))

    try:
        asyncio.run(_delete())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} deleted.")


@click.command("remove-part")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option(
    "--kind", required=True,
    type=click.Choice(["variant", "image", "specification", "price-tier"]),
    help="Which kind of part to remove.",
)
@click.option("--part-id", required=True, help="ID of the part to remove.")
def product_remove_part(product_id: str, kind: str, part_id: str) -> None:
    """Remove one variant, image, specification or price tier."""
    entity_type = EntityType.parse(kind)

    async def _remove() -> None:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = RemoveSubEntityHandler(bootstrap.product_repository(client, config))
            await handler.handle(
                product_id, entity_type, part_id, bootstrap.caller_context(config)
            )

    try:
        asyncio.run(_remove())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Removed {entity_type.value} {part_id} from product #{product_id}.")
