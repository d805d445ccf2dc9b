"""CLI commands for price checks."""

from __future__ import annotations

import asyncio

import click

from mart.application.check_price import CheckPriceHandler
from mart.application.dto import PriceCheckDTO
from mart.domain.exceptions import DomainException
from mart.infrastructure import bootstrap


@click.command("check")
@click.option("--product-id", required=True, help="Product ID.")
@click.option("--variant-id", required=True, help="Variant ID.")
@click.option("--quantity", required=True, type=int, help="Quantity to price.")
def price_check(product_id: str, variant_id: str, quantity: int) -> None:
    """Show the unit price and line total for a quantity of a variant."""

    async def _check() -> PriceCheckDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = CheckPriceHandler(bootstrap.product_repository(client, config))
            return await handler.handle(
                product_id, variant_id, quantity, bootstrap.caller_context(config)
            )

    try:
        dto = asyncio.run(_check())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{dto.product_name} / {dto.variant_label}")
    click.echo(f"  {dto.quantity} x {dto.unit_price} = {dto.line_total}")
    if not dto.meets_minimum:
        click.echo(
            f"  Below the minimum order of {dto.minimum_order_quantity}; "
            f"order at least {dto.suggested_quantity}."
        )
    if dto.price_breaks:
        click.echo("  Price breaks:")
        for label in dto.price_breaks:
            click.echo(f"    {label}")
