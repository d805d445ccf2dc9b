"""CLI commands for the Quote aggregate."""

from __future__ import annotations

import asyncio
from datetime import datetime

import click

from mart.application.change_quote_status import ChangeQuoteStatusHandler
from mart.application.create_quote import CreateQuoteHandler
from mart.application.dto import QuoteDTO, QuoteItemSpec
from mart.application.show_quote import ListQuotesHandler, ShowQuoteHandler
from mart.application.update_quote_items import (
    AddQuoteItemHandler,
    ChangeQuoteItemQuantityHandler,
    RemoveQuoteItemHandler,
)
from mart.application.withdraw_quote import WithdrawQuoteHandler
from mart.domain.exceptions import DomainException
from mart.domain.model.quote import QuoteStatus
from mart.infrastructure import bootstrap


def _parse_items(raw: str) -> list[QuoteItemSpec]:
    """Parse 'p1:v1:100,p2:v3:50' into QuoteItemSpec list."""
    specs: list[QuoteItemSpec] = []
    for triple in raw.split(","):
        triple = triple.strip()
        parts = triple.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item format '{triple}'. Expected 'ProductId:VariantId:Quantity'."
            )
        product_id, variant_id, qty_str = (p.strip() for p in parts)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for variant '{variant_id}'."
            )
        specs.append(
            QuoteItemSpec(product_id=product_id, variant_id=variant_id, quantity=qty)
        )
    return specs


def _display_quote(dto: QuoteDTO) -> None:
    """Shared formatting for displaying a quote."""
    click.echo(f"Quote {dto.quote_number}  #{dto.id}  (status={dto.status})")
    click.echo(f"Buyer: {dto.buyer_id}   Seller: {dto.seller_id}")
    click.echo(f"Valid until: {dto.valid_until}")
    if dto.notes:
        click.echo(f"Notes: {dto.notes}")
    click.echo()
    click.echo(
        f"  {'Line':<34} {'Product':<20} {'Variant':<15} {'Qty':>6} {'Price':>10} {'Total':>12}"
    )
    click.echo(f"  {'-'*102}")
    for item in dto.items:
        click.echo(
            f"  {item.id:<34} {item.product_name:<20} {item.variant_label:<15} "
            f"{item.quantity:>6} {item.quoted_price:>10} {item.total_price:>12}"
        )
    click.echo(f"  {'-'*102}")
    click.echo(f"  {'Subtotal':<20} {dto.subtotal:>82}")
    click.echo(f"  {'Tax':<20} {dto.tax_amount:>82}")
    click.echo(f"  {'Total':<20} {dto.total_amount:>82}")


def _run(handler_call) -> QuoteDTO:
    try:
        return asyncio.run(handler_call())
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("create")
@click.option("--buyer", "buyer_id", required=True, help="Buyer user ID.")
@click.option(
    "--items", required=True, help="Items as 'ProductId:VariantId:Qty,...'."
)
@click.option(
    "--valid-until", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="Last day the quote can be accepted.",
)
@click.option("--notes", default=None, help="Free-text notes for the buyer.")
def quote_create(
    buyer_id: str, items: str, valid_until: datetime | None, notes: str | None
) -> None:
    """Create a draft quote for a buyer."""
    specs = _parse_items(items)

    async def _create() -> QuoteDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = CreateQuoteHandler(
                quote_repo=bootstrap.quote_repository(client),
                product_repo=bootstrap.product_repository(client, config),
                tax_rate=config.tax_rate,
                validity_days=config.quote_validity_days,
                currency=config.currency,
            )
            return await handler.handle(
                buyer_id,
                specs,
                bootstrap.caller_context(config),
                valid_until=valid_until.date() if valid_until else None,
                notes=notes,
            )

    dto = _run(_create)
    click.echo("Quote created.")
    _display_quote(dto)


@click.command("add-item")
@click.option("--id", "quote_id", required=True, help="Quote ID.")
@click.option("--product-id", required=True, help="Product ID.")
@click.option("--variant-id", required=True, help="Variant ID.")
@click.option("--quantity", required=True, type=int, help="Quantity.")
def quote_add_item(
    quote_id: str, product_id: str, variant_id: str, quantity: int
) -> None:
    """Add a line to a draft quote."""
    spec = QuoteItemSpec(product_id=product_id, variant_id=variant_id, quantity=quantity)

    async def _add() -> QuoteDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = AddQuoteItemHandler(
                quote_repo=bootstrap.quote_repository(client),
                product_repo=bootstrap.product_repository(client, config),
            )
            return await handler.handle(quote_id, spec, bootstrap.caller_context(config))

    _display_quote(_run(_add))


@click.command("remove-item")
@click.option("--id", "quote_id", required=True, help="Quote ID.")
@click.option("--line", "line_id", required=True, help="Line item ID.")
def quote_remove_item(quote_id: str, line_id: str) -> None:
    """Remove a line from a draft quote."""

    async def _remove() -> QuoteDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = RemoveQuoteItemHandler(bootstrap.quote_repository(client))
            return await handler.handle(quote_id, line_id, bootstrap.caller_context(config))

    _display_quote(_run(_remove))


@click.command("set-quantity")
@click.option("--id", "quote_id", required=True, help="Quote ID.")
@click.option("--line", "line_id", required=True, help="Line item ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
def quote_set_quantity(quote_id: str, line_id: str, quantity: int) -> None:
    """Change the quantity of a line on a draft quote."""

    async def _change() -> QuoteDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = ChangeQuoteItemQuantityHandler(bootstrap.quote_repository(client))
            return await handler.handle(
                quote_id, line_id, quantity, bootstrap.caller_context(config)
            )

    _display_quote(_run(_change))


def _status_command(name: str, target: QuoteStatus, summary: str, past: str):
    @click.command(name, help=summary)
    @click.option("--id", "quote_id", required=True, help="Quote ID.")
    def command(quote_id: str) -> None:
        async def _change() -> QuoteDTO:
            config = bootstrap.settings()
            async with bootstrap.api_client(config) as client:
                handler = ChangeQuoteStatusHandler(bootstrap.quote_repository(client))
                return await handler.handle(
                    quote_id, target, bootstrap.caller_context(config)
                )

        dto = _run(_change)
        click.echo(f"Quote {dto.quote_number} {past}.")

    return command


quote_send = _status_command("send", QuoteStatus.SENT, "Send a draft quote to the buyer.", "sent")
quote_accept = _status_command("accept", QuoteStatus.ACCEPTED, "Accept a sent quote.", "accepted")
quote_reject = _status_command("reject", QuoteStatus.REJECTED, "Reject a sent quote.", "rejected")
quote_expire = _status_command(
    "expire", QuoteStatus.EXPIRED, "Expire a quote past its validity date.", "expired"
)


@click.command("withdraw")
@click.option("--id", "quote_id", required=True, help="Quote ID.")
def quote_withdraw(quote_id: str) -> None:
    """Withdraw (delete) a quote that is still a draft."""

    async def _withdraw() -> QuoteDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = WithdrawQuoteHandler(bootstrap.quote_repository(client))
            return await handler.handle(quote_id, bootstrap.caller_context(config))

    dto = _run(_withdraw)
    click.echo(f"Quote {dto.quote_number} withdrawn.")

@click.command("show")
@click.option("--id", "quote_id", required=True, help="Quote ID to display.")
def quote_show(quote_id: str) -> None:
    """Show details of an existing quote."""

    async def _show() -> QuoteDTO:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = ShowQuoteHandler(bootstrap.quote_repository(client))
            return await handler.handle(quote_id, bootstrap.caller_context(config))

    _display_quote(_run(_show))


@click.command("list")
@click.option("--buyer", "buyer_id", default=None, help="Only quotes for this buyer.")
@click.option("--seller", "seller_id", default=None, help="Only quotes from this seller.")
@click.option(
    "--status", default=None,
    type=click.Choice([s.value for s in QuoteStatus], case_sensitive=False),
    help="Only quotes in this status.",
)
def quote_list(buyer_id: str | None, seller_id: str | None, status: str | None) -> None:
    """List quotes."""

    async def _list() -> list[QuoteDTO]:
        config = bootstrap.settings()
        async with bootstrap.api_client(config) as client:
            handler = ListQuotesHandler(bootstrap.quote_repository(client))
            return await handler.handle(
                bootstrap.caller_context(config),
                buyer_id=buyer_id,
                seller_id=seller_id,
                status=QuoteStatus(status.upper()) if status else None,
            )

    try:
        quotes = asyncio.run(_list())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not quotes:
        click.echo("No quotes found.")
        return

    click.echo(f"  {'ID':<10} {'Number':<14} {'Buyer':<12} {'Status':<10} {'Valid until':<12} {'Total':>12}")
    click.echo(f"  {'-'*75}")
    for dto in quotes:
        click.echo(
            f"  {dto.id:<10} {dto.quote_number:<14} {dto.buyer_id:<12} "
            f"{dto.status:<10} {dto.valid_until:<12} {dto.total_amount:>12}"
        )
