import click

from mart.domain.exceptions import DomainException
from mart.infrastructure import bootstrap
from mart.infrastructure.cli.price_commands import price_check
from mart.infrastructure.cli.product_commands import (
    product_compose,
    product_delete,
    product_remove_part,
    product_show,
)
from mart.infrastructure.cli.quote_commands import (
    quote_accept,
    quote_add_item,
    quote_create,
    quote_expire,
    quote_list,
    quote_reject,
    quote_remove_item,
    quote_send,
    quote_set_quantity,
    quote_show,
    quote_withdraw,
)


@click.group()
def cli() -> None:
    """Mart: B2B catalog and quotation client"""
    try:
        bootstrap.configure_logging(bootstrap.settings())
    except DomainException as exc:
        raise click.ClickException(f"Invalid configuration: {exc}")


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def price() -> None:
    """Check prices."""


@cli.group()
def quote() -> None:
    """Manage quotes."""


# Register subcommands
product.add_command(product_compose)
product.add_command(product_delete)
product.add_command(product_remove_part)
product.add_command(product_show)
price.add_command(price_check)
quote.add_command(quote_accept)
quote.add_command(quote_add_item)
quote.add_command(quote_create)
quote.add_command(quote_expire)
quote.add_command(quote_list)
quote.add_command(quote_reject)
quote.add_command(quote_remove_item)
quote.add_command(quote_send)
quote.add_command(quote_set_quantity)
quote.add_command(quote_show)
quote.add_command(quote_withdraw)
