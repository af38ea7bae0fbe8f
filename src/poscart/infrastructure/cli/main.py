import logging

import click

from poscart.config import load_settings
from poscart.infrastructure.cli.cart_commands import cart_run
from poscart.infrastructure.cli.catalog_commands import catalog_list, catalog_show


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log cart decisions.")
def cli(verbose: bool) -> None:
    """POS Cart — point-of-sale cart allocation"""
    level = "INFO" if verbose else load_settings().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


@cli.group()
def catalog() -> None:
    """Browse the catalog snapshot."""


@cli.group()
def cart() -> None:
    """Run cart sessions."""


# Register subcommands
catalog.add_command(catalog_list)
catalog.add_command(catalog_show)

cart.add_command(cart_run)
