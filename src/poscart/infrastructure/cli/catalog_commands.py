"""CLI commands for browsing the catalog snapshot."""

from __future__ import annotations

from pathlib import Path

import click

from poscart.domain.exceptions import DomainException
from poscart.domain.model.value_objects import format_quantity
from poscart.infrastructure.bootstrap import catalog_repository
from poscart.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)

_catalog_option = click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Catalog JSON file (defaults to POSCART_CATALOG_PATH).",
)


def _open_catalog(catalog_path: Path | None) -> JsonCatalogRepository:
    try:
        return catalog_repository(path=catalog_path)
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("list")
@_catalog_option
def catalog_list(catalog_path: Path | None) -> None:
    """List all products with their total stock."""
    repo = _open_catalog(catalog_path)
    products = repo.list_products()
    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<10} {'Name':<30} {'Price':>14} {'Stock':>10}  Alert")
    click.echo("-" * 74)
    for p in products:
        stock = f"{format_quantity(p.total_stock)} {p.base_unit}" if p.track_stock else "-"
        alert = "LOW" if p.is_below_min_stock else ""
        click.echo(f"{p.id:<10} {p.name:<30} {str(p.price):>14} {stock:>10}  {alert}")


@click.command("show")
@click.option("--id", "product_id", required=True, help="Product ID.")
@_catalog_option
def catalog_show(product_id: str, catalog_path: Path | None) -> None:
    """Show packages, stock per warehouse and batches of a product."""
    repo = _open_catalog(catalog_path)
    product = repo.get_product(product_id)
    if product is None:
        raise click.ClickException(f"Product '{product_id}' not found")

    click.echo(f"{product.name}  ({product.id}, {product.kind.value})")
    click.echo(f"Base unit: {product.base_unit}   Price: {product.price}")
    if product.min_purchase_quantity:
        click.echo(
            f"Minimum purchase: {format_quantity(product.min_purchase_quantity)} {product.base_unit}"
        )
    if product.stock_policy is not None:
        click.echo(f"Stock policy: {product.stock_policy.value}")
    click.echo()

    click.echo(f"  {'Package':<10} {'Factor':>8} {'Price':>14}  EAN")
    click.echo(f"  {'-'*50}")
    for pkg in product.packages:
        click.echo(
            f"  {pkg.name:<10} {format_quantity(pkg.factor):>8} "
            f"{str(product.price_for(pkg)):>14}  {pkg.ean}"
        )

    if not product.track_stock:
        click.echo()
        click.echo("  Stock is not tracked for this product.")
        return

    click.echo()
    click.echo(f"  {'Warehouse':<30} {'Stock':>10}")
    click.echo(f"  {'-'*41}")
    for level in product.stock_levels:
        click.echo(
            f"  {repo.warehouse_name(level.warehouse_id):<30} "
            f"{format_quantity(level.quantity):>10}"
        )

    if product.batches:
        click.echo()
        click.echo(f"  {'Batch':<12} {'Expiry':<12} {'Qty':>8}  Warehouse")
        click.echo(f"  {'-'*50}")
        for batch in product.batches:
            click.echo(
                f"  {batch.number:<12} {batch.expiry_date:<12} "
                f"{format_quantity(batch.quantity):>8}  {repo.warehouse_name(batch.warehouse_id)}"
            )
