"""CLI commands for the product catalog (shop owner)."""

from __future__ import annotations

import click

from greengrocer.application.add_product import AddProductHandler, ListProductsHandler
from greengrocer.application.update_product import UpdateProductHandler
from greengrocer.domain.exceptions import DomainException
from greengrocer.infrastructure.bootstrap import product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option(
    "--category",
    required=True,
    type=click.Choice(["vegetable", "fruit"], case_sensitive=False),
    help="Product category.",
)
@click.option("--price", required=True, help="Base price per kg, e.g. '2.50'.")
@click.option("--stock", required=True, help="Stock on hand in kg.")
@click.option("--threshold", required=True, help="Low-stock threshold in kg.")
def product_add(name: str, category: str, price: str, stock: str, threshold: str) -> None:
    """Add a product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        dto = handler.handle(
            name=name, category=category, price=price, stock=stock, threshold=threshold
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id} added: {dto.name} ({dto.category}) at {dto.base_price}/kg")


@click.command("list")
@click.option(
    "--category",
    type=click.Choice(["vegetable", "fruit"], case_sensitive=False),
    default=None,
    help="Only show one category.",
)
@click.option("--in-stock", is_flag=True, help="Hide products that are out of stock.")
def product_list(category: str | None, in_stock: bool) -> None:
    """List all products with their current prices."""
    handler = ListProductsHandler(product_repo=product_repository())
    try:
        products = handler.handle(category=category, in_stock_only=in_stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(
        f"{'ID':<12} {'Name':<20} {'Category':<10} {'Base':>8} {'Current':>8} "
        f"{'Stock':>12} {'Threshold':>12}"
    )
    click.echo("-" * 88)
    for p in products:
        flag = "  LOW" if p.low_stock else ""
        click.echo(
            f"{p.id:<12} {p.name:<20} {p.category:<10} {p.base_price:>8} "
            f"{p.current_price:>8} {p.stock:>12} {p.threshold:>12}{flag}"
        )


@click.command("price")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New base price per kg, e.g. '3.25'.")
def product_price(product_id: str, price: str) -> None:
    """Change a product's base price."""
    handler = UpdateProductHandler(product_repo=product_repository())

    try:
        handler.update_price(product_id=product_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} price updated to ${price}/kg")


@click.command("restock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--stock", required=True, help="New stock level in kg.")
def product_restock(product_id: str, stock: str) -> None:
    """Set a product's stock level."""
    handler = UpdateProductHandler(product_repo=product_repository())

    try:
        handler.restock(product_id=product_id, stock=stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} stock set to {stock} kg")
