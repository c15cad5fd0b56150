"""CLI commands for customers and the loyalty policy."""

from __future__ import annotations

import click

from greengrocer.application.manage_customers import (
    AddCustomerHandler,
    ShowCustomerHandler,
    ShowLoyaltySettingsHandler,
    UpdateLoyaltySettingsHandler,
)
from greengrocer.domain.exceptions import DomainException
from greengrocer.infrastructure.bootstrap import customer_repository, loyalty_repository


@click.command("add")
@click.option("--id", "customer_id", required=True, help="Customer user ID.")
@click.option("--name", required=True, help="Display name.")
def customer_add(customer_id: str, name: str) -> None:
    """Register a customer."""
    handler = AddCustomerHandler(customer_repo=customer_repository())

    try:
        handler.handle(customer_id=customer_id, name=name)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer {customer_id} registered.")


@click.command("show")
@click.option("--id", "customer_id", required=True, help="Customer user ID.")
def customer_show(customer_id: str) -> None:
    """Show a customer's loyalty progress."""
    handler = ShowCustomerHandler(
        customer_repo=customer_repository(),
        loyalty_repo=loyalty_repository(),
    )

    try:
        dto = handler.handle(customer_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer: {dto.name} ({dto.id})")
    click.echo(f"Completed orders: {dto.completed_orders}")
    if dto.loyalty_eligible:
        click.echo("Loyalty discount: available")
    else:
        click.echo(f"Loyalty discount: {dto.orders_until_eligible} more order(s) to go")


@click.command("show")
def loyalty_show() -> None:
    """Show the loyalty policy."""
    settings = ShowLoyaltySettingsHandler(loyalty_repo=loyalty_repository()).handle()
    click.echo(
        f"{settings.discount_percent}% off after "
        f"{settings.min_orders_for_discount} completed orders"
    )


@click.command("set")
@click.option("--min-orders", required=True, type=int, help="Completed orders required.")
@click.option("--percent", required=True, help="Discount percentage.")
def loyalty_set(min_orders: int, percent: str) -> None:
    """Change the loyalty policy."""
    handler = UpdateLoyaltySettingsHandler(loyalty_repo=loyalty_repository())

    try:
        settings = handler.handle(min_orders=min_orders, discount_percent=percent)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Loyalty policy updated: {settings.discount_percent}% off after "
        f"{settings.min_orders_for_discount} completed orders"
    )
