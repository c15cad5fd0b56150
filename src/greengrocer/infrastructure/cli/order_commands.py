"""CLI commands for the Order aggregate.

Times on the command line are read as UTC (``YYYY-MM-DD HH:MM``).
"""

from __future__ import annotations

from datetime import datetime, timezone

import click

from greengrocer.application.cancel_order import CancelOrderHandler
from greengrocer.application.claim_orders import ClaimOrdersHandler
from greengrocer.application.complete_order import CompleteOrderHandler
from greengrocer.application.dto import OrderDTO, OrderItemSpec
from greengrocer.application.manage_cart import FillCartHandler
from greengrocer.application.place_order import PlaceOrderHandler
from greengrocer.application.session import Session
from greengrocer.application.show_order import ListOrdersHandler, ShowOrderHandler
from greengrocer.domain.exceptions import DomainException
from greengrocer.infrastructure.bootstrap import (
    cart_store,
    coupon_repository,
    customer_repository,
    loyalty_repository,
    notifier,
    order_repository,
    product_repository,
)
from greengrocer.infrastructure.logging import bind_actor

_TIME = click.DateTime(formats=["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M"])


def _utc(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=timezone.utc) if value is not None else None


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'Tomato:1.5,Apple:2' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductName:Kg'."
            )
        name, kg = pair.rsplit(":", 1)
        specs.append(OrderItemSpec(product_name=name.strip(), quantity=kg.strip()))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}")
    if dto.carrier_id:
        click.echo(f"Carrier:  {dto.carrier_id}")
    click.echo(f"Placed:   {dto.order_time}")
    click.echo(f"Deliver:  {dto.requested_delivery}")
    if dto.delivery_time:
        click.echo(f"Delivered: {dto.delivery_time}")
    click.echo()

    click.echo(f"  {'Product':<20} {'Qty':>10} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*53}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>10} {item.unit_price:>10} "
            f"{item.line_total:>10}"
        )
    click.echo(f"  {'-'*53}")
    click.echo(f"  {'Subtotal':<31} {dto.subtotal:>22}")
    click.echo(f"  {'Discount (' + dto.discount_percent + ')':<31} {'-' + dto.discount:>22}")
    click.echo(f"  {'VAT (18%)':<31} {dto.vat:>22}")
    click.echo(f"  {'Order Total':<31} {dto.total:>22}")
    if dto.status == "PENDING":
        click.echo(f"Cancellable for another {dto.cancellation_hours_left} hour(s).")


@click.command("place")
@click.option("--customer", required=True, help="Customer user ID.")
@click.option("--items", required=True, help="Items as 'Product:Kg,Product:Kg'.")
@click.option("--deliver-at", required=True, type=_TIME, help="Requested delivery (UTC).")
@click.option("--coupon", default=None, help="Coupon code to apply.")
@click.option("--use-loyalty", is_flag=True, help="Spend the loyalty discount.")
def order_place(
    customer: str, items: str, deliver_at: datetime, coupon: str | None, use_loyalty: bool
) -> None:
    """Check out a cart as a new order."""
    specs = _parse_items(items)
    bind_actor(customer_id=customer)

    carts = cart_store()
    session = Session(user_id=customer)
    fill = FillCartHandler(product_repo=product_repository(), carts=carts)
    handler = PlaceOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        coupon_repo=coupon_repository(),
        customer_repo=customer_repository(),
        loyalty_repo=loyalty_repository(),
        notifier=notifier(),
        carts=carts,
    )

    try:
        fill.handle(session, specs)
        dto = handler.handle(
            session,
            requested_delivery=_utc(deliver_at),
            coupon_code=coupon,
            use_loyalty=use_loyalty,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        carts.logout(session)

    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="PENDING, SELECTED, DELIVERED or CANCELLED.")
@click.option("--customer", default=None, help="Only this customer's orders.")
@click.option("--carrier", default=None, help="Only orders held by this carrier.")
def order_list(status: str | None, customer: str | None, carrier: str | None) -> None:
    """List orders (pending ones by default)."""
    handler = ListOrdersHandler(order_repo=order_repository())

    try:
        orders = handler.handle(status=status, customer_id=customer, carrier_id=carrier)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':>5} {'Status':<10} {'Customer':<14} {'Deliver by':<22} {'Total':>10}")
    click.echo("-" * 65)
    for o in orders:
        click.echo(
            f"{o.id:>5} {o.status:<10} {o.customer_id:<14} {o.requested_delivery:<22} "
            f"{o.total:>10}"
        )


@click.command("claim")
@click.option("--carrier", required=True, help="Carrier user ID.")
@click.option("--id", "order_ids", required=True, multiple=True, type=int, help="Order ID.")
def order_claim(carrier: str, order_ids: tuple[int, ...]) -> None:
    """Select pending orders for delivery."""
    bind_actor(carrier_id=carrier)
    handler = ClaimOrdersHandler(order_repo=order_repository())

    try:
        report = handler.handle(carrier_id=carrier, order_ids=list(order_ids))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for order_id in report.claimed:
        click.echo(f"Order #{order_id} selected for delivery.")
    for order_id in report.already_claimed:
        click.echo(f"Order #{order_id} was already selected by another carrier.")
    for order_id in report.unavailable:
        click.echo(f"Order #{order_id} is no longer available.")
    if not report.claimed:
        raise click.ClickException("No orders were selected.")


@click.command("complete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--carrier", required=True, help="Carrier user ID.")
@click.option("--delivered-at", type=_TIME, default=None, help="Delivery time (UTC); now if omitted.")
def order_complete(order_id: int, carrier: str, delivered_at: datetime | None) -> None:
    """Mark a selected order delivered."""
    bind_actor(carrier_id=carrier)
    handler = CompleteOrderHandler(
        order_repo=order_repository(),
        customer_repo=customer_repository(),
        notifier=notifier(),
    )

    try:
        dto = handler.handle(order_id, carrier, _utc(delivered_at))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} delivered at {dto.delivery_time}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--customer", required=True, help="Customer user ID.")
def order_cancel(order_id: int, customer: str) -> None:
    """Cancel a pending order within 24 hours of placing it."""
    bind_actor(customer_id=customer)
    handler = CancelOrderHandler(order_repo=order_repository())

    try:
        handler.handle(order_id, customer)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")
