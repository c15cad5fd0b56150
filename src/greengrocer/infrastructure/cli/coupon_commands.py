"""CLI commands for coupon administration (shop owner)."""

from __future__ import annotations

from datetime import datetime

import click

from greengrocer.application.manage_coupons import (
    CreateCouponHandler,
    DeactivateCouponHandler,
    ListCouponsHandler,
)
from greengrocer.domain.exceptions import DomainException
from greengrocer.infrastructure.bootstrap import coupon_repository


@click.command("add")
@click.option("--code", required=True, help="Coupon code (stored upper-case).")
@click.option("--percent", required=True, help="Discount percentage, e.g. '5'.")
@click.option("--min-order", default="0", show_default=True, help="Minimum cart subtotal.")
@click.option(
    "--expires",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Last valid day (YYYY-MM-DD).",
)
@click.option("--max-usage", type=int, default=0, show_default=True, help="0 means unlimited.")
def coupon_add(
    code: str, percent: str, min_order: str, expires: datetime | None, max_usage: int
) -> None:
    """Create a coupon."""
    handler = CreateCouponHandler(coupon_repo=coupon_repository())

    try:
        coupon = handler.handle(
            code=code,
            discount_percent=percent,
            min_order_value=min_order,
            expiry_date=expires.date() if expires else None,
            max_usage=max_usage,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon created: {coupon}")


@click.command("list")
def coupon_list() -> None:
    """List all coupons."""
    coupons = ListCouponsHandler(coupon_repo=coupon_repository()).handle()

    if not coupons:
        click.echo("No coupons found.")
        return

    click.echo(f"{'Code':<14} {'Off':>6} {'Min':>9} {'Expires':<11} {'Used':>9} {'Active':<6}")
    click.echo("-" * 60)
    for c in coupons:
        expires = c.expiry_date.isoformat() if c.expiry_date else "-"
        limit = str(c.max_usage) if c.max_usage else "inf"
        click.echo(
            f"{c.code:<14} {str(c.discount_percent) + '%':>6} {str(c.min_order_value):>9} "
            f"{expires:<11} {f'{c.usage_count}/{limit}':>9} {'yes' if c.active else 'no':<6}"
        )


@click.command("deactivate")
@click.option("--code", required=True, help="Coupon code.")
def coupon_deactivate(code: str) -> None:
    """Stop a coupon from being accepted."""
    handler = DeactivateCouponHandler(coupon_repo=coupon_repository())

    try:
        handler.handle(code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {code.upper()} deactivated.")
