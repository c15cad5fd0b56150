import click

from greengrocer.infrastructure.bootstrap import settings
from greengrocer.infrastructure.cli.coupon_commands import (
    coupon_add,
    coupon_deactivate,
    coupon_list,
)
from greengrocer.infrastructure.cli.customer_commands import (
    customer_add,
    customer_show,
    loyalty_set,
    loyalty_show,
)
from greengrocer.infrastructure.cli.inbox_commands import inbox_list
from greengrocer.infrastructure.cli.order_commands import (
    order_cancel,
    order_claim,
    order_complete,
    order_list,
    order_place,
    order_show,
)
from greengrocer.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_price,
    product_restock,
)
from greengrocer.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """GreenGrocer storefront back office"""
    configure_logging(settings().log_level)


@cli.group()
def order() -> None:
    """Place, deliver and cancel orders."""


@cli.group()
def product() -> None:
    """Manage the product catalog."""


@cli.group()
def coupon() -> None:
    """Manage discount coupons."""


@cli.group()
def customer() -> None:
    """Manage customers."""


@cli.group()
def loyalty() -> None:
    """Manage the loyalty discount."""


@cli.group()
def inbox() -> None:
    """Read notifications."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_claim)
order.add_command(order_complete)
order.add_command(order_list)
order.add_command(order_place)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_price)
product.add_command(product_restock)
coupon.add_command(coupon_add)
coupon.add_command(coupon_deactivate)
coupon.add_command(coupon_list)
customer.add_command(customer_add)
customer.add_command(customer_show)
loyalty.add_command(loyalty_set)
loyalty.add_command(loyalty_show)
inbox.add_command(inbox_list)
