"""Pricing engine: pure functions, no I/O and no state.

Discount percentages stack additively (loyalty + coupon), VAT applies
after the discount, and nothing is rounded until ``quote`` freezes the
figures for an order.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from greengrocer.config import LOW_STOCK_PRICE_MULTIPLIER, VAT_RATE
from greengrocer.domain.model.cart import CartLine
from greengrocer.domain.model.order import OrderAmounts, OrderLineItem
from greengrocer.domain.model.product import Product
from greengrocer.domain.model.value_objects import Money

HUNDRED = Decimal("100")


def effective_price(product: Product) -> Money:
    """Base price, doubled while stock is at or below the threshold."""
    if product.is_low_stock:
        return product.price * LOW_STOCK_PRICE_MULTIPLIER
    return product.price


def line_total(line: CartLine | OrderLineItem) -> Money:
    return line.unit_price * line.quantity.kg


def subtotal(lines: Iterable[CartLine | OrderLineItem]) -> Money:
    result = Money.zero()
    for line in lines:
        result = result + line_total(line)
    return result


def combined_discount_percent(loyalty_percent: Decimal, coupon_percent: Decimal) -> Decimal:
    """Percentages add; the sum never exceeds 100."""
    return min(loyalty_percent + coupon_percent, HUNDRED)


def discount_amount(order_subtotal: Money, percent: Decimal) -> Money:
    return order_subtotal * (percent / HUNDRED)


def vat(after_discount: Money) -> Money:
    return after_discount * VAT_RATE


def grand_total(order_subtotal: Money, discount_percent: Decimal) -> Money:
    after_discount = order_subtotal - discount_amount(order_subtotal, discount_percent)
    return after_discount * (1 + VAT_RATE)


def quote(order_subtotal: Money, discount_percent: Decimal) -> OrderAmounts:
    """Freeze the breakdown stored on an order.

    Subtotal, discount and VAT are rounded half-even to cents; the total
    is the sum of those rounded parts so stored figures always add up.
    """
    rounded_subtotal = order_subtotal.rounded()
    rounded_discount = discount_amount(order_subtotal, discount_percent).rounded()
    after_discount = order_subtotal - discount_amount(order_subtotal, discount_percent)
    rounded_vat = vat(after_discount).rounded()
    total = rounded_subtotal - rounded_discount + rounded_vat
    return OrderAmounts(
        subtotal=rounded_subtotal,
        discount_percent=discount_percent,
        discount=rounded_discount,
        vat=rounded_vat,
        total=total,
    )
