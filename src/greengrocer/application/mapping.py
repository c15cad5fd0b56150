"""Domain -> DTO mapping shared by the query and command handlers."""

from __future__ import annotations

from datetime import datetime

from greengrocer.application.dto import (
    CartDTO,
    CartLineDTO,
    OrderDTO,
    OrderLineItemDTO,
    ProductDTO,
)
from greengrocer.domain.model.cart import Cart
from greengrocer.domain.model.order import Order
from greengrocer.domain.model.product import Product
from greengrocer.domain.service import pricing

TIME_FORMAT = "%Y-%m-%d %H:%M UTC"


def order_to_dto(order: Order, now: datetime) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_id=order.customer_id,
        carrier_id=order.carrier_id,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                product_name=item.product_name,
                quantity=str(item.quantity),
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.amounts.subtotal),
        discount_percent=f"{order.amounts.discount_percent}%",
        discount=str(order.amounts.discount),
        vat=str(order.amounts.vat),
        total=str(order.amounts.total),
        order_time=order.order_time.strftime(TIME_FORMAT),
        requested_delivery=order.requested_delivery.strftime(TIME_FORMAT),
        delivery_time=(
            order.delivery_time.strftime(TIME_FORMAT) if order.delivery_time else None
        ),
        cancellation_hours_left=order.cancellation_hours_left(now),
    )


def cart_to_dto(cart: Cart) -> CartDTO:
    return CartDTO(
        lines=[
            CartLineDTO(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=str(line.quantity),
                unit_price=str(line.unit_price),
                line_total=str(line.line_total),
            )
            for line in cart.lines
        ],
        subtotal=str(cart.subtotal),
        meets_minimum=cart.meets_minimum(),
    )


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        name=product.name,
        category=product.category.value,
        base_price=str(product.price),
        current_price=str(pricing.effective_price(product)),
        stock=f"{product.stock_kg:.3f} kg",
        threshold=f"{product.threshold_kg:.3f} kg",
        low_stock=product.is_low_stock,
    )
