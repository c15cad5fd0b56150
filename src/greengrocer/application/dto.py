"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product name + kg)."""

    product_name: str
    quantity: str


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_name: str
    quantity: str  # formatted, e.g. "2.500 kg"
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_id: str
    carrier_id: str | None
    status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    discount_percent: str
    discount: str
    vat: str
    total: str
    order_time: str
    requested_delivery: str
    delivery_time: str | None
    cancellation_hours_left: int


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    product_name: str
    quantity: str
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    lines: list[CartLineDTO]
    subtotal: str
    meets_minimum: bool


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    category: str
    base_price: str
    current_price: str
    stock: str
    threshold: str
    low_stock: bool


@dataclass(frozen=True)
class CustomerDTO:
    id: str
    name: str
    completed_orders: int
    loyalty_eligible: bool
    orders_until_eligible: int
