"""Order aggregate, the core of the domain.

The Order owns its line items and frozen amounts.  Status only moves
through ``claim``, ``complete`` and ``cancel``:

    PENDING --claim--> SELECTED --complete--> DELIVERED
    PENDING --cancel (within 24h)--> CANCELLED

Repositories apply these transitions atomically; the methods here hold
the rules so every store classifies a refused transition the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from greengrocer.config import MAX_DELIVERY_LEAD_HOURS
from greengrocer.domain.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    ErrorReason,
    ValidationError,
)
from greengrocer.domain.model.value_objects import Money, Quantity
from greengrocer.domain.service import cancellation_window


class OrderStatus(Enum):
    PENDING = "PENDING"
    SELECTED = "SELECTED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


@dataclass(frozen=True)
class OrderLineItem:
    """Snapshot of a cart line at checkout.  Never changes afterwards."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at checkout

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.kg


@dataclass(frozen=True)
class OrderAmounts:
    """What the customer owes, frozen at checkout and rounded to cents."""

    subtotal: Money
    discount_percent: Decimal
    discount: Money
    vat: Money
    total: Money


@dataclass
class Order:
    """Aggregate root for delivery orders.

    Use ``Order.place()`` for new orders.  The ``__init__`` is simple so
    the repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_id: str
    items: tuple[OrderLineItem, ...]
    amounts: OrderAmounts
    order_time: datetime
    requested_delivery: datetime
    status: OrderStatus = OrderStatus.PENDING
    carrier_id: str | None = None
    delivery_time: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        customer_id: str,
        items: list[OrderLineItem],
        amounts: OrderAmounts,
        requested_delivery: datetime,
        now: datetime,
    ) -> Order:
        if not items:
            raise ValidationError("Order must contain at least one item", ErrorReason.EMPTY_CART)
        if requested_delivery.tzinfo is None:
            raise ValidationError(
                "Requested delivery time must carry a timezone",
                ErrorReason.INVALID_DELIVERY_TIME,
            )
        if requested_delivery < now:
            raise BusinessRuleViolation(
                "Requested delivery time cannot be in the past",
                ErrorReason.DELIVERY_WINDOW,
            )
        if requested_delivery > now + timedelta(hours=MAX_DELIVERY_LEAD_HOURS):
            raise BusinessRuleViolation(
                f"Delivery must be within {MAX_DELIVERY_LEAD_HOURS} hours from now",
                ErrorReason.DELIVERY_WINDOW,
            )
        return Order(
            id=None,
            customer_id=customer_id,
            items=tuple(items),
            amounts=amounts,
            order_time=now,
            requested_delivery=requested_delivery,
        )

    # --- State transitions ----------------------------------------------------

    def claim(self, carrier_id: str) -> None:
        """Transition PENDING -> SELECTED for *carrier_id*."""
        self.check_claimable()
        self.status = OrderStatus.SELECTED
        self.carrier_id = carrier_id

    def complete(self, carrier_id: str, delivery_time: datetime, now: datetime) -> None:
        """Transition SELECTED -> DELIVERED.

        The delivery time may not precede the order nor lie in the future.
        """
        self.check_completable(carrier_id)
        self.validate_delivery_time(delivery_time, now)
        self.status = OrderStatus.DELIVERED
        self.delivery_time = delivery_time

    def cancel(self, now: datetime) -> None:
        """Transition PENDING -> CANCELLED within the cancellation window."""
        self.check_cancellable(now)
        self.status = OrderStatus.CANCELLED

    # --- Guards ---------------------------------------------------------------

    def check_claimable(self) -> None:
        if self.status in (OrderStatus.SELECTED, OrderStatus.DELIVERED):
            raise ConflictError(
                f"Order #{self.id} was already selected by another carrier",
                ErrorReason.ALREADY_CLAIMED,
            )
        if self.status != OrderStatus.PENDING:
            raise ConflictError(
                f"Cannot select order #{self.id}, current status is {self.status.value}",
                ErrorReason.INVALID_TRANSITION,
            )

    def check_completable(self, carrier_id: str) -> None:
        if self.status != OrderStatus.SELECTED:
            raise ConflictError(
                f"Cannot complete order #{self.id}, current status is "
                f"{self.status.value}, expected SELECTED",
                ErrorReason.INVALID_TRANSITION,
            )
        if self.carrier_id != carrier_id:
            raise ConflictError(
                f"Order #{self.id} is assigned to another carrier",
                ErrorReason.NOT_ASSIGNED_CARRIER,
            )

    def check_cancellable(self, now: datetime) -> None:
        if self.status in (OrderStatus.SELECTED, OrderStatus.DELIVERED):
            raise ConflictError(
                f"Order #{self.id} was already selected by a carrier",
                ErrorReason.ALREADY_CLAIMED,
            )
        if self.status != OrderStatus.PENDING:
            raise ConflictError(
                f"Order #{self.id} is already cancelled",
                ErrorReason.INVALID_TRANSITION,
            )
        if not cancellation_window.can_cancel(self.order_time, now):
            raise BusinessRuleViolation(
                f"Order #{self.id} can no longer be cancelled; the "
                f"{cancellation_window.CANCELLATION_WINDOW_HOURS}-hour window has expired",
                ErrorReason.CANCELLATION_WINDOW_EXPIRED,
            )

    def validate_delivery_time(self, delivery_time: datetime, now: datetime) -> None:
        if delivery_time.tzinfo is None:
            raise ValidationError(
                "Delivery time must carry a timezone", ErrorReason.INVALID_DELIVERY_TIME
            )
        if delivery_time > now:
            raise ValidationError(
                "Delivery time cannot be in the future", ErrorReason.INVALID_DELIVERY_TIME
            )
        if delivery_time < self.order_time:
            raise ValidationError(
                "Delivery time cannot be before order time",
                ErrorReason.INVALID_DELIVERY_TIME,
            )

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return self.amounts.total

    def cancellation_hours_left(self, now: datetime) -> int:
        if self.status != OrderStatus.PENDING:
            return 0
        return cancellation_window.remaining_hours(self.order_time, now)
