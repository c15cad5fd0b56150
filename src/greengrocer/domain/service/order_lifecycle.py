"""Domain service: Order Lifecycle.

Places orders (pricing + all-or-nothing stock reservation) and drives
the claim / complete / cancel transitions through the ledger's atomic
conditional updates.  Side effects that belong to other aggregates
(coupon usage, loyalty counters, customer messages) are left to the
application handlers.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

import structlog

from greengrocer.domain.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    EntityNotFoundError,
    ErrorReason,
    ValidationError,
)
from greengrocer.domain.model.cart import Cart
from greengrocer.domain.model.order import Order, OrderLineItem
from greengrocer.domain.repository.order_repository import OrderRepository
from greengrocer.domain.service import pricing
from greengrocer.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class ClaimOutcome(Enum):
    CLAIMED = "CLAIMED"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    UNAVAILABLE = "UNAVAILABLE"


@dataclass
class ClaimReport:
    """Per-order outcomes of a carrier's batch selection."""

    claimed: list[int] = field(default_factory=list)
    already_claimed: list[int] = field(default_factory=list)
    unavailable: list[int] = field(default_factory=list)

    def record(self, order_id: int, outcome: ClaimOutcome) -> None:
        if outcome is ClaimOutcome.CLAIMED:
            self.claimed.append(order_id)
        elif outcome is ClaimOutcome.ALREADY_CLAIMED:
            self.already_claimed.append(order_id)
        else:
            self.unavailable.append(order_id)


def ensure_cart_ready(cart: Cart) -> None:
    """Reject empty carts and carts below the minimum order value."""
    if cart.is_empty:
        raise ValidationError("Cart is empty", ErrorReason.EMPTY_CART)
    if not cart.meets_minimum():
        raise BusinessRuleViolation(
            f"Cart subtotal {cart.subtotal} is below the minimum order value",
            ErrorReason.BELOW_MINIMUM,
        )


class OrderLifecycle:
    """Placement needs a StockLedger; claim, complete and cancel do not."""

    def __init__(
        self,
        order_repo: OrderRepository,
        stock_ledger: StockLedger | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._stock_ledger = stock_ledger

    # --- Placement ------------------------------------------------------------

    def place(
        self,
        cart: Cart,
        customer_id: str,
        requested_delivery: datetime,
        discount_percent: Decimal,
        now: datetime,
    ) -> Order:
        """Turn a cart into a PENDING order.

        Steps:
        1. Check the cart is non-empty and meets the minimum value.
        2. Snapshot the lines and freeze the amounts.
        3. Let the Order aggregate validate the delivery window.
        4. Reserve stock for every line (released again on any failure).
        5. Persist, then announce stock alerts.
        """
        if self._stock_ledger is None:
            raise RuntimeError("OrderLifecycle needs a StockLedger to place orders")
        ensure_cart_ready(cart)

        items = [
            OrderLineItem(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in cart.lines
        ]
        amounts = pricing.quote(pricing.subtotal(items), discount_percent)
        order = Order.place(customer_id, items, amounts, requested_delivery, now)

        reservations = self._stock_ledger.reserve_all(order.items)
        try:
            self._order_repo.add(order)
        except Exception:
            self._stock_ledger.release_all(reservations)
            raise

        logger.info(
            "Order placed",
            order_id=order.id,
            customer_id=customer_id,
            total=str(order.total.amount),
            lines=len(items),
        )
        self._stock_ledger.announce(reservations)
        return order

    # --- Transitions ----------------------------------------------------------

    def claim(self, order_id: int, carrier_id: str) -> ClaimOutcome:
        """Try to take a PENDING order for *carrier_id*.

        At most one carrier ever gets CLAIMED for a given order; losers see
        ALREADY_CLAIMED, and cancelled or missing orders UNAVAILABLE.
        """
        try:
            self._order_repo.claim(order_id, carrier_id)
        except ConflictError as exc:
            if exc.reason is ErrorReason.ALREADY_CLAIMED:
                logger.info("Order already claimed", order_id=order_id, carrier_id=carrier_id)
                return ClaimOutcome.ALREADY_CLAIMED
            logger.info("Order not claimable", order_id=order_id, reason=str(exc))
            return ClaimOutcome.UNAVAILABLE
        except EntityNotFoundError:
            return ClaimOutcome.UNAVAILABLE
        logger.info("Order claimed", order_id=order_id, carrier_id=carrier_id)
        return ClaimOutcome.CLAIMED

    def claim_many(self, order_ids: Iterable[int], carrier_id: str) -> ClaimReport:
        report = ClaimReport()
        for order_id in order_ids:
            report.record(order_id, self.claim(order_id, carrier_id))
        return report

    def complete(
        self,
        order_id: int,
        carrier_id: str,
        delivery_time: datetime | None,
        now: datetime,
    ) -> Order:
        """Mark a SELECTED order delivered.

        Without an explicit *delivery_time* the order is stamped with *now*.
        Either way the time must lie between the order time and now.
        """
        order = self._get(order_id)
        when = delivery_time if delivery_time is not None else now
        order.validate_delivery_time(when, now)
        completed = self._order_repo.complete(order_id, carrier_id, when)
        logger.info("Order delivered", order_id=order_id, carrier_id=carrier_id)
        return completed

    def cancel(self, order_id: int, now: datetime) -> Order:
        cancelled = self._order_repo.cancel(order_id, now)
        logger.info("Order cancelled", order_id=order_id)
        return cancelled

    def _get(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order
