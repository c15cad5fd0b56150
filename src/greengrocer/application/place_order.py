"""Application service: Place Order (checkout) use case.

Resolves the discounts the customer asked for and hands the cart to the
OrderLifecycle.  The coupon is consumed before placement and given back
if placement fails; the loyalty discount is spent and the cart emptied
only once the order is safely persisted.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

import structlog

from greengrocer.application.dto import OrderDTO
from greengrocer.application.mapping import order_to_dto
from greengrocer.application.session import InMemoryCartStore, Session, utc_now
from greengrocer.domain.exceptions import (
    BusinessRuleViolation,
    EntityNotFoundError,
    ErrorReason,
)
from greengrocer.domain.model.cart import Cart
from greengrocer.domain.model.coupon import Coupon
from greengrocer.domain.model.loyalty import Customer
from greengrocer.domain.notifier import Notifier
from greengrocer.domain.repository.coupon_repository import CouponRepository
from greengrocer.domain.repository.customer_repository import (
    CustomerRepository,
    LoyaltySettingsRepository,
)
from greengrocer.domain.repository.order_repository import OrderRepository
from greengrocer.domain.repository.product_repository import ProductRepository
from greengrocer.domain.service import pricing
from greengrocer.domain.service.order_lifecycle import OrderLifecycle, ensure_cart_ready
from greengrocer.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class PlaceOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        coupon_repo: CouponRepository,
        customer_repo: CustomerRepository,
        loyalty_repo: LoyaltySettingsRepository,
        notifier: Notifier,
        carts: InMemoryCartStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._coupon_repo = coupon_repo
        self._customer_repo = customer_repo
        self._loyalty_repo = loyalty_repo
        self._carts = carts
        self._clock = clock
        self._lifecycle = OrderLifecycle(order_repo, StockLedger(product_repo, notifier))

    def handle(
        self,
        session: Session,
        requested_delivery: datetime,
        coupon_code: str | None = None,
        use_loyalty: bool = False,
    ) -> OrderDTO:
        now = self._clock()
        cart = self._carts.get(session)
        ensure_cart_ready(cart)

        customer = self._customer_repo.get_by_id(session.user_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer '{session.user_id}' not found")

        loyalty_percent = self._loyalty_percent(customer) if use_loyalty else Decimal("0")
        coupon = self._coupon(customer, cart, coupon_code, now) if coupon_code else None
        coupon_percent = coupon.discount_percent if coupon is not None else Decimal("0")

        if coupon is not None:
            self._consume_coupon(customer, coupon)
        try:
            order = self._lifecycle.place(
                cart,
                customer.id,
                requested_delivery,
                pricing.combined_discount_percent(loyalty_percent, coupon_percent),
                now,
            )
        except Exception:
            if coupon is not None:
                self._coupon_repo.release_usage(customer.id, coupon.id)  # type: ignore[arg-type]
            raise

        if use_loyalty:
            # The discount must be earned again with new deliveries.
            self._customer_repo.reset_completed_orders(customer.id)
            logger.info("Loyalty discount spent", customer_id=customer.id)
        cart.clear()

        return order_to_dto(order, now)

    # --- Discount resolution ----------------------------------------------------

    def _loyalty_percent(self, customer: Customer) -> Decimal:
        settings = self._loyalty_repo.get()
        if not settings.is_eligible(customer.completed_orders):
            raise BusinessRuleViolation(
                f"Loyalty discount needs {settings.min_orders_for_discount} completed "
                f"orders; {customer.name} has {customer.completed_orders}",
                ErrorReason.LOYALTY_NOT_ELIGIBLE,
            )
        return settings.discount_percent

    def _coupon(self, customer: Customer, cart: Cart, code: str, now: datetime) -> Coupon:
        coupon = self._coupon_repo.get_by_code(code)
        if coupon is None:
            raise EntityNotFoundError(f"Coupon '{code}' not found")
        coupon.ensure_applicable(cart.subtotal, now.date())
        if self._coupon_repo.has_used(customer.id, coupon.id):  # type: ignore[arg-type]
            raise BusinessRuleViolation(
                f"Coupon {coupon.code} was already used", ErrorReason.COUPON_ALREADY_USED
            )
        return coupon

    def _consume_coupon(self, customer: Customer, coupon: Coupon) -> None:
        """Record the usage up front; a concurrent checkout of the same
        customer finds the usage row taken and is refused."""
        if not self._coupon_repo.record_usage(customer.id, coupon.id):  # type: ignore[arg-type]
            logger.warning(
                "Coupon usage already recorded", customer_id=customer.id, coupon=coupon.code
            )
            raise BusinessRuleViolation(
                f"Coupon {coupon.code} was already used", ErrorReason.COUPON_ALREADY_USED
            )
