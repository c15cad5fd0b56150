"""Application service: Complete Order use case.

After the ledger records the delivery, the customer's completed-order
counter grows by one and the customer is told.  A failed message is
logged and never undoes the delivery.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from greengrocer.application.dto import OrderDTO
from greengrocer.application.mapping import TIME_FORMAT, order_to_dto
from greengrocer.application.session import utc_now
from greengrocer.domain.model.order import Order
from greengrocer.domain.notifier import Notifier, RecipientRole
from greengrocer.domain.repository.customer_repository import CustomerRepository
from greengrocer.domain.repository.order_repository import OrderRepository
from greengrocer.domain.service.order_lifecycle import OrderLifecycle

logger = structlog.get_logger(__name__)


class CompleteOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        notifier: Notifier,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._lifecycle = OrderLifecycle(order_repo)
        self._customer_repo = customer_repo
        self._notifier = notifier
        self._clock = clock

    def handle(
        self,
        order_id: int,
        carrier_id: str,
        delivery_time: datetime | None = None,
    ) -> OrderDTO:
        now = self._clock()
        order = self._lifecycle.complete(order_id, carrier_id, delivery_time, now)
        self._customer_repo.increment_completed_orders(order.customer_id)
        self._notify_customer(order)
        return order_to_dto(order, now)

    def _notify_customer(self, order: Order) -> None:
        delivered_at = order.delivery_time.strftime(TIME_FORMAT)  # type: ignore[union-attr]
        try:
            self._notifier.notify(
                RecipientRole.CUSTOMER,
                f"Order #{order.id} Delivered",
                f"Your order #{order.id} has been delivered successfully at "
                f"{delivered_at}.\n\nTotal: {order.total}\n\n"
                f"Thank you for shopping with us!",
                recipient_id=order.customer_id,
            )
        except Exception as exc:
            logger.error("Delivery notification failed", order_id=order.id, error=str(exc))
