"""Application service: Cancel Order use case.

Only the customer who placed the order may cancel it, only while it is
still PENDING, and only inside the cancellation window.  Reserved stock
is not returned to the shelf.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from greengrocer.application.session import utc_now
from greengrocer.domain.exceptions import EntityNotFoundError
from greengrocer.domain.repository.order_repository import OrderRepository
from greengrocer.domain.service.order_lifecycle import OrderLifecycle


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._lifecycle = OrderLifecycle(order_repo)
        self._clock = clock

    def handle(self, order_id: int, customer_id: str) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None or order.customer_id != customer_id:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        self._lifecycle.cancel(order_id, self._clock())
