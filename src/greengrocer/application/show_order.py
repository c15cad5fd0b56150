"""Application services: order queries."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from greengrocer.application.dto import OrderDTO
from greengrocer.application.mapping import order_to_dto
from greengrocer.application.session import utc_now
from greengrocer.domain.exceptions import EntityNotFoundError, ValidationError
from greengrocer.domain.model.order import OrderStatus
from greengrocer.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._clock = clock

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order, self._clock())


class ListOrdersHandler:
    """Pending orders for carriers, a customer's history, or a carrier's queue."""

    def __init__(
        self,
        order_repo: OrderRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._clock = clock

    def handle(
        self,
        status: str | None = None,
        customer_id: str | None = None,
        carrier_id: str | None = None,
    ) -> list[OrderDTO]:
        order_status = _parse_status(status) if status else None

        if customer_id is not None:
            orders = self._order_repo.list_for_customer(customer_id)
            if order_status is not None:
                orders = [o for o in orders if o.status == order_status]
        elif carrier_id is not None:
            orders = self._order_repo.list_for_carrier(
                carrier_id, order_status or OrderStatus.SELECTED
            )
        else:
            orders = self._order_repo.list_by_status(order_status or OrderStatus.PENDING)

        now = self._clock()
        return [order_to_dto(order, now) for order in orders]


def _parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw.upper())
    except ValueError as exc:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown order status '{raw}' (expected one of {valid})") from exc
