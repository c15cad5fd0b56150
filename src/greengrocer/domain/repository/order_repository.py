"""Abstract repository for the Order aggregate (the Ledger port).

``claim``, ``cancel`` and ``complete`` are conditional updates: each
applies its transition only if the stored order still satisfies the
guard, in one isolation boundary.  Claim and cancel share the
``status = PENDING`` guard, so at most one of them ever wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from greengrocer.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a newly placed order and assign its ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return orders in *status*, oldest first."""

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> list[Order]:
        """Return a customer's orders, newest first."""

    @abstractmethod
    def list_for_carrier(self, carrier_id: str, status: OrderStatus) -> list[Order]:
        """Return orders held by a carrier in *status*."""

    @abstractmethod
    def claim(self, order_id: int, carrier_id: str) -> Order:
        """Atomically move a PENDING order to SELECTED for *carrier_id*.

        Raises ConflictError when the order is no longer PENDING and
        EntityNotFoundError when it does not exist.
        """

    @abstractmethod
    def cancel(self, order_id: int, now: datetime) -> Order:
        """Atomically cancel a PENDING order still inside its window."""

    @abstractmethod
    def complete(self, order_id: int, carrier_id: str, delivery_time: datetime) -> Order:
        """Atomically move a SELECTED order held by *carrier_id* to DELIVERED."""
