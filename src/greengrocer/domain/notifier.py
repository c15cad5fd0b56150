"""Abstract notification port.

Alerts are fire-and-forget: a failing notifier must never undo an order
operation that already succeeded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class RecipientRole(Enum):
    OWNER = "OWNER"
    CUSTOMER = "CUSTOMER"
    CARRIER = "CARRIER"


class Notifier(ABC):

    @abstractmethod
    def notify(
        self,
        recipient_role: RecipientRole,
        subject: str,
        body: str,
        recipient_id: str | None = None,
    ) -> None:
        """Deliver an alert to everyone holding *recipient_role*, or one user."""
