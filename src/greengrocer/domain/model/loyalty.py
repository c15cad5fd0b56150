"""Loyalty policy and the customer's completed-order counter."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from greengrocer.config import DEFAULT_LOYALTY_DISCOUNT_PERCENT, DEFAULT_LOYALTY_MIN_ORDERS
from greengrocer.domain.exceptions import ErrorReason, ValidationError


@dataclass(frozen=True)
class LoyaltySettings:
    """Shop-wide loyalty policy (a singleton owned by the shop owner)."""

    min_orders_for_discount: int = DEFAULT_LOYALTY_MIN_ORDERS
    discount_percent: Decimal = DEFAULT_LOYALTY_DISCOUNT_PERCENT

    def __post_init__(self) -> None:
        if self.min_orders_for_discount <= 0:
            raise ValidationError("Loyalty order threshold must be positive")
        if not self.discount_percent.is_finite() or not (
            Decimal("0") < self.discount_percent <= Decimal("100")
        ):
            raise ValidationError(
                f"Loyalty discount must be within (0, 100], got {self.discount_percent}",
                ErrorReason.INVALID_AMOUNT,
            )

    def is_eligible(self, completed_orders: int) -> bool:
        return completed_orders >= self.min_orders_for_discount


@dataclass
class Customer:
    """A shopper.

    ``completed_orders`` grows by one per delivered order and drops back
    to zero whenever the loyalty discount is spent at checkout.
    """

    id: str
    name: str
    completed_orders: int = 0

    def orders_until_eligible(self, settings: LoyaltySettings) -> int:
        return max(0, settings.min_orders_for_discount - self.completed_orders)
