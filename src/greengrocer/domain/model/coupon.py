"""Coupon aggregate: a percentage discount with validity rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from greengrocer.domain.exceptions import (
    BusinessRuleViolation,
    ErrorReason,
    ValidationError,
)
from greengrocer.domain.model.value_objects import Money


@dataclass
class Coupon:
    """A discount code.

    ``max_usage == 0`` means unlimited.  ``usage_count`` is bumped by the
    repository when a checkout consumes the coupon, never directly.
    """

    id: int | None
    code: str
    discount_percent: Decimal
    min_order_value: Money
    expiry_date: date | None = None
    active: bool = True
    max_usage: int = 0
    usage_count: int = 0

    @staticmethod
    def create(
        code: str,
        discount_percent: Decimal,
        min_order_value: Money,
        expiry_date: date | None = None,
        max_usage: int = 0,
    ) -> Coupon:
        if not code or not code.strip():
            raise ValidationError("Coupon code is required")
        if not discount_percent.is_finite() or not (
            Decimal("0") < discount_percent <= Decimal("100")
        ):
            raise ValidationError(
                f"Coupon discount must be within (0, 100], got {discount_percent}",
                ErrorReason.INVALID_AMOUNT,
            )
        if max_usage < 0:
            raise ValidationError("Coupon usage limit cannot be negative")
        return Coupon(
            id=None,
            code=code.strip().upper(),
            discount_percent=discount_percent,
            min_order_value=min_order_value,
            expiry_date=expiry_date,
            max_usage=max_usage,
        )

    # --- Rules ----------------------------------------------------------------

    def is_valid(self, today: date) -> bool:
        not_expired = self.expiry_date is None or self.expiry_date >= today
        return self.active and not_expired and not self.is_usage_limit_reached

    @property
    def is_usage_limit_reached(self) -> bool:
        return self.max_usage > 0 and self.usage_count >= self.max_usage

    def meets_minimum(self, order_subtotal: Money) -> bool:
        return order_subtotal >= self.min_order_value

    def ensure_applicable(self, order_subtotal: Money, today: date) -> None:
        """Raise with the specific reason this coupon cannot be applied."""
        if not self.is_valid(today):
            raise BusinessRuleViolation(
                f"Coupon {self.code} is no longer valid; it may have expired "
                f"or reached its usage limit",
                ErrorReason.COUPON_INVALID,
            )
        if not self.meets_minimum(order_subtotal):
            raise BusinessRuleViolation(
                f"Coupon {self.code} requires a minimum order of {self.min_order_value}",
                ErrorReason.COUPON_BELOW_MINIMUM,
            )

    def deactivate(self) -> None:
        self.active = False

    def __str__(self) -> str:
        return f"{self.code} - {self.discount_percent}% off (min {self.min_order_value})"
