"""Application services: owner coupon administration."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from greengrocer.domain.exceptions import EntityNotFoundError, ErrorReason, ValidationError
from greengrocer.domain.model.coupon import Coupon
from greengrocer.domain.model.value_objects import Money
from greengrocer.domain.repository.coupon_repository import CouponRepository


class CreateCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(
        self,
        code: str,
        discount_percent: str,
        min_order_value: str = "0",
        expiry_date: date | None = None,
        max_usage: int = 0,
    ) -> Coupon:
        coupon = Coupon.create(
            code=code,
            discount_percent=parse_percent(discount_percent),
            min_order_value=Money.of(min_order_value),
            expiry_date=expiry_date,
            max_usage=max_usage,
        )
        if self._coupon_repo.get_by_code(coupon.code) is not None:
            raise ValidationError(f"Coupon '{coupon.code}' already exists")
        self._coupon_repo.save(coupon)
        return coupon


class DeactivateCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(self, code: str) -> None:
        coupon = self._coupon_repo.get_by_code(code)
        if coupon is None:
            raise EntityNotFoundError(f"Coupon '{code}' not found")
        coupon.deactivate()
        self._coupon_repo.save(coupon)


def parse_percent(raw: str | Decimal) -> Decimal:
    try:
        percent = Decimal(str(raw))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid percentage: {raw!r}", ErrorReason.INVALID_AMOUNT) from exc
    if not percent.is_finite():
        raise ValidationError(f"Invalid percentage: {raw!r}", ErrorReason.INVALID_AMOUNT)
    return percent


class ListCouponsHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(self) -> list[Coupon]:
        return sorted(self._coupon_repo.list_all(), key=lambda c: c.code)
