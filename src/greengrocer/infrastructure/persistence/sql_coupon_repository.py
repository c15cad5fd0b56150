"""SQLAlchemy implementation of CouponRepository."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Engine, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from greengrocer.domain.exceptions import Unavailable
from greengrocer.domain.model.coupon import Coupon
from greengrocer.domain.model.value_objects import Money
from greengrocer.domain.repository.coupon_repository import CouponRepository
from greengrocer.infrastructure.persistence.schema import (
    coupon_usages,
    coupons,
    to_db_time,
    transaction,
)


class SqlCouponRepository(CouponRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_by_id(self, coupon_id: int) -> Coupon | None:
        with transaction(self._engine) as conn:
            row = conn.execute(select(coupons).where(coupons.c.id == coupon_id)).first()
        return self._to_domain(row) if row is not None else None

    def get_by_code(self, code: str) -> Coupon | None:
        query = select(coupons).where(func.upper(coupons.c.code) == code.strip().upper())
        with transaction(self._engine) as conn:
            row = conn.execute(query).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Coupon]:
        with transaction(self._engine) as conn:
            rows = conn.execute(select(coupons).order_by(coupons.c.code)).all()
        return [self._to_domain(row) for row in rows]

    def save(self, coupon: Coupon) -> None:
        # usage_count is owned by record_usage and never written here.
        values = {
            "code": coupon.code,
            "discount_percent": str(coupon.discount_percent),
            "min_order_value": str(coupon.min_order_value.amount),
            "expiry_date": coupon.expiry_date,
            "active": coupon.active,
            "max_usage": coupon.max_usage,
        }
        with transaction(self._engine) as conn:
            if coupon.id is None:
                result = conn.execute(insert(coupons).values(usage_count=0, **values))
                coupon.id = result.inserted_primary_key[0]
            else:
                conn.execute(update(coupons).where(coupons.c.id == coupon.id).values(**values))

    def has_used(self, customer_id: str, coupon_id: int) -> bool:
        query = select(coupon_usages.c.coupon_id).where(
            coupon_usages.c.customer_id == customer_id,
            coupon_usages.c.coupon_id == coupon_id,
        )
        with transaction(self._engine) as conn:
            return conn.execute(query).first() is not None

    def record_usage(self, customer_id: str, coupon_id: int) -> bool:
        used_at = to_db_time(datetime.now(timezone.utc))
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(coupon_usages).values(
                        customer_id=customer_id, coupon_id=coupon_id, used_at=used_at
                    )
                )
                conn.execute(
                    update(coupons)
                    .where(coupons.c.id == coupon_id)
                    .values(usage_count=coupons.c.usage_count + 1)
                )
        except IntegrityError:
            return False
        except SQLAlchemyError as exc:
            raise Unavailable(f"Storage error: {exc}") from exc
        return True

    def release_usage(self, customer_id: str, coupon_id: int) -> None:
        with transaction(self._engine) as conn:
            result = conn.execute(
                delete(coupon_usages).where(
                    coupon_usages.c.customer_id == customer_id,
                    coupon_usages.c.coupon_id == coupon_id,
                )
            )
            if result.rowcount == 1:
                conn.execute(
                    update(coupons)
                    .where(coupons.c.id == coupon_id)
                    .values(usage_count=coupons.c.usage_count - 1)
                )

    @staticmethod
    def _to_domain(row) -> Coupon:
        return Coupon(
            id=row.id,
            code=row.code,
            discount_percent=Decimal(row.discount_percent),
            min_order_value=Money(Decimal(row.min_order_value)),
            expiry_date=row.expiry_date,
            active=row.active,
            max_usage=row.max_usage,
            usage_count=row.usage_count,
        )
