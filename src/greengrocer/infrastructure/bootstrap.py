"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine

from greengrocer.application.session import InMemoryCartStore
from greengrocer.config import Settings
from greengrocer.infrastructure.notification.inbox_notifier import InboxNotifier
from greengrocer.infrastructure.persistence.schema import create_store
from greengrocer.infrastructure.persistence.sql_coupon_repository import SqlCouponRepository
from greengrocer.infrastructure.persistence.sql_customer_repository import (
    SqlCustomerRepository,
    SqlLoyaltySettingsRepository,
)
from greengrocer.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from greengrocer.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)


def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=None)
def _engine_for(database_url: str) -> Engine:
    return create_store(database_url)


def engine() -> Engine:
    return _engine_for(settings().database_url)


def product_repository() -> SqlProductRepository:
    return SqlProductRepository(engine())


def order_repository() -> SqlOrderRepository:
    return SqlOrderRepository(engine())


def coupon_repository() -> SqlCouponRepository:
    return SqlCouponRepository(engine())


def customer_repository() -> SqlCustomerRepository:
    return SqlCustomerRepository(engine())


def loyalty_repository() -> SqlLoyaltySettingsRepository:
    return SqlLoyaltySettingsRepository(engine())


def notifier() -> InboxNotifier:
    return InboxNotifier(engine())


def cart_store() -> InMemoryCartStore:
    # A CLI invocation is one shopping session; the cart lives as long as it.
    return InMemoryCartStore()
