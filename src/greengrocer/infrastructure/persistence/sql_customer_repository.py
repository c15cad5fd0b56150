"""SQLAlchemy implementations of the customer and loyalty repositories."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Engine, insert, select, update

from greengrocer.domain.exceptions import EntityNotFoundError
from greengrocer.domain.model.loyalty import Customer, LoyaltySettings
from greengrocer.domain.repository.customer_repository import (
    CustomerRepository,
    LoyaltySettingsRepository,
)
from greengrocer.infrastructure.persistence.schema import (
    customers,
    loyalty_settings,
    transaction,
)

# The loyalty policy is a single row.
_SETTINGS_ROW_ID = 1


class SqlCustomerRepository(CustomerRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_by_id(self, customer_id: str) -> Customer | None:
        with transaction(self._engine) as conn:
            row = conn.execute(select(customers).where(customers.c.id == customer_id)).first()
        if row is None:
            return None
        return Customer(id=row.id, name=row.name, completed_orders=row.completed_orders)

    def save(self, customer: Customer) -> None:
        values = {"name": customer.name, "completed_orders": customer.completed_orders}
        with transaction(self._engine) as conn:
            result = conn.execute(
                update(customers).where(customers.c.id == customer.id).values(**values)
            )
            if result.rowcount == 0:
                conn.execute(insert(customers).values(id=customer.id, **values))

    def increment_completed_orders(self, customer_id: str) -> None:
        self._set_counter(customer_id, customers.c.completed_orders + 1)

    def reset_completed_orders(self, customer_id: str) -> None:
        self._set_counter(customer_id, 0)

    def _set_counter(self, customer_id: str, value) -> None:
        statement = (
            update(customers)
            .where(customers.c.id == customer_id)
            .values(completed_orders=value)
        )
        with transaction(self._engine) as conn:
            if conn.execute(statement).rowcount == 0:
                raise EntityNotFoundError(f"Customer {customer_id!r} not found")


class SqlLoyaltySettingsRepository(LoyaltySettingsRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self) -> LoyaltySettings:
        query = select(loyalty_settings).where(loyalty_settings.c.id == _SETTINGS_ROW_ID)
        with transaction(self._engine) as conn:
            row = conn.execute(query).first()
        if row is None:
            return LoyaltySettings()
        return LoyaltySettings(
            min_orders_for_discount=row.min_orders_for_discount,
            discount_percent=Decimal(row.discount_percent),
        )

    def save(self, settings: LoyaltySettings) -> None:
        values = {
            "min_orders_for_discount": settings.min_orders_for_discount,
            "discount_percent": str(settings.discount_percent),
        }
        with transaction(self._engine) as conn:
            result = conn.execute(
                update(loyalty_settings)
                .where(loyalty_settings.c.id == _SETTINGS_ROW_ID)
                .values(**values)
            )
            if result.rowcount == 0:
                conn.execute(insert(loyalty_settings).values(id=_SETTINGS_ROW_ID, **values))
