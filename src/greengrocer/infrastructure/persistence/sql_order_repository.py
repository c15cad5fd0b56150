"""SQLAlchemy implementation of OrderRepository (the Ledger).

Each transition is one guarded ``UPDATE``.  The guard sits in the
``WHERE`` clause, so the database decides the race: of two carriers
claiming the same order, or a carrier claiming while the customer
cancels, exactly one statement matches a row.  When no row matches, the
stored order is reloaded and its own guard names the reason.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Connection, Engine, insert, select, update

from greengrocer.domain.exceptions import ConflictError, EntityNotFoundError, ErrorReason
from greengrocer.domain.model.order import (
    Order,
    OrderAmounts,
    OrderLineItem,
    OrderStatus,
)
from greengrocer.domain.model.value_objects import Money, Quantity
from greengrocer.domain.repository.order_repository import OrderRepository
from greengrocer.domain.service.cancellation_window import cancellation_cutoff
from greengrocer.infrastructure.persistence.schema import (
    from_db_time,
    order_items,
    orders,
    to_db_time,
    transaction,
)


class SqlOrderRepository(OrderRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        amounts = order.amounts
        with transaction(self._engine) as conn:
            result = conn.execute(
                insert(orders).values(
                    customer_id=order.customer_id,
                    carrier_id=order.carrier_id,
                    status=order.status.value,
                    order_time=to_db_time(order.order_time),
                    requested_delivery=to_db_time(order.requested_delivery),
                    delivery_time=to_db_time(order.delivery_time),
                    subtotal=str(amounts.subtotal.amount),
                    discount_percent=str(amounts.discount_percent),
                    discount=str(amounts.discount.amount),
                    vat=str(amounts.vat.amount),
                    total=str(amounts.total.amount),
                )
            )
            order_id = result.inserted_primary_key[0]
            conn.execute(
                insert(order_items),
                [
                    {
                        "order_id": order_id,
                        "position": position,
                        "product_id": item.product_id,
                        "product_name": item.product_name,
                        "quantity_grams": item.quantity.grams,
                        "unit_price": str(item.unit_price.amount),
                    }
                    for position, item in enumerate(order.items)
                ],
            )
        order.id = order_id

    def get_by_id(self, order_id: int) -> Order | None:
        with transaction(self._engine) as conn:
            return self._load(conn, order_id)

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        query = (
            select(orders)
            .where(orders.c.status == status.value)
            .order_by(orders.c.order_time, orders.c.id)
        )
        return self._fetch(query)

    def list_for_customer(self, customer_id: str) -> list[Order]:
        query = (
            select(orders)
            .where(orders.c.customer_id == customer_id)
            .order_by(orders.c.order_time.desc(), orders.c.id.desc())
        )
        return self._fetch(query)

    def list_for_carrier(self, carrier_id: str, status: OrderStatus) -> list[Order]:
        query = (
            select(orders)
            .where(orders.c.carrier_id == carrier_id, orders.c.status == status.value)
            .order_by(orders.c.requested_delivery, orders.c.id)
        )
        return self._fetch(query)

    def claim(self, order_id: int, carrier_id: str) -> Order:
        statement = (
            update(orders)
            .where(orders.c.id == order_id, orders.c.status == OrderStatus.PENDING.value)
            .values(status=OrderStatus.SELECTED.value, carrier_id=carrier_id)
        )
        with transaction(self._engine) as conn:
            matched = conn.execute(statement).rowcount
            order = self._require(conn, order_id)
        if not matched:
            order.check_claimable()
            raise self._lost_race(order_id)
        return order

    def cancel(self, order_id: int, now: datetime) -> Order:
        statement = (
            update(orders)
            .where(
                orders.c.id == order_id,
                orders.c.status == OrderStatus.PENDING.value,
                orders.c.order_time > to_db_time(cancellation_cutoff(now)),
            )
            .values(status=OrderStatus.CANCELLED.value)
        )
        with transaction(self._engine) as conn:
            matched = conn.execute(statement).rowcount
            order = self._require(conn, order_id)
        if not matched:
            order.check_cancellable(now)
            raise self._lost_race(order_id)
        return order

    def complete(self, order_id: int, carrier_id: str, delivery_time: datetime) -> Order:
        statement = (
            update(orders)
            .where(
                orders.c.id == order_id,
                orders.c.status == OrderStatus.SELECTED.value,
                orders.c.carrier_id == carrier_id,
            )
            .values(
                status=OrderStatus.DELIVERED.value,
                delivery_time=to_db_time(delivery_time),
            )
        )
        with transaction(self._engine) as conn:
            matched = conn.execute(statement).rowcount
            order = self._require(conn, order_id)
        if not matched:
            order.check_completable(carrier_id)
            raise self._lost_race(order_id)
        return order

    # --- Row mapping ----------------------------------------------------------

    def _fetch(self, query) -> list[Order]:
        with transaction(self._engine) as conn:
            rows = conn.execute(query).all()
            return [self._to_domain(conn, row) for row in rows]

    def _require(self, conn: Connection, order_id: int) -> Order:
        order = self._load(conn, order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order

    def _load(self, conn: Connection, order_id: int) -> Order | None:
        row = conn.execute(select(orders).where(orders.c.id == order_id)).first()
        return self._to_domain(conn, row) if row is not None else None

    @staticmethod
    def _lost_race(order_id: int) -> ConflictError:
        return ConflictError(
            f"Order #{order_id} changed while it was being updated",
            ErrorReason.INVALID_TRANSITION,
        )

    @staticmethod
    def _to_domain(conn: Connection, row) -> Order:
        item_rows = conn.execute(
            select(order_items)
            .where(order_items.c.order_id == row.id)
            .order_by(order_items.c.position)
        ).all()
        items = tuple(
            OrderLineItem(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=Quantity.from_grams(item.quantity_grams),
                unit_price=Money(Decimal(item.unit_price)),
            )
            for item in item_rows
        )
        amounts = OrderAmounts(
            subtotal=Money(Decimal(row.subtotal)),
            discount_percent=Decimal(row.discount_percent),
            discount=Money(Decimal(row.discount)),
            vat=Money(Decimal(row.vat)),
            total=Money(Decimal(row.total)),
        )
        return Order(
            id=row.id,
            customer_id=row.customer_id,
            items=items,
            amounts=amounts,
            order_time=from_db_time(row.order_time),
            requested_delivery=from_db_time(row.requested_delivery),
            status=OrderStatus(row.status),
            carrier_id=row.carrier_id,
            delivery_time=from_db_time(row.delivery_time),
        )
