"""SQLAlchemy implementation of ProductRepository (the Catalog)."""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Engine, func, insert, select, update

from greengrocer.domain.model.product import Category, Product, StockReservation
from greengrocer.domain.model.value_objects import Money, Quantity
from greengrocer.domain.repository.product_repository import ProductRepository
from greengrocer.infrastructure.persistence.schema import (
    from_grams,
    products,
    to_grams,
    transaction,
)


class SqlProductRepository(ProductRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # --- ProductRepository interface ------------------------------------------

    def next_id(self) -> str:
        return f"P-{uuid.uuid4().hex[:8]}"

    def get_by_id(self, product_id: str) -> Product | None:
        with transaction(self._engine) as conn:
            row = conn.execute(select(products).where(products.c.id == product_id)).first()
        return self._to_domain(row) if row is not None else None

    def get_by_name(self, name: str) -> Product | None:
        query = select(products).where(func.lower(products.c.name) == name.strip().lower())
        with transaction(self._engine) as conn:
            row = conn.execute(query).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with transaction(self._engine) as conn:
            rows = conn.execute(select(products).order_by(products.c.name)).all()
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        values = {
            "name": product.name,
            "category": product.category.value,
            "price": str(product.price.amount),
            "threshold_grams": to_grams(product.threshold_kg),
        }
        with transaction(self._engine) as conn:
            result = conn.execute(
                update(products).where(products.c.id == product.id).values(**values)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(products).values(
                        id=product.id, stock_grams=to_grams(product.stock_kg), **values
                    )
                )

    def update_price(self, product_id: str, price: Money) -> bool:
        statement = (
            update(products)
            .where(products.c.id == product_id)
            .values(price=str(price.amount))
        )
        with transaction(self._engine) as conn:
            return conn.execute(statement).rowcount == 1

    def set_stock(self, product_id: str, stock_kg: Decimal) -> bool:
        statement = (
            update(products)
            .where(products.c.id == product_id)
            .values(stock_grams=to_grams(stock_kg))
        )
        with transaction(self._engine) as conn:
            return conn.execute(statement).rowcount == 1

    def reserve_stock(self, product_id: str, quantity: Quantity) -> StockReservation | None:
        grams = quantity.grams
        statement = (
            update(products)
            .where(products.c.id == product_id, products.c.stock_grams >= grams)
            .values(stock_grams=products.c.stock_grams - grams)
            .returning(products.c.name, products.c.stock_grams, products.c.threshold_grams)
        )
        with transaction(self._engine) as conn:
            row = conn.execute(statement).first()
        if row is None:
            return None
        return StockReservation(
            product_id=product_id,
            product_name=row.name,
            quantity=quantity,
            stock_before_kg=from_grams(row.stock_grams + grams),
            stock_after_kg=from_grams(row.stock_grams),
            threshold_kg=from_grams(row.threshold_grams),
        )

    def release_stock(self, product_id: str, quantity: Quantity) -> None:
        statement = (
            update(products)
            .where(products.c.id == product_id)
            .values(stock_grams=products.c.stock_grams + quantity.grams)
        )
        with transaction(self._engine) as conn:
            conn.execute(statement)

    # --- Row mapping ----------------------------------------------------------

    @staticmethod
    def _to_domain(row) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            category=Category(row.category),
            price=Money(Decimal(row.price)),
            stock_kg=from_grams(row.stock_grams),
            threshold_kg=from_grams(row.threshold_grams),
        )
