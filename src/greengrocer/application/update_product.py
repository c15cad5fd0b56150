"""Application service: Update Product use case (price and stock)."""

from __future__ import annotations

import structlog

from greengrocer.application.add_product import parse_kg
from greengrocer.domain.exceptions import EntityNotFoundError
from greengrocer.domain.model.product import Product
from greengrocer.domain.model.value_objects import Money
from greengrocer.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def update_price(self, product_id: str, new_price: str) -> None:
        """Update a product's base price.

        This does NOT affect any existing orders or cart lines; they
        captured a price snapshot.
        """
        product = self._load(product_id)
        product.update_price(Money.of(new_price))
        # Price only: stock may have moved since the read above.
        if not self._product_repo.update_price(product_id, product.price):
            raise _not_found(product_id)
        logger.info("Product price updated", product_id=product_id, price=new_price)

    def restock(self, product_id: str, stock: str) -> None:
        """Set the stock level after an inventory count or delivery."""
        product = self._load(product_id)
        product.restock(parse_kg(stock))
        if not self._product_repo.set_stock(product_id, product.stock_kg):
            raise _not_found(product_id)
        logger.info("Product restocked", product_id=product_id, stock_kg=stock)

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise _not_found(product_id)
        return product


def _not_found(product_id: str) -> EntityNotFoundError:
    return EntityNotFoundError(f"Product with ID '{product_id}' not found")
