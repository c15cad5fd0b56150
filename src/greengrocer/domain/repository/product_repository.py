"""Abstract repository for the Product aggregate (the Catalog port).

Defined in the domain layer so the domain never depends on
infrastructure.  Besides plain CRUD it exposes the two stock primitives
checkout relies on; both must be atomic at the storage layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from greengrocer.domain.model.product import Product, StockReservation
from greengrocer.domain.model.value_objects import Money, Quantity


class ProductRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique product ID."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new product, or the descriptive fields of an existing one.

        Stock of an existing product is never written here; it only moves
        through ``reserve_stock``, ``release_stock`` and ``set_stock``.
        """

    @abstractmethod
    def update_price(self, product_id: str, price: Money) -> bool:
        """Change only the base price.  Returns False for an unknown product."""

    @abstractmethod
    def set_stock(self, product_id: str, stock_kg: Decimal) -> bool:
        """Overwrite the stock level (owner count).  False for an unknown product."""

    @abstractmethod
    def reserve_stock(self, product_id: str, quantity: Quantity) -> StockReservation | None:
        """Decrement stock by *quantity* only if enough is left.

        Check and decrement happen as one conditional update, so two
        concurrent reservations can never both succeed past zero.
        Returns None when stock is insufficient or the product is unknown.
        """

    @abstractmethod
    def release_stock(self, product_id: str, quantity: Quantity) -> None:
        """Give back stock taken by an earlier ``reserve_stock``."""
