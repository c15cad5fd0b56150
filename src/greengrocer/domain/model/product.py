"""Product aggregate.

Products live independently of orders.  Their price and stock change over
time; orders and cart lines capture a price snapshot instead of pointing
at the live figure.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from greengrocer.domain.exceptions import ErrorReason, ValidationError
from greengrocer.domain.model.value_objects import Money, Quantity


class Category(Enum):
    VEGETABLE = "VEGETABLE"
    FRUIT = "FRUIT"


@dataclass
class Product:
    """A product in the catalog, sold by the kilogram.

    ``stock_kg`` is mutated by stock reservations at checkout (through the
    repository's atomic primitive) and by owner restocking.
    """

    id: str
    name: str
    category: Category
    price: Money  # base price per kg
    stock_kg: Decimal
    threshold_kg: Decimal

    @staticmethod
    def create(
        product_id: str,
        name: str,
        category: Category,
        price: Money,
        stock_kg: Decimal,
        threshold_kg: Decimal,
    ) -> Product:
        """Create a new catalog entry, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if price.amount <= 0:
            raise ValidationError(
                "Product price must be greater than zero", ErrorReason.INVALID_AMOUNT
            )
        _check_weight("Stock", stock_kg)
        _check_weight("Threshold", threshold_kg)
        return Product(
            id=product_id,
            name=name.strip(),
            category=category,
            price=price,
            stock_kg=stock_kg,
            threshold_kg=threshold_kg,
        )

    @property
    def is_low_stock(self) -> bool:
        return self.stock_kg <= self.threshold_kg

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock_kg <= 0

    def update_price(self, new_price: Money) -> None:
        """Change the base price.

        Existing orders and cart lines keep the price they captured.
        """
        if new_price.amount <= 0:
            raise ValidationError(
                "Product price must be greater than zero", ErrorReason.INVALID_AMOUNT
            )
        self.price = new_price

    def restock(self, stock_kg: Decimal) -> None:
        """Set the stock level outright (owner inventory count)."""
        _check_weight("Stock", stock_kg)
        self.stock_kg = stock_kg


@dataclass(frozen=True)
class StockReservation:
    """Outcome of one atomic stock decrement, with the stock on both sides."""

    product_id: str
    product_name: str
    quantity: Quantity
    stock_before_kg: Decimal
    stock_after_kg: Decimal
    threshold_kg: Decimal

    @property
    def stocked_out(self) -> bool:
        return self.stock_after_kg <= 0

    @property
    def crossed_threshold(self) -> bool:
        """True only for the reservation that pushed stock into the low band."""
        return (
            self.stock_before_kg > self.threshold_kg
            and self.stock_after_kg <= self.threshold_kg
        )


def _check_weight(label: str, kg: Decimal) -> None:
    if not kg.is_finite():
        raise ValidationError(f"{label} must be a finite weight", ErrorReason.INVALID_QUANTITY)
    if kg < 0:
        raise ValidationError(f"{label} cannot be negative", ErrorReason.INVALID_QUANTITY)
    if kg != kg.quantize(Decimal("0.001")):
        raise ValidationError(
            f"{label} {kg} kg is finer than one gram", ErrorReason.INVALID_QUANTITY
        )
