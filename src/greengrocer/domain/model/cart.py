"""Cart aggregate: requested line items for one shopping session.

The cart knows nothing about live stock.  Callers check availability
against the catalog before ``add`` or ``set_quantity``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from greengrocer.config import MINIMUM_CART_VALUE
from greengrocer.domain.model.value_objects import Money, Quantity


@dataclass
class CartLine:
    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # effective price when the product was first added

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.kg


@dataclass
class Cart:
    """At most one line per product; repeat adds merge into the first line."""

    _lines: dict[str, CartLine] = field(default_factory=dict)

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for line in self._lines.values():
            result = result + line.line_total
        return result

    def quantity_of(self, product_id: str) -> Quantity | None:
        line = self._lines.get(product_id)
        return line.quantity if line is not None else None

    def add(
        self,
        product_id: str,
        product_name: str,
        quantity: Quantity,
        unit_price: Money,
    ) -> None:
        """Add *quantity* of a product.

        A repeat add only grows the existing line; the price frozen on the
        first add is kept for the rest of the session.
        """
        existing = self._lines.get(product_id)
        if existing is not None:
            existing.quantity = existing.quantity + quantity
            return
        self._lines[product_id] = CartLine(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
        )

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def set_quantity(self, product_id: str, new_quantity: Quantity) -> None:
        line = self._lines.get(product_id)
        if line is not None:
            line.quantity = new_quantity

    def meets_minimum(self) -> bool:
        return self.subtotal >= Money(MINIMUM_CART_VALUE)

    def clear(self) -> None:
        self._lines.clear()
