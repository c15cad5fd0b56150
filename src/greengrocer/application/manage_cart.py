"""Application services: cart editing use cases.

The cart itself never looks at stock, so every handler here checks the
catalog first: a line may never ask for more than is on the shelf.
"""

from __future__ import annotations

from decimal import Decimal

from greengrocer.application.dto import CartDTO, OrderItemSpec
from greengrocer.application.mapping import cart_to_dto
from greengrocer.application.session import InMemoryCartStore, Session
from greengrocer.domain.exceptions import (
    EntityNotFoundError,
    ErrorReason,
    ResourceExhausted,
    ValidationError,
)
from greengrocer.domain.model.product import Product
from greengrocer.domain.model.value_objects import Quantity
from greengrocer.domain.repository.product_repository import ProductRepository
from greengrocer.domain.service import pricing


class AddToCartHandler:

    def __init__(self, product_repo: ProductRepository, carts: InMemoryCartStore) -> None:
        self._product_repo = product_repo
        self._carts = carts

    def handle(self, session: Session, product_id: str, quantity: str | Decimal) -> CartDTO:
        """Add kg of a product, merging with an existing line.

        The current effective price is frozen on the first add only.
        """
        qty = Quantity.of(quantity)
        product = _load_product(self._product_repo, product_id)
        cart = self._carts.get(session)

        already = cart.quantity_of(product.id)
        requested = qty + already if already is not None else qty
        _check_stock(product, requested)

        cart.add(product.id, product.name, qty, pricing.effective_price(product))
        return cart_to_dto(cart)


class FillCartHandler:
    """Add several lines at once, naming products instead of using IDs."""

    def __init__(self, product_repo: ProductRepository, carts: InMemoryCartStore) -> None:
        self._product_repo = product_repo
        self._add = AddToCartHandler(product_repo, carts)

    def handle(self, session: Session, item_specs: list[OrderItemSpec]) -> CartDTO:
        cart = None
        for spec in item_specs:
            product = self._product_repo.get_by_name(spec.product_name)
            if product is None:
                raise EntityNotFoundError(f"Product not found: '{spec.product_name}'")
            cart = self._add.handle(session, product.id, spec.quantity)
        if cart is None:
            raise ValidationError("Name at least one product", ErrorReason.EMPTY_CART)
        return cart


class UpdateCartQuantityHandler:

    def __init__(self, product_repo: ProductRepository, carts: InMemoryCartStore) -> None:
        self._product_repo = product_repo
        self._carts = carts

    def handle(self, session: Session, product_id: str, quantity: str | Decimal) -> CartDTO:
        qty = Quantity.of(quantity)
        cart = self._carts.get(session)
        if cart.quantity_of(product_id) is None:
            raise EntityNotFoundError(f"Product ID '{product_id}' is not in the cart")

        _check_stock(_load_product(self._product_repo, product_id), qty)
        cart.set_quantity(product_id, qty)
        return cart_to_dto(cart)


class RemoveFromCartHandler:

    def __init__(self, carts: InMemoryCartStore) -> None:
        self._carts = carts

    def handle(self, session: Session, product_id: str) -> CartDTO:
        cart = self._carts.get(session)
        cart.remove(product_id)
        return cart_to_dto(cart)


class ShowCartHandler:

    def __init__(self, carts: InMemoryCartStore) -> None:
        self._carts = carts

    def handle(self, session: Session) -> CartDTO:
        return cart_to_dto(self._carts.get(session))


# --- Shared helpers -----------------------------------------------------------


def _load_product(product_repo: ProductRepository, product_id: str) -> Product:
    product = product_repo.get_by_id(product_id)
    if product is None:
        raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
    return product


def _check_stock(product: Product, requested: Quantity) -> None:
    if requested.kg > product.stock_kg:
        raise ResourceExhausted(
            f"Insufficient stock for {product.name} "
            f"(requested {requested}, have {product.stock_kg:.3f} kg available)",
            product_id=product.id,
        )
