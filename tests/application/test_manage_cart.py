"""Integration tests for the cart editing use cases."""

from decimal import Decimal

import pytest

from greengrocer.application.dto import OrderItemSpec
from greengrocer.application.manage_cart import (
    AddToCartHandler,
    FillCartHandler,
    RemoveFromCartHandler,
    ShowCartHandler,
    UpdateCartQuantityHandler,
)
from greengrocer.application.session import InMemoryCartStore, Session
from greengrocer.domain.exceptions import EntityNotFoundError, ResourceExhausted, ValidationError
from greengrocer.domain.model.product import Category, Product
from greengrocer.domain.model.value_objects import Money
from tests.fakes import FakeProductRepository


def _setup():
    products = FakeProductRepository([
        Product("P1", "Tomato", Category.VEGETABLE, Money.of("3.00"), Decimal("10"), Decimal("4")),
        Product("P2", "Apple", Category.FRUIT, Money.of("4.00"), Decimal("2"), Decimal("2")),
    ])
    return products, InMemoryCartStore(), Session(user_id="cust-1")


class TestAddToCart:

    def test_add_uses_effective_price(self):
        products, carts, session = _setup()
        dto = AddToCartHandler(products, carts).handle(session, "P2", "1")
        # Apple sits at its threshold, so its price is doubled.
        assert dto.lines[0].unit_price == "$8.00"
        assert dto.subtotal == "$8.00"
        assert dto.meets_minimum is False

    def test_merge_checks_combined_quantity(self):
        products, carts, session = _setup()
        add = AddToCartHandler(products, carts)
        add.handle(session, "P1", "6")
        with pytest.raises(ResourceExhausted, match="Insufficient stock for Tomato"):
            add.handle(session, "P1", "5")
        assert carts.get(session).lines[0].quantity.kg == Decimal("6")

    def test_merge_within_stock(self):
        products, carts, session = _setup()
        add = AddToCartHandler(products, carts)
        add.handle(session, "P1", "6")
        dto = add.handle(session, "P1", "4")
        assert dto.lines[0].quantity == "10.000 kg"

    def test_unknown_product(self):
        products, carts, session = _setup()
        with pytest.raises(EntityNotFoundError):
            AddToCartHandler(products, carts).handle(session, "P9", "1")

    def test_invalid_quantity(self):
        products, carts, session = _setup()
        with pytest.raises(ValidationError):
            AddToCartHandler(products, carts).handle(session, "P1", "0")


class TestEditCart:

    def test_update_quantity(self):
        products, carts, session = _setup()
        AddToCartHandler(products, carts).handle(session, "P1", "2")
        dto = UpdateCartQuantityHandler(products, carts).handle(session, "P1", "3.5")
        assert dto.lines[0].quantity == "3.500 kg"
        assert dto.subtotal == "$10.50"

    def test_update_beyond_stock(self):
        products, carts, session = _setup()
        AddToCartHandler(products, carts).handle(session, "P1", "2")
        with pytest.raises(ResourceExhausted):
            UpdateCartQuantityHandler(products, carts).handle(session, "P1", "11")

    def test_update_missing_line(self):
        products, carts, session = _setup()
        with pytest.raises(EntityNotFoundError, match="not in the cart"):
            UpdateCartQuantityHandler(products, carts).handle(session, "P1", "1")

    def test_remove(self):
        products, carts, session = _setup()
        AddToCartHandler(products, carts).handle(session, "P1", "2")
        dto = RemoveFromCartHandler(carts).handle(session, "P1")
        assert dto.lines == []

    def test_show(self):
        products, carts, session = _setup()
        AddToCartHandler(products, carts).handle(session, "P1", "4")
        dto = ShowCartHandler(carts).handle(session)
        assert dto.subtotal == "$12.00"
        assert dto.meets_minimum is True


class TestFillCart:

    def test_fill_by_name(self):
        products, carts, session = _setup()
        dto = FillCartHandler(products, carts).handle(
            session, [OrderItemSpec("tomato", "2"), OrderItemSpec("Apple", "0.5")]
        )
        assert [line.product_id for line in dto.lines] == ["P1", "P2"]

    def test_unknown_name(self):
        products, carts, session = _setup()
        with pytest.raises(EntityNotFoundError, match="Mango"):
            FillCartHandler(products, carts).handle(session, [OrderItemSpec("Mango", "1")])

    def test_no_items(self):
        products, carts, session = _setup()
        with pytest.raises(ValidationError):
            FillCartHandler(products, carts).handle(session, [])


class TestSessions:

    def test_carts_are_per_session(self):
        products, carts, session = _setup()
        other = Session(user_id="cust-1")
        AddToCartHandler(products, carts).handle(session, "P1", "2")
        assert carts.get(other).is_empty

    def test_logout_discards_cart(self):
        products, carts, session = _setup()
        AddToCartHandler(products, carts).handle(session, "P1", "2")
        carts.logout(session)
        assert carts.get(session).is_empty
