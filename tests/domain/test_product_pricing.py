"""Unit tests for the Product aggregate and the pricing engine."""

from decimal import Decimal

import pytest

from greengrocer.domain.exceptions import ValidationError
from greengrocer.domain.model.cart import CartLine
from greengrocer.domain.model.product import Category, Product, StockReservation
from greengrocer.domain.model.value_objects import Money, Quantity
from greengrocer.domain.service import pricing


def _product(stock: str = "20", threshold: str = "5", price: str = "3.00") -> Product:
    return Product.create(
        product_id="P1",
        name="Tomato",
        category=Category.VEGETABLE,
        price=Money.of(price),
        stock_kg=Decimal(stock),
        threshold_kg=Decimal(threshold),
    )


class TestProduct:

    def test_create_strips_name(self):
        assert _product().name == "Tomato"

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            _product(price="0")

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            _product(stock="-1")

    @pytest.mark.parametrize("raw", ["NaN", "Infinity"])
    def test_non_finite_weights_rejected(self, raw):
        with pytest.raises(ValidationError, match="finite weight"):
            _product(stock=raw)
        with pytest.raises(ValidationError, match="finite weight"):
            _product(threshold=raw)

    def test_threshold_finer_than_gram_rejected(self):
        with pytest.raises(ValidationError, match="finer than one gram"):
            _product(threshold="0.0001")

    def test_low_stock_at_threshold(self):
        assert _product(stock="5", threshold="5").is_low_stock
        assert not _product(stock="5.001", threshold="5").is_low_stock

    def test_out_of_stock(self):
        assert _product(stock="0").is_out_of_stock

    def test_update_price(self):
        product = _product()
        product.update_price(Money.of("4.10"))
        assert product.price == Money.of("4.10")

    def test_restock_sets_level(self):
        product = _product()
        product.restock(Decimal("42.5"))
        assert product.stock_kg == Decimal("42.5")


class TestStockReservation:

    def _reservation(self, before: str, after: str, threshold: str = "5") -> StockReservation:
        return StockReservation(
            product_id="P1",
            product_name="Tomato",
            quantity=Quantity.of("1"),
            stock_before_kg=Decimal(before),
            stock_after_kg=Decimal(after),
            threshold_kg=Decimal(threshold),
        )

    def test_crossing_into_low_band(self):
        assert self._reservation("10", "4").crossed_threshold

    def test_already_low_does_not_cross_again(self):
        assert not self._reservation("5", "4").crossed_threshold

    def test_landing_exactly_on_threshold_crosses(self):
        assert self._reservation("6", "5").crossed_threshold

    def test_stocked_out(self):
        assert self._reservation("1", "0").stocked_out


class TestEffectivePrice:

    def test_doubled_at_threshold(self):
        assert pricing.effective_price(_product(stock="5", threshold="5")) == Money.of("6.00")

    def test_not_doubled_just_above_threshold(self):
        assert pricing.effective_price(_product(stock="5.001", threshold="5")) == Money.of("3.00")

    def test_doubled_when_out_of_stock(self):
        assert pricing.effective_price(_product(stock="0")) == Money.of("6.00")


class TestTotals:

    def test_subtotal_sums_line_totals(self):
        lines = [
            CartLine("P1", "Tomato", Quantity.of("2.5"), Money.of("3.00")),
            CartLine("P2", "Apple", Quantity.of("1"), Money.of("4.50")),
        ]
        assert pricing.subtotal(lines) == Money.of("12.00")

    def test_grand_total_without_discount_adds_vat(self):
        assert pricing.grand_total(Money.of("100"), Decimal("0")) == Money.of("118")
        assert pricing.grand_total(Money.of("37.40"), Decimal("0")) == Money.of("44.132")

    def test_percentages_stack_additively(self):
        assert pricing.combined_discount_percent(Decimal("10"), Decimal("5")) == Decimal("15")

    def test_combined_discount_capped_at_hundred(self):
        assert pricing.combined_discount_percent(Decimal("60"), Decimal("50")) == Decimal("100")

    def test_quote_with_loyalty_and_coupon(self):
        percent = pricing.combined_discount_percent(Decimal("10"), Decimal("5"))
        amounts = pricing.quote(Money.of("100"), percent)
        assert amounts.subtotal == Money.of("100.00")
        assert amounts.discount == Money.of("15.00")
        assert amounts.vat == Money.of("15.30")
        assert amounts.total == Money.of("100.30")

    def test_quote_rounds_parts_and_total_adds_up(self):
        amounts = pricing.quote(Money.of("33.333"), Decimal("0"))
        assert amounts.subtotal == Money.of("33.33")
        assert amounts.vat == Money.of("6.00")
        assert amounts.total == amounts.subtotal - amounts.discount + amounts.vat

    def test_full_discount_leaves_nothing_to_pay(self):
        amounts = pricing.quote(Money.of("20"), Decimal("100"))
        assert amounts.total == Money.zero()
