"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from greengrocer.domain.exceptions import ErrorReason, ValidationError
from greengrocer.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative") as exc_info:
            Money(Decimal("-1"))
        assert exc_info.value.reason is ErrorReason.INVALID_AMOUNT

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", "sNaN"])
    def test_non_finite_amount_rejected(self, raw):
        with pytest.raises(ValidationError, match="must be finite") as exc_info:
            Money.of(raw)
        assert exc_info.value.reason is ErrorReason.INVALID_AMOUNT

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(1.5)

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_multiplication_by_decimal_keeps_precision(self):
        assert (Money.of("2.99") * Decimal("1.255")).amount == Decimal("3.75245")

    def test_multiplication_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("2") * 1.5

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_rounding_is_half_even(self):
        assert Money.of("2.675").rounded() == Money.of("2.68")
        assert Money.of("2.665").rounded() == Money.of("2.66")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "$15.00"
        assert str(Money.of("9.5")) == "$9.50"

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") >= Money.of("10")
        assert Money.of("10.00") == Money.of("10")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_fractional_kilograms(self):
        assert Quantity.of("1.25").kg == Decimal("1.25")

    def test_grams(self):
        assert Quantity.of("1.25").grams == 1250
        assert Quantity.from_grams(750) == Quantity.of("0.75")

    @pytest.mark.parametrize("raw", ["0", "-1", "-0.5", "NaN", "Infinity"])
    def test_non_positive_or_non_finite_rejected(self, raw):
        with pytest.raises(ValidationError, match="must be positive") as exc_info:
            Quantity.of(raw)
        assert exc_info.value.reason is ErrorReason.INVALID_QUANTITY

    def test_finer_than_a_gram_rejected(self):
        with pytest.raises(ValidationError, match="finer than one gram"):
            Quantity.of("1.0005")

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="Invalid quantity"):
            Quantity.of("lots")

    def test_addition(self):
        assert Quantity.of("1.5") + Quantity.of("0.25") == Quantity.of("1.75")

    def test_str_formatting(self):
        assert str(Quantity.of("2.5")) == "2.500 kg"
