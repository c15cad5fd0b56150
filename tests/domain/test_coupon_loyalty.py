"""Unit tests for coupon validity and the loyalty policy."""

from datetime import date
from decimal import Decimal

import pytest

from greengrocer.domain.exceptions import BusinessRuleViolation, ErrorReason, ValidationError
from greengrocer.domain.model.coupon import Coupon
from greengrocer.domain.model.loyalty import Customer, LoyaltySettings
from greengrocer.domain.model.value_objects import Money

TODAY = date(2026, 10, 19)


def _coupon(**overrides) -> Coupon:
    fields = {
        "code": " save5 ",
        "discount_percent": Decimal("5"),
        "min_order_value": Money.of("20"),
    }
    fields.update(overrides)
    return Coupon.create(**fields)


class TestCouponCreate:

    def test_code_is_normalised(self):
        assert _coupon().code == "SAVE5"

    def test_blank_code_rejected(self):
        with pytest.raises(ValidationError, match="code is required"):
            _coupon(code="  ")

    @pytest.mark.parametrize("percent", ["0", "-5", "100.01", "NaN", "Infinity"])
    def test_percent_out_of_range_rejected(self, percent):
        with pytest.raises(ValidationError, match="within"):
            _coupon(discount_percent=Decimal(percent))

    def test_negative_usage_limit_rejected(self):
        with pytest.raises(ValidationError, match="usage limit"):
            _coupon(max_usage=-1)


class TestCouponValidity:

    def test_valid_without_expiry(self):
        assert _coupon().is_valid(TODAY)

    def test_valid_on_expiry_day(self):
        assert _coupon(expiry_date=TODAY).is_valid(TODAY)

    def test_expired(self):
        assert not _coupon(expiry_date=date(2026, 10, 18)).is_valid(TODAY)

    def test_inactive(self):
        coupon = _coupon()
        coupon.deactivate()
        assert not coupon.is_valid(TODAY)

    def test_usage_limit_reached(self):
        coupon = _coupon(max_usage=2)
        coupon.usage_count = 2
        assert coupon.is_usage_limit_reached
        assert not coupon.is_valid(TODAY)

    def test_zero_limit_means_unlimited(self):
        coupon = _coupon(max_usage=0)
        coupon.usage_count = 10_000
        assert coupon.is_valid(TODAY)


class TestCouponApplicable:

    def test_applies_at_minimum(self):
        _coupon().ensure_applicable(Money.of("20.00"), TODAY)

    def test_below_minimum(self):
        with pytest.raises(BusinessRuleViolation) as exc_info:
            _coupon().ensure_applicable(Money.of("19.99"), TODAY)
        assert exc_info.value.reason is ErrorReason.COUPON_BELOW_MINIMUM

    def test_invalid_coupon(self):
        coupon = _coupon(expiry_date=date(2026, 1, 1))
        with pytest.raises(BusinessRuleViolation) as exc_info:
            coupon.ensure_applicable(Money.of("50"), TODAY)
        assert exc_info.value.reason is ErrorReason.COUPON_INVALID


class TestLoyalty:

    def test_defaults(self):
        settings = LoyaltySettings()
        assert settings.min_orders_for_discount == 5
        assert settings.discount_percent == Decimal("10")

    def test_eligibility_boundary(self):
        settings = LoyaltySettings(min_orders_for_discount=3)
        assert not settings.is_eligible(2)
        assert settings.is_eligible(3)

    def test_invalid_threshold_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            LoyaltySettings(min_orders_for_discount=0)

    @pytest.mark.parametrize("percent", ["150", "NaN"])
    def test_invalid_percent_rejected(self, percent):
        with pytest.raises(ValidationError, match="within"):
            LoyaltySettings(discount_percent=Decimal(percent))

    def test_orders_until_eligible(self):
        settings = LoyaltySettings(min_orders_for_discount=5)
        assert Customer("c1", "Ada", completed_orders=3).orders_until_eligible(settings) == 2
        assert Customer("c1", "Ada", completed_orders=9).orders_until_eligible(settings) == 0
