"""
Tests for package pricing.

Verifies that PricingCalculator correctly:
- Prices weekly bookings at weekly rate x weeks
- Prices daily bookings with full weeks at the weekly rate
- Adds add-ons on top of the base price
- Rejects unknown packages/add-ons and daily Full Feature bookings
- Caps discounts at the base price
"""

import pytest

from spotlight.core.exceptions import PricingValidationError
from spotlight.services.pricing import PricingCalculator, to_cents


class TestPricingCalculator:
    """Tests for the package pricing calculator."""

    def setup_method(self):
        self.calculator = PricingCalculator()

    # ------------------------------------------------------------------ #
    # Base price
    # ------------------------------------------------------------------ #

    def test_weekly_booking(self):
        """events_spotlight weekly x 2 = $120."""
        result = self.calculator.calculate("events_spotlight", "weekly", num_weeks=2)

        assert result.base_price_cents == 12000
        assert result.full_weeks == 2
        assert result.remaining_days == 0
        assert result.total_cents == 12000

    def test_daily_booking_uses_weekly_rate_for_full_weeks(self):
        """10 days = 1 week ($60) + 3 days ($30) = $90."""
        result = self.calculator.calculate("events_spotlight", "daily", num_days=10)

        assert result.full_weeks == 1
        assert result.remaining_days == 3
        assert result.base_price_cents == 9000

    def test_daily_booking_under_a_week(self):
        """homepage_feature 3 days at $25 = $75."""
        result = self.calculator.calculate("homepage_feature", "daily", num_days=3)

        assert result.base_price_cents == 7500

    def test_exact_week_of_days_matches_weekly_price(self):
        daily = self.calculator.calculate("homepage_feature", "daily", num_days=7)
        weekly = self.calculator.calculate("homepage_feature", "weekly", num_weeks=1)

        assert daily.base_price_cents == weekly.base_price_cents == 14000

    # ------------------------------------------------------------------ #
    # Add-ons
    # ------------------------------------------------------------------ #

    def test_add_ons_are_added_to_subtotal(self):
        result = self.calculator.calculate(
            "events_spotlight", "weekly", num_weeks=1, add_ons=["ig_story", "email_feature"]
        )

        assert result.addons_cents == 10000
        assert result.subtotal_cents == 16000
        assert [a["code"] for a in result.add_ons] == ["ig_story", "email_feature"]

    def test_unknown_add_on_is_rejected(self):
        with pytest.raises(PricingValidationError, match="Unknown add-on"):
            self.calculator.calculate("events_spotlight", "weekly", add_ons=["billboard"])

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def test_unknown_package_is_rejected(self):
        with pytest.raises(PricingValidationError, match="Unknown package"):
            self.calculator.calculate("mega_banner", "weekly")

    def test_unknown_duration_is_rejected(self):
        with pytest.raises(PricingValidationError, match="Unknown duration"):
            self.calculator.calculate("events_spotlight", "monthly")

    def test_full_feature_is_weekly_only(self):
        with pytest.raises(PricingValidationError, match="weekly"):
            self.calculator.calculate("full_feature", "daily", num_days=3)

        result = self.calculator.calculate("full_feature", "weekly", num_weeks=1)
        assert result.base_price_cents == 35000

    # ------------------------------------------------------------------ #
    # Discounts
    # ------------------------------------------------------------------ #

    def test_discount_applies_to_base_only(self):
        result = self.calculator.calculate(
            "events_spotlight", "weekly", num_weeks=1, add_ons=["ig_story"]
        )
        result.apply_discount("LAUNCH20", 1200)

        assert result.promo_applied is True
        assert result.total_cents == 6000 - 1200 + 1000

    def test_discount_is_capped_at_base_price(self):
        result = self.calculator.calculate(
            "events_spotlight", "weekly", num_weeks=1, add_ons=["ig_story"]
        )
        result.apply_discount("HUGE", 999999)

        assert result.promo_savings_cents == 6000
        assert result.total_cents == 1000

    def test_from_stored_does_not_reprice(self):
        result = self.calculator.from_stored(
            package_code="events_spotlight",
            duration="weekly",
            num_weeks=1,
            num_days=1,
            add_ons=[{"code": "ig_story", "price": 10}],
            base_price_cents=5500,
            promo_code="OLD",
            promo_savings_cents=500,
        )

        assert result.base_price_cents == 5500
        assert result.addons_cents == 1000
        assert result.total_cents == 6000


def test_to_cents_rounds_half_up():
    assert to_cents(10) == 1000
    assert to_cents("0.005") == 1
    assert to_cents(19.99) == 1999
