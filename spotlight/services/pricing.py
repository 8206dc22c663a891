"""
Sponsorship package pricing.

Pricing model (CAD, whole-dollar rates, stored as cents):
- daily booking: full 7-day blocks at the weekly rate, leftover days at the daily rate
- weekly booking: weekly rate * number of weeks
- add-ons are flat per-unit prices, summed independently of the base
- promo discounts only ever reduce the base price, never add-ons
- the Full Feature package is weekly-only
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from spotlight.core.exceptions import PricingValidationError

DAILY = "daily"
WEEKLY = "weekly"
DURATIONS = (DAILY, WEEKLY)


@dataclass(frozen=True)
class Package:
    code: str
    name: str
    daily_rate: int   # dollars
    weekly_rate: int  # dollars
    weekly_only: bool = False


PACKAGES: Dict[str, Package] = {
    "events_spotlight": Package("events_spotlight", "Events Spotlight Banner", 10, 60),
    "homepage_feature": Package("homepage_feature", "Homepage Feature Banner", 25, 140),
    "full_feature": Package(
        "full_feature",
        "Full Feature (Both Placements + Email + IG Story)",
        0,
        350,
        weekly_only=True,
    ),
}

ADD_ONS: Dict[str, int] = {
    "ig_story": 10,
    "email_feature": 90,
}

# Placements a package buys; used when a lead is onboarded into a campaign.
PACKAGE_PLACEMENTS: Dict[str, List[str]] = {
    "events_spotlight": ["events_banner"],
    "homepage_feature": ["home_mid"],
    "full_feature": ["events_banner", "home_mid"],
}


def to_cents(amount) -> int:
    """Convert a dollar amount (int, float or Decimal) to integer cents, rounding half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class PriceBreakdown:
    package_code: str
    duration: str
    num_weeks: int
    num_days: int
    full_weeks: int
    remaining_days: int
    base_price_cents: int
    add_ons: List[dict] = field(default_factory=list)  # [{"code": ..., "price": dollars}]
    addons_cents: int = 0
    promo_code: Optional[str] = None
    promo_savings_cents: int = 0

    @property
    def subtotal_cents(self) -> int:
        return self.base_price_cents + self.addons_cents

    @property
    def total_cents(self) -> int:
        return self.base_price_cents - self.promo_savings_cents + self.addons_cents

    @property
    def promo_applied(self) -> bool:
        return self.promo_code is not None and self.promo_savings_cents > 0

    def apply_discount(self, code: str, discount_cents: int) -> None:
        """Apply a base-price discount; it can never exceed the base price."""
        self.promo_code = code
        self.promo_savings_cents = max(0, min(discount_cents, self.base_price_cents))

    def clear_discount(self) -> None:
        self.promo_code = None
        self.promo_savings_cents = 0


def get_package(package_code: str) -> Package:
    package = PACKAGES.get(package_code)
    if package is None:
        raise PricingValidationError(f"Unknown package: {package_code}")
    return package


def validate_selection(package_code: str, duration: str) -> Package:
    """Reject unknown packages/durations and daily bookings of weekly-only packages."""
    package = get_package(package_code)
    if duration not in DURATIONS:
        raise PricingValidationError(f"Unknown duration: {duration}")
    if package.weekly_only and duration == DAILY:
        raise PricingValidationError(
            f"{package.name} package is only available as a weekly booking"
        )
    return package


def calculate_base_price(package: Package, duration: str, num_weeks: int, num_days: int) -> tuple:
    """
    Returns (base_price_dollars, full_weeks, remaining_days).

    Daily bookings always price full 7-day blocks at the cheaper weekly rate.
    """
    if duration == DAILY:
        if num_days < 1:
            raise PricingValidationError("numDays must be at least 1")
        full_weeks, remaining_days = divmod(num_days, 7)
        base = full_weeks * package.weekly_rate + remaining_days * package.daily_rate
        return base, full_weeks, remaining_days

    if num_weeks < 1:
        raise PricingValidationError("numWeeks must be at least 1")
    return package.weekly_rate * num_weeks, num_weeks, 0


def price_add_ons(add_on_codes: List[str]) -> List[dict]:
    priced = []
    for code in add_on_codes:
        if code not in ADD_ONS:
            raise PricingValidationError(f"Unknown add-on: {code}")
        priced.append({"code": code, "price": ADD_ONS[code]})
    return priced


class PricingCalculator:
    """
    Prices a package selection before any promo is considered.

    Promo resolution lives in spotlight.services.promo; it only ever calls
    PriceBreakdown.apply_discount on the result.
    """

    def calculate(
        self,
        package_code: str,
        duration: str,
        *,
        num_weeks: int = 1,
        num_days: int = 1,
        add_ons: Optional[List[str]] = None,
    ) -> PriceBreakdown:
        package = validate_selection(package_code, duration)
        base, full_weeks, remaining_days = calculate_base_price(
            package, duration, num_weeks, num_days
        )
        priced_add_ons = price_add_ons(add_ons or [])

        return PriceBreakdown(
            package_code=package.code,
            duration=duration,
            num_weeks=num_weeks,
            num_days=num_days,
            full_weeks=full_weeks,
            remaining_days=remaining_days,
            base_price_cents=to_cents(base),
            add_ons=priced_add_ons,
            addons_cents=sum(to_cents(a["price"]) for a in priced_add_ons),
        )

    def from_stored(
        self,
        *,
        package_code: str,
        duration: str,
        num_weeks: int,
        num_days: int,
        add_ons: List[dict],
        base_price_cents: int,
        promo_code: Optional[str] = None,
        promo_savings_cents: int = 0,
    ) -> PriceBreakdown:
        """Rebuild a breakdown from a persisted quote without re-pricing it."""
        full_weeks, remaining_days = (
            divmod(num_days, 7) if duration == DAILY else (num_weeks, 0)
        )
        breakdown = PriceBreakdown(
            package_code=package_code,
            duration=duration,
            num_weeks=num_weeks,
            num_days=num_days,
            full_weeks=full_weeks,
            remaining_days=remaining_days,
            base_price_cents=base_price_cents,
            add_ons=list(add_ons or []),
            addons_cents=sum(to_cents(a.get("price", 0)) for a in add_ons or []),
        )
        if promo_code and promo_savings_cents:
            breakdown.apply_discount(promo_code, promo_savings_cents)
        return breakdown


pricing_calculator = PricingCalculator()
