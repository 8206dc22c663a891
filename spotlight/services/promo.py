"""
Promo code resolution.

A promo is applied to the base price only. It must be active, inside its
validity window (valid_to counts through the end of its day), applicable to
the package, reached by the order subtotal and below its usage cap.

Evaluating a promo never redeems it; redemption happens once, inside the
application transaction (see spotlight.services.applications).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.promo_code import PromoCode
from spotlight.schemas.promo import DiscountType, PromoValidateRequest, PromoValidateResponse
from spotlight.services.pricing import DAILY, PACKAGES, WEEKLY, PriceBreakdown, to_cents
from spotlight.utils.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

# Launch promo: one free week for weekly bookings placed in September 2025,
# once per sponsor email. Applied automatically when no code is entered.
LEGACY_FREE_WEEK_CODE = "SEPTEMBER_FREE_WEEK_2025"
LEGACY_FREE_WEEK_YEAR = 2025
LEGACY_FREE_WEEK_MONTH = 9


@dataclass
class PromoEvaluation:
    code: str
    applied: bool
    discount_cents: int = 0
    reason: Optional[str] = None
    promo: Optional[PromoCode] = None
    legacy: bool = False
    # Every rule passed; the discount itself may still be zero
    eligible: bool = False


def _valid_until(promo: PromoCode) -> datetime:
    """valid_to is inclusive through the end of its (UTC) day."""
    valid_to = as_utc(promo.valid_to)
    return datetime.combine(valid_to.date(), time.max, tzinfo=timezone.utc)


def calculate_discount_cents(
    promo: PromoCode,
    *,
    base_price_cents: int,
    daily_rate: int = 0,
) -> int:
    """Discount on the base price, never more than the base price itself."""
    value = Decimal(str(promo.discount_value))

    if promo.discount_type == DiscountType.PERCENTAGE.value:
        discount = (Decimal(base_price_cents) * value / 100).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return min(int(discount), base_price_cents)

    if promo.discount_type == DiscountType.FIXED_AMOUNT.value:
        return min(to_cents(value), base_price_cents)

    if promo.discount_type == DiscountType.FREE_DAYS.value:
        return min(to_cents(value * daily_rate), base_price_cents)

    logger.warning(f"Promo {promo.code} has unknown discount type {promo.discount_type}")
    return 0


def evaluate_promo(
    promo: Optional[PromoCode],
    *,
    code: str,
    base_price_cents: int,
    subtotal_cents: Optional[int],
    package_code: Optional[str] = None,
    duration: Optional[str] = None,
    now: Optional[datetime] = None,
) -> PromoEvaluation:
    """
    Check every promo rule and compute the discount.

    `package_code`, `duration` and `subtotal_cents` may be None for a
    preview, in which case the checks that need them are skipped.
    """
    now = now or utcnow()

    def reject(reason: str) -> PromoEvaluation:
        return PromoEvaluation(code=code, applied=False, reason=reason, promo=promo)

    if promo is None or not promo.is_active:
        return reject("Invalid promo code")

    if now < as_utc(promo.valid_from) or now > _valid_until(promo):
        return reject("Promo code has expired or is not yet valid")

    if promo.max_uses is not None and promo.current_uses >= promo.max_uses:
        return reject("Promo code has reached its usage limit")

    min_purchase_cents = to_cents(promo.min_purchase_amount or 0)
    if min_purchase_cents and subtotal_cents is not None and subtotal_cents < min_purchase_cents:
        return reject(f"Minimum purchase amount of ${promo.min_purchase_amount} required")

    if package_code and promo.applicable_packages and package_code not in promo.applicable_packages:
        return reject("Promo code not valid for selected package")

    daily_rate = 0
    if promo.discount_type == DiscountType.FREE_DAYS.value:
        if duration is not None and duration != DAILY:
            return reject("Free-day promo codes only apply to daily bookings")
        package = PACKAGES.get(package_code) if package_code else None
        daily_rate = package.daily_rate if package else 0

    discount = calculate_discount_cents(
        promo, base_price_cents=base_price_cents, daily_rate=daily_rate
    )
    return PromoEvaluation(
        code=promo.code,
        applied=discount > 0,
        eligible=True,
        discount_cents=discount,
        promo=promo,
        reason=None if discount > 0 else "Promo code gives no discount for this booking",
    )


def resolve_promo(
    db: Session,
    *,
    code: str,
    breakdown: PriceBreakdown,
    now: Optional[datetime] = None,
) -> PromoEvaluation:
    """Look up `code` and, when every rule passes, apply it to `breakdown`."""
    promo = crud.promo_code.get_by_code(db, code=code)
    evaluation = evaluate_promo(
        promo,
        code=code.upper(),
        base_price_cents=breakdown.base_price_cents,
        subtotal_cents=breakdown.subtotal_cents,
        package_code=breakdown.package_code,
        duration=breakdown.duration,
        now=now,
    )
    if evaluation.applied:
        breakdown.apply_discount(evaluation.code, evaluation.discount_cents)
    else:
        logger.warning(f"Promo code {code.upper()} not applied: {evaluation.reason}")
    return evaluation


def legacy_promo_window_open(now: datetime) -> bool:
    now = as_utc(now)
    return now.year == LEGACY_FREE_WEEK_YEAR and now.month == LEGACY_FREE_WEEK_MONTH


def resolve_legacy_promo(
    db: Session,
    *,
    breakdown: PriceBreakdown,
    email: str,
    now: Optional[datetime] = None,
) -> PromoEvaluation:
    """
    Apply the September 2025 free-week promo when eligible: weekly bookings
    only, once per email. The whole base price is waived; add-ons are still
    charged.
    """
    now = now or utcnow()
    if breakdown.duration != WEEKLY or not legacy_promo_window_open(now):
        return PromoEvaluation(code=LEGACY_FREE_WEEK_CODE, applied=False, legacy=True,
                               reason="Not eligible")

    if crud.promo_redemption.has_redeemed(db, code=LEGACY_FREE_WEEK_CODE, email=email):
        logger.info(f"{LEGACY_FREE_WEEK_CODE} already redeemed by {email}")
        return PromoEvaluation(code=LEGACY_FREE_WEEK_CODE, applied=False, legacy=True,
                               reason="Already redeemed")

    breakdown.apply_discount(LEGACY_FREE_WEEK_CODE, breakdown.base_price_cents)
    return PromoEvaluation(
        code=LEGACY_FREE_WEEK_CODE,
        applied=breakdown.promo_savings_cents > 0,
        discount_cents=breakdown.promo_savings_cents,
        legacy=True,
    )


def describe_discount(promo: PromoCode) -> str:
    value = Decimal(str(promo.discount_value))
    if value == value.to_integral_value():
        value = int(value)
    if promo.discount_type == DiscountType.PERCENTAGE.value:
        return f"{value}% off"
    if promo.discount_type == DiscountType.FIXED_AMOUNT.value:
        return f"${value} off"
    return f"{value} free day{'s' if value != 1 else ''}"


def preview_promo(
    db: Session,
    request: PromoValidateRequest,
    now: Optional[datetime] = None,
) -> PromoValidateResponse:
    """Discount preview for the checkout form. Never redeems."""
    promo = crud.promo_code.get_by_code(db, code=request.code)
    amount_cents = to_cents(request.total_amount) if request.total_amount is not None else 0

    evaluation = evaluate_promo(
        promo,
        code=request.code,
        base_price_cents=amount_cents,
        subtotal_cents=amount_cents if request.total_amount is not None else None,
        package_code=request.package_code,
        now=now,
    )

    if not evaluation.eligible:
        return PromoValidateResponse(valid=False, code=request.code, message=evaluation.reason)

    return PromoValidateResponse(
        valid=True,
        code=promo.code,
        message=describe_discount(promo),
        discount_type=promo.discount_type,
        discount_value=float(promo.discount_value),
        discount_cents=evaluation.discount_cents,
        final_amount_cents=(
            amount_cents - evaluation.discount_cents if request.total_amount is not None else None
        ),
    )
