"""
Quote creation: price a selection (promo included) and persist it as an
immutable, time-boxed snapshot. A quote never redeems its promo.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.quote import Quote
from spotlight.schemas.quote import QuoteCreate
from spotlight.services.pricing import pricing_calculator
from spotlight.services.promo import resolve_promo


def create_quote(db: Session, *, obj_in: QuoteCreate, now: Optional[datetime] = None) -> Quote:
    breakdown = pricing_calculator.calculate(
        obj_in.package_code,
        obj_in.duration,
        num_weeks=obj_in.num_weeks,
        num_days=obj_in.num_days,
        add_ons=obj_in.add_ons,
    )
    if obj_in.promo_code:
        resolve_promo(db, code=obj_in.promo_code, breakdown=breakdown, now=now)

    return crud.quote.create_from_breakdown(db, obj_in=obj_in, breakdown=breakdown)
