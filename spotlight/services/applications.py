"""
Sponsorship applications: turn a quote (or a standalone selection) plus
contact details into an immutable lead.

Order of work:
1. creative URLs are validated
2. the price is resolved (quote, fresh promo, or legacy promo)
3. weekly-only packages must carry both acknowledgements
4. promo redemption, ledger row and lead insert commit as one transaction
Nothing is written before step 4.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.core.config import settings
from spotlight.core.exceptions import ApplicationValidationError
from spotlight.models.lead import Lead
from spotlight.schemas.lead import ApplicationCreate
from spotlight.services.pricing import PriceBreakdown, get_package, pricing_calculator
from spotlight.services.promo import PromoEvaluation, resolve_legacy_promo, resolve_promo
from spotlight.utils.timeutils import utcnow
from spotlight.utils.validators import validate_asset_url

logger = logging.getLogger(__name__)


@dataclass
class ResolvedApplication:
    breakdown: PriceBreakdown
    promo: Optional[PromoEvaluation]
    selected_dates: List[str]
    start_date: Optional[str]
    end_date: Optional[str]
    # True when the price comes straight from a stored quote
    from_quote: bool = False


def validate_creative_urls(obj_in: ApplicationCreate) -> None:
    for field_name in ("desktop_asset_url", "mobile_asset_url"):
        valid, error = validate_asset_url(getattr(obj_in, field_name), field_name)
        if not valid:
            raise ApplicationValidationError(error)


def check_acknowledgements(package_code: str, obj_in: ApplicationCreate) -> None:
    package = get_package(package_code)
    if package.weekly_only and not (obj_in.ack_exclusive and obj_in.ack_guarantee):
        raise ApplicationValidationError(
            f"{package.name} requires acknowledgement of exclusivity and guarantee terms"
        )


def _resolve_from_quote(
    db: Session, obj_in: ApplicationCreate, email: str, now: datetime
) -> ResolvedApplication:
    quote = crud.quote.get_valid(db, quote_id=obj_in.quote_id, now=now)

    if obj_in.package_code and obj_in.package_code != quote.package_code:
        raise ApplicationValidationError("Package selection does not match quote")

    promo = None
    if obj_in.promo_code:
        # Fresh code: re-price the quote's stored selection with it
        breakdown = pricing_calculator.calculate(
            quote.package_code,
            quote.duration,
            num_weeks=quote.num_weeks,
            num_days=quote.num_days,
            add_ons=[a["code"] for a in quote.add_ons or []],
        )
        promo = resolve_promo(db, code=obj_in.promo_code, breakdown=breakdown, now=now)
        from_quote = False
    else:
        breakdown = pricing_calculator.from_stored(
            package_code=quote.package_code,
            duration=quote.duration,
            num_weeks=quote.num_weeks,
            num_days=quote.num_days,
            add_ons=quote.add_ons or [],
            base_price_cents=quote.base_price_cents,
            promo_code=quote.promo_code if quote.promo_applied else None,
            promo_savings_cents=quote.promo_savings_cents,
        )
        from_quote = True
        if breakdown.promo_applied:
            db_promo = crud.promo_code.get_by_code(db, code=breakdown.promo_code)
            promo = PromoEvaluation(
                code=breakdown.promo_code,
                applied=True,
                eligible=True,
                discount_cents=breakdown.promo_savings_cents,
                promo=db_promo,
            )
        else:
            promo = resolve_legacy_promo(db, breakdown=breakdown, email=email, now=now)

    return ResolvedApplication(
        breakdown=breakdown,
        promo=promo,
        selected_dates=quote.selected_dates or [],
        start_date=obj_in.start_date or quote.start_date,
        end_date=obj_in.end_date or quote.end_date,
        from_quote=from_quote,
    )


def _resolve_standalone(
    db: Session, obj_in: ApplicationCreate, email: str, now: datetime
) -> ResolvedApplication:
    if not obj_in.package_code or not obj_in.duration:
        raise ApplicationValidationError(
            "Package code and duration are required when not using a quote"
        )

    breakdown = pricing_calculator.calculate(
        obj_in.package_code,
        obj_in.duration,
        num_weeks=obj_in.num_weeks or 1,
        num_days=obj_in.num_days or len(obj_in.selected_dates) or 1,
        add_ons=obj_in.add_ons,
    )
    if obj_in.promo_code:
        promo = resolve_promo(db, code=obj_in.promo_code, breakdown=breakdown, now=now)
    else:
        promo = resolve_legacy_promo(db, breakdown=breakdown, email=email, now=now)

    return ResolvedApplication(
        breakdown=breakdown,
        promo=promo,
        selected_dates=obj_in.selected_dates,
        start_date=obj_in.start_date,
        end_date=obj_in.end_date,
    )


def resolve_application(
    db: Session, obj_in: ApplicationCreate, email: str, now: datetime
) -> ResolvedApplication:
    if obj_in.quote_id:
        return _resolve_from_quote(db, obj_in, email, now)
    return _resolve_standalone(db, obj_in, email, now)


def _redeem_promo(db: Session, resolved: ResolvedApplication, email: str):
    """
    Claim the promo inside the open transaction. Returns the ledger row, or
    None when no promo ends up applied.
    """
    breakdown = resolved.breakdown
    promo = resolved.promo
    if promo is None or not promo.applied or not breakdown.promo_applied:
        return None

    if promo.legacy:
        return crud.promo_redemption.add(
            db,
            code=promo.code,
            sponsor_email=email,
            discount_cents=breakdown.promo_savings_cents,
            once_per_email=True,
            notes=f"Applied to lead for {breakdown.package_code}",
        )

    promo_code_id = promo.promo.id if promo.promo is not None else None
    claimed = promo_code_id is not None and crud.promo_code.try_increment_usage(
        db, promo_code_id=promo_code_id
    )
    notes = None
    if not claimed:
        if not resolved.from_quote:
            logger.warning(f"Promo code {promo.code} hit its usage cap during submission; not applied")
            breakdown.clear_discount()
            return None
        # A quote is a binding offer for its validity window
        logger.warning(f"Honouring quoted promo {promo.code} although its usage could not be claimed")
        notes = "Quoted price honoured; usage not claimed"

    return crud.promo_redemption.add(
        db,
        code=promo.code,
        promo_code_id=promo_code_id,
        sponsor_email=email,
        discount_cents=breakdown.promo_savings_cents,
        notes=notes,
    )


def _build_lead(
    obj_in: ApplicationCreate,
    resolved: ResolvedApplication,
    email: str,
    raw_payload: Dict[str, Any],
) -> Lead:
    breakdown = resolved.breakdown
    return Lead(
        quote_id=obj_in.quote_id,
        business_name=obj_in.business_name,
        contact_name=obj_in.contact_name,
        email=email,
        instagram=obj_in.instagram,
        website=obj_in.website,
        package_code=breakdown.package_code,
        duration=breakdown.duration,
        num_weeks=breakdown.num_weeks,
        num_days=breakdown.num_days,
        selected_dates=resolved.selected_dates,
        start_date=resolved.start_date,
        end_date=resolved.end_date,
        add_ons=breakdown.add_ons,
        currency=settings.CURRENCY,
        base_price_cents=breakdown.base_price_cents,
        addons_cents=breakdown.addons_cents,
        subtotal_cents=breakdown.subtotal_cents,
        promo_savings_cents=breakdown.promo_savings_cents,
        total_cents=breakdown.total_cents,
        promo_applied=breakdown.promo_applied,
        promo_code=breakdown.promo_code if breakdown.promo_applied else None,
        objective=obj_in.objective,
        budget_range=obj_in.budget_range,
        ack_exclusive=obj_in.ack_exclusive,
        ack_guarantee=obj_in.ack_guarantee,
        desktop_asset_url=obj_in.desktop_asset_url,
        mobile_asset_url=obj_in.mobile_asset_url,
        creative_links=obj_in.creative_links,
        comments=obj_in.comments,
        payload=raw_payload,
        status="new",
    )


def _persist(
    db: Session,
    obj_in: ApplicationCreate,
    resolved: ResolvedApplication,
    email: str,
    raw_payload: Dict[str, Any],
) -> Lead:
    redemption = _redeem_promo(db, resolved, email)
    lead = _build_lead(obj_in, resolved, email, raw_payload)
    db.add(lead)
    db.flush()
    if redemption is not None:
        redemption.lead_id = lead.id
    db.commit()
    db.refresh(lead)
    return lead


def create_application(
    db: Session,
    *,
    obj_in: ApplicationCreate,
    raw_payload: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Lead:
    """
    Validate, price and persist a sponsorship application.

    Raises ApplicationValidationError, PricingValidationError,
    QuoteNotFoundError or QuoteExpiredError before anything is written.

    `raw_payload` is stored on the lead for audit; the endpoint passes the
    body as submitted. Without it the validated model is stored instead.
    """
    now = now or utcnow()
    email = str(obj_in.email).strip().lower()
    raw_payload = raw_payload if raw_payload is not None else obj_in.model_dump(
        mode="json", by_alias=True, exclude_unset=True
    )

    validate_creative_urls(obj_in)
    resolved = resolve_application(db, obj_in, email, now)
    check_acknowledgements(resolved.breakdown.package_code, obj_in)

    try:
        lead = _persist(db, obj_in, resolved, email, raw_payload)
    except IntegrityError:
        db.rollback()
        if resolved.promo is None or not resolved.promo.legacy:
            raise
        # Concurrent submission from the same email claimed the legacy promo first
        logger.warning(f"Legacy promo already redeemed by {email}; submitting at full price")
        resolved.breakdown.clear_discount()
        resolved.promo = None
        lead = _persist(db, obj_in, resolved, email, raw_payload)

    logger.info(
        f"Lead {lead.id} created for {lead.business_name}: {lead.package_code}/{lead.duration}, "
        f"total {lead.total_cents} cents, promo {lead.promo_code or 'none'}"
    )
    return lead
