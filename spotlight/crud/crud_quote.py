# spotlight/crud/crud_quote.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from spotlight.core.config import settings
from spotlight.core.exceptions import QuoteExpiredError, QuoteNotFoundError
from spotlight.crud.base import CRUDBase
from spotlight.models.quote import Quote
from spotlight.schemas.quote import QuoteCreate
from spotlight.services.pricing import PriceBreakdown
from spotlight.utils.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)


class CRUDQuote(CRUDBase[Quote, QuoteCreate, QuoteCreate]):
    def create_from_breakdown(
        self,
        db: Session,
        *,
        obj_in: QuoteCreate,
        breakdown: PriceBreakdown,
    ) -> Quote:
        """Persist a priced selection. Quotes are never updated afterwards."""
        now = utcnow()
        db_obj = self.model(
            package_code=breakdown.package_code,
            duration=breakdown.duration,
            num_weeks=breakdown.num_weeks,
            num_days=breakdown.num_days,
            selected_dates=obj_in.selected_dates,
            start_date=obj_in.start_date,
            end_date=obj_in.end_date,
            add_ons=breakdown.add_ons,
            base_price_cents=breakdown.base_price_cents,
            addons_cents=breakdown.addons_cents,
            subtotal_cents=breakdown.subtotal_cents,
            promo_savings_cents=breakdown.promo_savings_cents,
            total_cents=breakdown.total_cents,
            currency=settings.CURRENCY,
            promo_code=breakdown.promo_code if breakdown.promo_applied else None,
            promo_applied=breakdown.promo_applied,
            created_at=now,
            expires_at=now + timedelta(days=settings.QUOTE_TTL_DAYS),
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(
            f"Quote {db_obj.id} created: {db_obj.package_code}/{db_obj.duration} "
            f"total {db_obj.total_cents} cents"
        )
        return db_obj

    def get_valid(self, db: Session, *, quote_id: str, now: Optional[datetime] = None) -> Quote:
        """Fetch a quote that is still inside its validity window."""
        quote = self.get(db, quote_id)
        if quote is None:
            raise QuoteNotFoundError("Quote not found")
        if as_utc(quote.expires_at) <= (now or utcnow()):
            raise QuoteExpiredError("Quote has expired. Please request a new quote.")
        return quote


# Create singleton instance
quote = CRUDQuote(Quote)
