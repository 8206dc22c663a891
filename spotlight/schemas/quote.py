# spotlight/schemas/quote.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from spotlight.schemas.common import CamelModel


class QuoteCreate(CamelModel):
    package_code: str = Field(..., json_schema_extra={"example": "events_spotlight"})
    duration: str = Field(..., json_schema_extra={"example": "weekly"})
    num_weeks: int = Field(1, ge=1, le=52)
    num_days: int = Field(1, ge=1, le=365)
    selected_dates: List[str] = Field(default=[])
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    add_ons: List[str] = Field(default=[], json_schema_extra={"example": ["ig_story"]})
    promo_code: Optional[str] = Field(None, max_length=50)

    @field_validator("promo_code")
    @classmethod
    def normalise_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().upper()
        return value or None


class AddOnLine(BaseModel):
    code: str
    price: float


class QuoteResponse(BaseModel):
    quote_id: str
    package_code: str
    duration: str
    num_weeks: int
    num_days: int
    selected_dates: List[str]
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    add_ons: List[AddOnLine]
    base_price_cents: int
    addons_cents: int
    subtotal_cents: int
    promo_code: Optional[str] = None
    promo_applied: bool
    promo_savings_cents: int
    total_cents: int
    currency: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_quote(cls, quote) -> "QuoteResponse":
        return cls(
            quote_id=quote.id,
            package_code=quote.package_code,
            duration=quote.duration,
            num_weeks=quote.num_weeks,
            num_days=quote.num_days,
            selected_dates=quote.selected_dates or [],
            start_date=quote.start_date,
            end_date=quote.end_date,
            add_ons=quote.add_ons or [],
            base_price_cents=quote.base_price_cents,
            addons_cents=quote.addons_cents,
            subtotal_cents=quote.subtotal_cents,
            promo_code=quote.promo_code,
            promo_applied=quote.promo_applied,
            promo_savings_cents=quote.promo_savings_cents,
            total_cents=quote.total_cents,
            currency=quote.currency,
            created_at=quote.created_at,
            expires_at=quote.expires_at,
        )
