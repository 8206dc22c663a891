# spotlight/schemas/lead.py
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from spotlight.schemas.common import CamelModel
from spotlight.schemas.quote import AddOnLine


class LeadStatus(str, Enum):
    NEW = "new"
    REVIEWING = "reviewing"
    APPROVED = "approved"
    ONBOARDING_SENT = "onboarding_sent"
    REJECTED = "rejected"


# ==================== Application (public) ====================

class ApplicationCreate(CamelModel):
    """
    A sponsorship application.

    Either `quote_id` (price trusted from the quote) or a full package
    selection (`package_code` + `duration` + counts) must be given.
    """
    quote_id: Optional[str] = None

    # Standalone selection
    package_code: Optional[str] = None
    duration: Optional[str] = None
    num_weeks: Optional[int] = Field(None, ge=1, le=52)
    num_days: Optional[int] = Field(None, ge=1, le=365)
    selected_dates: List[str] = Field(default=[])
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    add_ons: List[str] = Field(default=[])
    promo_code: Optional[str] = Field(None, max_length=50)

    # Contact
    business_name: str = Field(..., min_length=1, max_length=200, json_schema_extra={"example": "Chai Co."})
    contact_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    instagram: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = None

    # Campaign details
    objective: Optional[str] = None
    budget_range: Optional[str] = Field(None, max_length=100)
    ack_exclusive: bool = False
    ack_guarantee: bool = False

    # Creatives
    desktop_asset_url: Optional[str] = None
    mobile_asset_url: Optional[str] = None
    creative_links: Optional[str] = None
    comments: Optional[str] = None

    @field_validator("business_name", "contact_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("promo_code")
    @classmethod
    def normalise_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().upper()
        return value or None

    @field_validator("desktop_asset_url", "mobile_asset_url", "website", "instagram", mode="before")
    @classmethod
    def blank_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ApplicationCreated(BaseModel):
    lead_id: str
    status: str
    total_cents: int
    promo_applied: bool
    promo_code: Optional[str] = None
    currency: str


# ==================== Lead review (admin) ====================

class LeadStatusUpdate(CamelModel):
    status: LeadStatus
    admin_notes: Optional[str] = None


class LeadApprove(CamelModel):
    """
    Approve a lead. Without `campaign_id`, an inactive draft campaign is
    created from the lead's selection and creatives.
    """
    campaign_id: Optional[str] = None
    approved_by: Optional[str] = Field(None, max_length=100)
    admin_notes: Optional[str] = None
    click_url: Optional[str] = None


class LeadResend(CamelModel):
    revoke_previous: Optional[bool] = None


class LeadSummary(BaseModel):
    id: str
    business_name: str
    contact_name: str
    email: str
    package_code: str
    duration: str
    total_cents: int
    promo_applied: bool
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LeadResponse(LeadSummary):
    quote_id: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None
    num_weeks: int
    num_days: int
    selected_dates: List[str]
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    add_ons: List[AddOnLine]
    currency: str
    base_price_cents: int
    addons_cents: int
    subtotal_cents: int
    promo_savings_cents: int
    promo_code: Optional[str] = None
    objective: Optional[str] = None
    budget_range: Optional[str] = None
    ack_exclusive: bool
    ack_guarantee: bool
    desktop_asset_url: Optional[str] = None
    mobile_asset_url: Optional[str] = None
    creative_links: Optional[str] = None
    comments: Optional[str] = None
    payload: Dict[str, Any]
    admin_notes: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    campaign_id: Optional[str] = None
    updated_at: datetime


class LeadActionResult(BaseModel):
    """Outcome of approve/resend: the lead plus what happened to the portal link."""
    lead: LeadResponse
    portal_token_id: Optional[str] = None
    portal_url: Optional[str] = None
    email_sent: bool = False
    email_error: Optional[str] = None
