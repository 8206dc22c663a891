# spotlight/schemas/campaign.py
import re
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from spotlight.schemas.common import CamelModel, DEFAULT_PLACEMENT, PLACEMENT_PATTERN


# ==================== Creative DTOs ====================

class CreativeIn(CamelModel):
    placement: str = Field(..., pattern=PLACEMENT_PATTERN, json_schema_extra={"example": "events_banner"})
    image_desktop_url: Optional[str] = Field(None, json_schema_extra={"example": "https://cdn.example.com/banner-desktop.png"})
    image_mobile_url: Optional[str] = None
    logo_url: Optional[str] = None
    alt: Optional[str] = Field(None, max_length=255)


class CreativeResponse(BaseModel):
    id: str
    placement: str
    image_desktop_url: Optional[str] = None
    image_mobile_url: Optional[str] = None
    logo_url: Optional[str] = None
    alt: Optional[str] = None

    model_config = {"from_attributes": True}


# ==================== Campaign DTOs ====================

class CampaignUpsert(CamelModel):
    """Create a campaign, or update the one named by `id`."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200, json_schema_extra={"example": "Diwali Night Market"})
    sponsor_name: str = Field(..., min_length=1, max_length=200, json_schema_extra={"example": "Chai Co."})
    headline: Optional[str] = None
    subline: Optional[str] = None
    cta_text: Optional[str] = Field(None, max_length=100)
    click_url: str = Field(..., json_schema_extra={"example": "https://chaico.ca/offer"})
    placements: List[str] = Field(default=[DEFAULT_PLACEMENT], min_length=1)
    tags: List[str] = Field(default=[])
    start_at: datetime
    end_at: datetime
    priority: int = Field(0, json_schema_extra={"example": 10})
    is_active: bool = True
    is_sponsored: bool = True
    freq_cap_per_user_per_day: int = Field(0, ge=0, json_schema_extra={"example": 3})
    creatives: Optional[List[CreativeIn]] = None

    @field_validator("placements")
    @classmethod
    def validate_placements(cls, value: List[str]) -> List[str]:
        for placement in value:
            if not re.match(PLACEMENT_PATTERN, placement):
                raise ValueError(f"Invalid placement: {placement}")
        # Keep order (first is primary) but drop duplicates
        return list(dict.fromkeys(value))

    @field_validator("click_url")
    @classmethod
    def validate_click_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("click_url must be an http(s) URL")
        return value

    @model_validator(mode="after")
    def check_window(self):
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class CampaignUpdate(CamelModel):
    is_active: Optional[bool] = None


class CampaignToggle(CamelModel):
    is_active: bool


class CampaignResponse(BaseModel):
    id: str
    name: str
    sponsor_name: str
    headline: Optional[str] = None
    subline: Optional[str] = None
    cta_text: Optional[str] = None
    click_url: str
    placements: List[str]
    tags: List[str]
    start_at: datetime
    end_at: datetime
    priority: int
    is_active: bool
    is_sponsored: bool
    freq_cap_per_user_per_day: int
    created_at: datetime
    updated_at: datetime
    creatives: List[CreativeResponse] = []

    model_config = {"from_attributes": True}


# ==================== Serving DTOs ====================

class ActiveCampaign(BaseModel):
    """The winning campaign for a placement, with that placement's creatives only."""
    campaign_id: str
    name: str
    sponsor_name: str
    headline: Optional[str] = None
    subline: Optional[str] = None
    cta_text: Optional[str] = None
    click_url: str
    is_sponsored: bool
    tags: List[str] = []
    freq_cap_per_user_per_day: int = 0
    creatives: List[CreativeResponse] = []


class ActiveCampaignsResponse(BaseModel):
    placements: Dict[str, ActiveCampaign]
