# spotlight/schemas/metrics.py
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from spotlight.schemas.common import CamelModel, DEFAULT_PLACEMENT, PLACEMENT_PATTERN


class TrackEventType(str, Enum):
    IMPRESSION = "impression"
    CLICK = "click"


class TrackEventIn(CamelModel):
    """Beacon payload sent by the web client for every impression/click."""
    campaign_id: str = Field(..., min_length=1, json_schema_extra={"example": "cmp_1a2b3c4d5e6f"})
    creative_id: Optional[str] = None
    event: TrackEventType
    placement: str = Field(DEFAULT_PLACEMENT, pattern=PLACEMENT_PATTERN)
    user_id: Optional[str] = Field(None, max_length=255)


class TrackAck(BaseModel):
    ok: bool = True


class MetricsRowResponse(BaseModel):
    campaign_id: str
    creative_id: Optional[str] = None
    date: date
    placement: str
    raw_views: int
    billable_impressions: int
    unique_users: int
    clicks: int
    ctr: float

    model_config = {"from_attributes": True}

    @field_validator("creative_id", mode="before")
    @classmethod
    def empty_creative_as_null(cls, value):
        return value or None


class MetricsTotals(BaseModel):
    raw_views: int = 0
    billable_impressions: int = 0
    unique_users: int = 0
    clicks: int = 0
    ctr: float = 0.0


class DailyPoint(MetricsTotals):
    date: date


class CampaignMetricsSummary(MetricsTotals):
    campaign_id: str
    name: Optional[str] = None


class MetricsSummaryResponse(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None
    campaigns: List[CampaignMetricsSummary]
