# spotlight/schemas/portal.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from spotlight.schemas.common import CamelModel
from spotlight.schemas.metrics import DailyPoint, MetricsTotals


class PortalTokenIssue(CamelModel):
    """Admin request to issue a portal token for a campaign."""
    campaign_id: str
    emailed_to: Optional[EmailStr] = None
    lead_id: Optional[str] = None
    ttl_days: Optional[int] = Field(None, gt=0, le=365)
    subscribed_to_reports: bool = False


class PortalTokenResponse(BaseModel):
    id: str
    campaign_id: str
    lead_id: Optional[str] = None
    token: str
    is_active: bool
    expires_at: datetime
    emailed_to: Optional[str] = None
    subscribed_to_reports: bool
    last_accessed_at: Optional[datetime] = None
    created_at: datetime
    portal_url: Optional[str] = None

    model_config = {"from_attributes": True}


class PortalCampaign(BaseModel):
    id: str
    name: str
    sponsor_name: str
    headline: Optional[str] = None
    placements: List[str]
    start_at: datetime
    end_at: datetime
    is_active: bool


class Benchmark(BaseModel):
    placement: str
    percentile: int
    peer_count: int
    badge: Optional[str] = None


class PortalAnalytics(BaseModel):
    """
    Everything the sponsor portal page renders.

    `benchmark` is left out of the serialized response entirely when there
    are no qualifying peers.
    """
    campaign: PortalCampaign
    token_expires_at: datetime
    lifetime: MetricsTotals
    last_30_days: MetricsTotals
    ctr: float
    benchmark: Optional[Benchmark] = None
    daily: List[DailyPoint]
    generated_on: date
