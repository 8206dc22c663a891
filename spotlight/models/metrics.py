# spotlight/models/metrics.py
"""
Daily metrics rollups.

MetricsDaily holds one row per (campaign, creative, date, placement). Rows
are only ever touched by single-statement upserts (see crud_metrics), so
concurrent beacons cannot lose increments.

creative_id is an empty string, not NULL, when the event is not tied to a
creative: SQL unique constraints treat NULLs as distinct, which would let
the same logical row be inserted twice.

ViewerDailyTally counts how many impressions a single viewer produced for a
campaign/placement/day and backs unique-user detection. ViewerCampaignTally
counts the same viewer across every placement of the campaign for the day and
backs the frequency cap, which is per campaign.
"""

import uuid
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, UniqueConstraint, text
from spotlight.db.base_class import Base
from spotlight.utils.timeutils import utcnow


class MetricsDaily(Base):
    __tablename__ = "sponsor_metrics_daily"
    __table_args__ = (
        UniqueConstraint(
            "campaign_id", "creative_id", "date", "placement",
            name="uq_sponsor_metrics_daily_key",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: f"mtr_{uuid.uuid4().hex[:12]}")
    campaign_id = Column(
        String, ForeignKey("sponsor_campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    creative_id = Column(String, nullable=False, server_default=text("''"), default="")
    date = Column(Date, nullable=False, index=True)
    placement = Column(String(50), nullable=False, index=True)

    # Counters
    raw_views = Column(Integer, nullable=False, server_default=text("0"), default=0)
    billable_impressions = Column(Integer, nullable=False, server_default=text("0"), default=0)
    unique_users = Column(Integer, nullable=False, server_default=text("0"), default=0)
    clicks = Column(Integer, nullable=False, server_default=text("0"), default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def ctr(self) -> float:
        return calculate_ctr(self.clicks, self.billable_impressions)


class ViewerDailyTally(Base):
    __tablename__ = "sponsor_viewer_daily"
    __table_args__ = (
        UniqueConstraint(
            "campaign_id", "placement", "date", "viewer_key",
            name="uq_sponsor_viewer_daily_key",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: f"vwr_{uuid.uuid4().hex[:12]}")
    campaign_id = Column(
        String, ForeignKey("sponsor_campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    placement = Column(String(50), nullable=False)
    date = Column(Date, nullable=False)
    viewer_key = Column(String(255), nullable=False)
    view_count = Column(Integer, nullable=False, server_default=text("0"), default=0)


class ViewerCampaignTally(Base):
    __tablename__ = "sponsor_viewer_campaign_daily"
    __table_args__ = (
        UniqueConstraint(
            "campaign_id", "date", "viewer_key",
            name="uq_sponsor_viewer_campaign_daily_key",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: f"vwc_{uuid.uuid4().hex[:12]}")
    campaign_id = Column(
        String, ForeignKey("sponsor_campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    viewer_key = Column(String(255), nullable=False)
    view_count = Column(Integer, nullable=False, server_default=text("0"), default=0)


def calculate_ctr(clicks: int, billable_impressions: int) -> float:
    """Click-through rate in percent, two decimals; 0.0 with no billable impressions."""
    if not billable_impressions:
        return 0.0
    return round(clicks / billable_impressions * 100, 2)
