# spotlight/models/campaign.py
"""
Campaign and Creative models - the sponsor inventory served on placements.

A campaign is eligible for serving when it is active and `now` falls inside
[start_at, end_at]. Each creative is bound to exactly one placement; the
selector hands out only the creatives matching the winning placement.
"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, Text, text
from sqlalchemy.orm import relationship
from spotlight.db.base_class import Base
from spotlight.utils.timeutils import utcnow


class Campaign(Base):
    __tablename__ = "sponsor_campaigns"

    id = Column(String, primary_key=True, default=lambda: f"cmp_{uuid.uuid4().hex[:12]}")

    # Campaign Details
    name = Column(String(200), nullable=False)
    sponsor_name = Column(String(200), nullable=False)
    headline = Column(Text, nullable=True)
    subline = Column(Text, nullable=True)
    cta_text = Column(String(100), nullable=True)
    click_url = Column(Text, nullable=False)

    # Targeting
    placements = Column(JSON, nullable=False, default=lambda: ["events_banner"])
    tags = Column(JSON, nullable=False, default=list)

    # Scheduling
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)

    # Serving
    priority = Column(Integer, nullable=False, server_default=text("0"), default=0)
    is_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    is_sponsored = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    freq_cap_per_user_per_day = Column(Integer, nullable=False, server_default=text("0"), default=0)  # 0 = unlimited

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    creatives = relationship(
        "Creative", back_populates="campaign", cascade="all, delete-orphan", passive_deletes=True
    )
    metrics = relationship("MetricsDaily", cascade="all, delete-orphan", passive_deletes=True)
    viewer_tallies = relationship("ViewerDailyTally", cascade="all, delete-orphan", passive_deletes=True)
    campaign_viewer_tallies = relationship(
        "ViewerCampaignTally", cascade="all, delete-orphan", passive_deletes=True
    )
    portal_tokens = relationship(
        "PortalToken", back_populates="campaign", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def primary_placement(self) -> str:
        """The first listed placement; benchmarks and redirect clicks use it."""
        return self.placements[0] if self.placements else "events_banner"

    def creatives_for(self, placement: str):
        return [c for c in self.creatives if c.placement == placement]


class Creative(Base):
    __tablename__ = "sponsor_creatives"

    id = Column(String, primary_key=True, default=lambda: f"crv_{uuid.uuid4().hex[:12]}")
    campaign_id = Column(
        String, ForeignKey("sponsor_campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    placement = Column(String(50), nullable=False)

    image_desktop_url = Column(Text, nullable=True)
    image_mobile_url = Column(Text, nullable=True)
    logo_url = Column(Text, nullable=True)
    alt = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    campaign = relationship("Campaign", back_populates="creatives")
