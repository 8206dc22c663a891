# spotlight/models/lead.py
"""
Lead model - a submitted sponsorship application.

Everything except the review fields (status, admin_notes, approval stamps,
campaign link) is written once at submission and never changed. The raw
request payload is kept verbatim for audit.

Status lifecycle:
    new -> reviewing -> approved -> onboarding_sent
    new | reviewing -> rejected
"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Text, text
from spotlight.db.base_class import Base
from spotlight.utils.timeutils import utcnow


class Lead(Base):
    __tablename__ = "sponsor_leads"

    id = Column(String, primary_key=True, default=lambda: f"lead_{uuid.uuid4().hex[:12]}")
    quote_id = Column(String, nullable=True, index=True)

    # Contact
    business_name = Column(String(200), nullable=False)
    contact_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    instagram = Column(String(100), nullable=True)
    website = Column(Text, nullable=True)

    # Resolved selection
    package_code = Column(String(50), nullable=False)
    duration = Column(String(10), nullable=False)
    num_weeks = Column(Integer, nullable=False, server_default=text("1"), default=1)
    num_days = Column(Integer, nullable=False, server_default=text("1"), default=1)
    selected_dates = Column(JSON, nullable=False, default=list)
    start_date = Column(String(10), nullable=True)
    end_date = Column(String(10), nullable=True)
    add_ons = Column(JSON, nullable=False, default=list)

    # Pricing outcome (cents)
    currency = Column(String(3), nullable=False, server_default=text("'CAD'"), default="CAD")
    base_price_cents = Column(Integer, nullable=False)
    addons_cents = Column(Integer, nullable=False, server_default=text("0"), default=0)
    subtotal_cents = Column(Integer, nullable=False)
    promo_savings_cents = Column(Integer, nullable=False, server_default=text("0"), default=0)
    total_cents = Column(Integer, nullable=False)
    promo_applied = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    promo_code = Column(String(50), nullable=True)

    # Campaign details
    objective = Column(Text, nullable=True)
    budget_range = Column(String(100), nullable=True)
    ack_exclusive = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    ack_guarantee = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    # Creatives
    desktop_asset_url = Column(Text, nullable=True)
    mobile_asset_url = Column(Text, nullable=True)
    creative_links = Column(Text, nullable=True)
    comments = Column(Text, nullable=True)

    # Raw submission for audit
    payload = Column(JSON, nullable=False, default=dict)

    # Review
    status = Column(String(20), nullable=False, server_default=text("'new'"), default="new", index=True)
    admin_notes = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(100), nullable=True)
    campaign_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
