# spotlight/models/portal_token.py
"""
PortalToken model - opaque, expiring credential for the sponsor analytics portal.

Real-world flow:
1. Admin approves a sponsorship lead
2. A token bound to the sponsor's campaign is issued (14 days by default)
3. The sponsor receives the portal link by email
4. Each portal visit validates the token and stamps last_accessed_at
"""

import uuid
import secrets
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, text
from sqlalchemy.orm import relationship
from spotlight.db.base_class import Base
from spotlight.utils.timeutils import utcnow


def generate_portal_token():
    """Generate an unguessable URL-safe token."""
    return secrets.token_urlsafe(32)


class PortalToken(Base):
    __tablename__ = "sponsor_portal_tokens"

    id = Column(String, primary_key=True, default=lambda: f"ptok_{uuid.uuid4().hex[:12]}")
    campaign_id = Column(
        String, ForeignKey("sponsor_campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lead_id = Column(String, nullable=True, index=True)

    token = Column(String(64), nullable=False, unique=True, default=generate_portal_token)
    is_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # Delivery
    emailed_to = Column(String(255), nullable=True)
    subscribed_to_reports = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    last_accessed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    campaign = relationship("Campaign", back_populates="portal_tokens")
