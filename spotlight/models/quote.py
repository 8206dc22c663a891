# spotlight/models/quote.py
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, text
from spotlight.db.base_class import Base
from spotlight.utils.timeutils import utcnow


class Quote(Base):
    """Immutable snapshot of a priced sponsorship configuration."""
    __tablename__ = "sponsor_quotes"

    id = Column(String, primary_key=True, default=lambda: f"qt_{uuid.uuid4().hex[:12]}")

    # Selection
    package_code = Column(String(50), nullable=False)
    duration = Column(String(10), nullable=False)  # 'daily' or 'weekly'
    num_weeks = Column(Integer, nullable=False, server_default=text("1"), default=1)
    num_days = Column(Integer, nullable=False, server_default=text("1"), default=1)
    selected_dates = Column(JSON, nullable=False, default=list)
    start_date = Column(String(10), nullable=True)  # ISO date
    end_date = Column(String(10), nullable=True)
    add_ons = Column(JSON, nullable=False, default=list)  # [{"code": ..., "price": ...}]

    # Pricing (cents)
    base_price_cents = Column(Integer, nullable=False)
    addons_cents = Column(Integer, nullable=False, server_default=text("0"), default=0)
    subtotal_cents = Column(Integer, nullable=False)
    promo_savings_cents = Column(Integer, nullable=False, server_default=text("0"), default=0)
    total_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, server_default=text("'CAD'"), default="CAD")

    promo_code = Column(String(50), nullable=True)
    promo_applied = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)
