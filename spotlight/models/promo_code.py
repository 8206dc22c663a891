# spotlight/models/promo_code.py
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, JSON, ForeignKey, Text, text
from sqlalchemy.orm import relationship
from spotlight.db.base_class import Base
from spotlight.utils.timeutils import utcnow
import uuid


class PromoCode(Base):
    __tablename__ = "sponsor_promo_codes"

    id = Column(
        String, primary_key=True, default=lambda: f"promo_{uuid.uuid4().hex[:12]}"
    )
    code = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    discount_type = Column(String(20), nullable=False)  # 'percentage', 'fixed_amount' or 'free_days'
    discount_value = Column(Numeric(10, 2), nullable=False)  # percent, dollars or days

    # Applicable packages (NULL = every package)
    applicable_packages = Column(JSON, nullable=True)

    # Usage limits
    max_uses = Column(Integer, nullable=True)  # NULL = unlimited
    current_uses = Column(Integer, server_default=text("0"), default=0, nullable=False)

    # Minimum subtotal in whole dollars (base + add-ons)
    min_purchase_amount = Column(Numeric(10, 2), server_default=text("0"), default=0, nullable=False)

    # Validity period
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_to = Column(DateTime(timezone=True), nullable=False)

    is_active = Column(Boolean, server_default=text("true"), default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    redemptions = relationship("PromoRedemption", back_populates="promo_code_ref")

    @property
    def remaining_uses(self):
        """Calculate remaining uses, or None if unlimited."""
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - self.current_uses)


class PromoRedemption(Base):
    """Ledger of promo redemptions, one row per lead that consumed a promo."""
    __tablename__ = "sponsor_promo_redemptions"

    id = Column(
        String, primary_key=True, default=lambda: f"prd_{uuid.uuid4().hex[:12]}"
    )
    promo_code = Column(String(50), nullable=False, index=True)
    promo_code_id = Column(
        String,
        ForeignKey("sponsor_promo_codes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    sponsor_email = Column(String(255), nullable=False, index=True)
    lead_id = Column(String, nullable=True, index=True)
    applied_discount_cents = Column(Integer, nullable=False, server_default=text("0"), default=0)
    # Set only for once-per-email promos ("CODE:email"); NULLs never collide.
    redemption_key = Column(String(320), nullable=True, unique=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    promo_code_ref = relationship("PromoCode", back_populates="redemptions")
