# spotlight/crud/crud_portal_token.py
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from spotlight.core.config import settings
from spotlight.core.exceptions import PortalAccessError
from spotlight.crud.base import CRUDBase
from spotlight.models.portal_token import PortalToken, generate_portal_token
from spotlight.schemas.portal import PortalTokenIssue
from spotlight.utils.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)


class CRUDPortalToken(CRUDBase[PortalToken, PortalTokenIssue, PortalTokenIssue]):
    def get_by_token(self, db: Session, *, token: str) -> Optional[PortalToken]:
        return db.query(self.model).filter(self.model.token == token).first()

    def get_by_campaign(self, db: Session, *, campaign_id: str) -> List[PortalToken]:
        return (
            db.query(self.model)
            .filter(self.model.campaign_id == campaign_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def issue(
        self,
        db: Session,
        *,
        campaign_id: str,
        emailed_to: Optional[str] = None,
        lead_id: Optional[str] = None,
        ttl_days: Optional[int] = None,
        subscribed_to_reports: bool = False,
    ) -> PortalToken:
        """Create a fresh active token for a campaign."""
        ttl_days = ttl_days or settings.PORTAL_TOKEN_TTL_DAYS
        db_obj = self.model(
            campaign_id=campaign_id,
            lead_id=lead_id,
            token=generate_portal_token(),
            is_active=True,
            expires_at=utcnow() + timedelta(days=ttl_days),
            emailed_to=emailed_to,
            subscribed_to_reports=subscribed_to_reports,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Issued portal token {db_obj.id} for campaign {campaign_id} ({ttl_days} days)")
        return db_obj

    def validate(self, db: Session, *, token: str, now: Optional[datetime] = None) -> PortalToken:
        """
        Return the token row if it may be used, stamping last_accessed_at.

        Unknown, inactive and expired tokens all raise the same
        PortalAccessError.
        """
        now = now or utcnow()
        db_obj = self.get_by_token(db, token=token)
        if db_obj is None or not db_obj.is_active or as_utc(db_obj.expires_at) <= now:
            logger.warning("Rejected portal access with an invalid or expired token")
            raise PortalAccessError()

        self.touch(db, token_id=db_obj.id, now=now)
        return db_obj

    def touch(self, db: Session, *, token_id: str, now: Optional[datetime] = None) -> None:
        """Record an access with a single UPDATE."""
        db.execute(
            update(self.model)
            .where(self.model.id == token_id)
            .values(last_accessed_at=now or utcnow())
        )
        db.commit()

    def deactivate_for_campaign(
        self, db: Session, *, campaign_id: str, lead_id: Optional[str] = None
    ) -> int:
        """Deactivate every active token of a campaign (optionally only those of one lead)."""
        stmt = (
            update(self.model)
            .where(self.model.campaign_id == campaign_id, self.model.is_active == True)
            .values(is_active=False)
        )
        if lead_id:
            stmt = stmt.where(self.model.lead_id == lead_id)
        result = db.execute(stmt)
        db.commit()
        return result.rowcount

    def revoke(self, db: Session, *, db_obj: PortalToken) -> PortalToken:
        db_obj.is_active = False
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Create singleton instance
portal_token = CRUDPortalToken(PortalToken)
