# spotlight/crud/crud_campaign.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from spotlight.crud.base import CRUDBase
from spotlight.models.campaign import Campaign, Creative
from spotlight.schemas.campaign import CampaignUpsert, CampaignUpdate
from spotlight.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class CRUDCampaign(CRUDBase[Campaign, CampaignUpsert, CampaignUpdate]):
    def get_active(self, db: Session, *, now: Optional[datetime] = None) -> List[Campaign]:
        """
        Campaigns eligible for serving at `now`, in selection order.

        Ordered by priority (highest first), then oldest created_at, then id,
        so walking the list and keeping the first campaign seen per placement
        gives a deterministic winner.
        """
        now = now or utcnow()
        return (
            db.query(self.model)
            .options(selectinload(self.model.creatives))
            .filter(
                self.model.is_active == True,
                self.model.start_at <= now,
                self.model.end_at >= now,
            )
            .order_by(
                self.model.priority.desc(),
                self.model.created_at.asc(),
                self.model.id.asc(),
            )
            .all()
        )

    def get_filtered(
        self,
        db: Session,
        *,
        active_only: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Campaign]:
        query = db.query(self.model)
        if active_only:
            query = query.filter(self.model.is_active == True)
        return (
            query.order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def upsert(self, db: Session, *, obj_in: CampaignUpsert) -> Campaign:
        """
        Create a campaign, or update it when `obj_in.id` names an existing one.

        When the payload carries creatives, the campaign's existing creatives
        are deleted and the new set inserted in the same transaction.
        """
        data = obj_in.model_dump(exclude={"id", "creatives"}, exclude_unset=True)
        db_obj = self.get(db, obj_in.id) if obj_in.id else None

        if db_obj is None:
            create_data = obj_in.model_dump(exclude={"creatives"})
            if not create_data.get("id"):
                create_data.pop("id", None)
            db_obj = self.model(**create_data)
            db.add(db_obj)
            created = True
        else:
            for field, value in data.items():
                setattr(db_obj, field, value)
            db_obj.updated_at = utcnow()
            created = False

        if obj_in.creatives is not None:
            db_obj.creatives.clear()
            db.flush()
            for creative_in in obj_in.creatives:
                db_obj.creatives.append(Creative(**creative_in.model_dump()))

        db.commit()
        db.refresh(db_obj)
        logger.info(
            f"Campaign {db_obj.id} {'created' if created else 'updated'} "
            f"with {len(db_obj.creatives)} creatives"
        )
        return db_obj

    def set_active(self, db: Session, *, db_obj: Campaign, is_active: bool) -> Campaign:
        db_obj.is_active = is_active
        db_obj.updated_at = utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Create singleton instance
campaign = CRUDCampaign(Campaign)
