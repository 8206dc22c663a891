# spotlight/crud/crud_metrics.py
"""
Impression/click tracking and daily metrics rollups.

Every counter change is a single INSERT ... ON CONFLICT DO UPDATE statement,
so concurrent beacons for the same (campaign, creative, date, placement)
row can never lose increments. There is no read-then-write path here.
"""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from spotlight.crud.base import CRUDBase
from spotlight.models.metrics import MetricsDaily, ViewerCampaignTally, ViewerDailyTally
from spotlight.schemas.metrics import TrackEventIn
from spotlight.utils.timeutils import utc_today, utcnow

IMPRESSION = "impression"
CLICK = "click"
EVENT_TYPES = (IMPRESSION, CLICK)

# Peers need more than this many billable impressions to count for benchmarks.
MIN_PEER_BILLABLE = 100


def _insert_for(db: Session):
    """Dialect-specific insert() that supports on_conflict_do_update."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Upserts are not supported on the {dialect} dialect")


class CRUDMetrics(CRUDBase[MetricsDaily, TrackEventIn, TrackEventIn]):
    def bump_viewer_tally(
        self,
        db: Session,
        *,
        campaign_id: str,
        placement: str,
        day: date,
        viewer_key: str,
    ) -> int:
        """Atomically count one more view for this viewer and return the new count."""
        insert = _insert_for(db)
        stmt = insert(ViewerDailyTally).values(
            campaign_id=campaign_id,
            placement=placement,
            date=day,
            viewer_key=viewer_key,
            view_count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["campaign_id", "placement", "date", "viewer_key"],
            set_={"view_count": ViewerDailyTally.view_count + 1},
        ).returning(ViewerDailyTally.view_count)
        return db.execute(stmt).scalar_one()

    def bump_campaign_tally(
        self, db: Session, *, campaign_id: str, day: date, viewer_key: str
    ) -> int:
        """Same as bump_viewer_tally, but across every placement of the campaign."""
        insert = _insert_for(db)
        stmt = insert(ViewerCampaignTally).values(
            campaign_id=campaign_id,
            date=day,
            viewer_key=viewer_key,
            view_count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["campaign_id", "date", "viewer_key"],
            set_={"view_count": ViewerCampaignTally.view_count + 1},
        ).returning(ViewerCampaignTally.view_count)
        return db.execute(stmt).scalar_one()

    def increment(
        self,
        db: Session,
        *,
        campaign_id: str,
        placement: str,
        day: date,
        creative_id: Optional[str] = None,
        raw_views: int = 0,
        billable_impressions: int = 0,
        unique_users: int = 0,
        clicks: int = 0,
    ) -> None:
        """Insert the daily row with these counts, or add them to the existing row."""
        now = utcnow()
        insert = _insert_for(db)
        stmt = insert(MetricsDaily).values(
            campaign_id=campaign_id,
            creative_id=creative_id or "",
            date=day,
            placement=placement,
            raw_views=raw_views,
            billable_impressions=billable_impressions,
            unique_users=unique_users,
            clicks=clicks,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["campaign_id", "creative_id", "date", "placement"],
            set_={
                "raw_views": MetricsDaily.raw_views + stmt.excluded.raw_views,
                "billable_impressions": MetricsDaily.billable_impressions
                + stmt.excluded.billable_impressions,
                "unique_users": MetricsDaily.unique_users + stmt.excluded.unique_users,
                "clicks": MetricsDaily.clicks + stmt.excluded.clicks,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        db.execute(stmt)

    def track_event(
        self,
        db: Session,
        *,
        campaign_id: str,
        event: str,
        placement: str,
        creative_id: Optional[str] = None,
        user_id: Optional[str] = None,
        freq_cap: int = 0,
        day: Optional[date] = None,
    ) -> Dict[str, int]:
        """
        Record one impression or click and commit.

        Impressions with a user id go through two viewer tallies first. The
        campaign-wide count decides whether the view is billable (cap of 0
        means unlimited); the placement count decides whether it is the
        viewer's first of the day on this placement.
        Anonymous impressions are always billable and never unique.
        Clicks are counted unconditionally.

        Returns the increments that were applied.
        """
        if event not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event}")

        day = day or utc_today()
        deltas = {"raw_views": 0, "billable_impressions": 0, "unique_users": 0, "clicks": 0}

        if event == CLICK:
            deltas["clicks"] = 1
        elif user_id:
            seen_here = self.bump_viewer_tally(
                db, campaign_id=campaign_id, placement=placement, day=day, viewer_key=user_id
            )
            seen = self.bump_campaign_tally(
                db, campaign_id=campaign_id, day=day, viewer_key=user_id
            )
            deltas["raw_views"] = 1
            deltas["billable_impressions"] = 1 if freq_cap <= 0 or seen <= freq_cap else 0
            deltas["unique_users"] = 1 if seen_here == 1 else 0
        else:
            deltas["raw_views"] = 1
            deltas["billable_impressions"] = 1

        self.increment(
            db,
            campaign_id=campaign_id,
            placement=placement,
            day=day,
            creative_id=creative_id,
            **deltas,
        )
        db.commit()
        return deltas

    def get_rows(
        self,
        db: Session,
        *,
        campaign_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        placement: Optional[str] = None,
    ) -> List[MetricsDaily]:
        query = db.query(self.model).filter(self.model.campaign_id == campaign_id)
        if start:
            query = query.filter(self.model.date >= start)
        if end:
            query = query.filter(self.model.date <= end)
        if placement:
            query = query.filter(self.model.placement == placement)
        return query.order_by(
            self.model.date.asc(), self.model.placement.asc(), self.model.creative_id.asc()
        ).all()

    def get_all_rows(
        self,
        db: Session,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        campaign_id: Optional[str] = None,
        limit: int = 1000,
    ) -> List[MetricsDaily]:
        """Raw rows across campaigns, newest first; used by the admin dump."""
        query = db.query(self.model)
        if campaign_id:
            query = query.filter(self.model.campaign_id == campaign_id)
        if start:
            query = query.filter(self.model.date >= start)
        if end:
            query = query.filter(self.model.date <= end)
        return (
            query.order_by(self.model.date.desc(), self.model.campaign_id.asc())
            .limit(limit)
            .all()
        )

    def get_totals(
        self,
        db: Session,
        *,
        campaign_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        placement: Optional[str] = None,
    ) -> Dict[str, int]:
        query = db.query(
            func.coalesce(func.sum(self.model.raw_views), 0),
            func.coalesce(func.sum(self.model.billable_impressions), 0),
            func.coalesce(func.sum(self.model.unique_users), 0),
            func.coalesce(func.sum(self.model.clicks), 0),
        ).filter(self.model.campaign_id == campaign_id)
        if start:
            query = query.filter(self.model.date >= start)
        if end:
            query = query.filter(self.model.date <= end)
        if placement:
            query = query.filter(self.model.placement == placement)

        raw, billable, unique, clicks = query.one()
        return {
            "raw_views": int(raw),
            "billable_impressions": int(billable),
            "unique_users": int(unique),
            "clicks": int(clicks),
        }

    def get_campaign_summaries(
        self,
        db: Session,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Dict]:
        """Per-campaign totals for the admin metrics summary."""
        query = db.query(
            self.model.campaign_id,
            func.sum(self.model.raw_views),
            func.sum(self.model.billable_impressions),
            func.sum(self.model.unique_users),
            func.sum(self.model.clicks),
        )
        if start:
            query = query.filter(self.model.date >= start)
        if end:
            query = query.filter(self.model.date <= end)

        rows = query.group_by(self.model.campaign_id).order_by(self.model.campaign_id).all()
        return [
            {
                "campaign_id": campaign_id,
                "raw_views": int(raw or 0),
                "billable_impressions": int(billable or 0),
                "unique_users": int(unique or 0),
                "clicks": int(clicks or 0),
            }
            for campaign_id, raw, billable, unique, clicks in rows
        ]

    def get_peer_totals(
        self,
        db: Session,
        *,
        exclude_campaign_id: str,
        placement: str,
        since: date,
        min_billable: int = MIN_PEER_BILLABLE,
    ) -> List[Dict[str, int]]:
        """
        Billable impressions and clicks summed per other campaign on a placement
        since a date, keeping only peers with more than `min_billable`.
        """
        billable = func.sum(self.model.billable_impressions)
        rows = (
            db.query(self.model.campaign_id, billable, func.sum(self.model.clicks))
            .filter(
                self.model.campaign_id != exclude_campaign_id,
                self.model.placement == placement,
                self.model.date >= since,
            )
            .group_by(self.model.campaign_id)
            .having(billable > min_billable)
            .all()
        )
        return [
            {"campaign_id": cid, "billable_impressions": int(b), "clicks": int(c or 0)}
            for cid, b, c in rows
        ]


# Create singleton instance
metrics = CRUDMetrics(MetricsDaily)
