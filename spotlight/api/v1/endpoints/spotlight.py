# spotlight/api/v1/endpoints/spotlight.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.api.deps import get_db
from spotlight.api.errors import datastore_error
from spotlight.schemas.campaign import ActiveCampaignsResponse
from spotlight.schemas.common import PLACEMENT_PATTERN
from spotlight.schemas.metrics import TrackAck, TrackEventIn
from spotlight.services import selector

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Spotlight Serving"])


@router.get("/spotlight/active", response_model=ActiveCampaignsResponse)
def get_active_campaigns(
    placement: Optional[str] = Query(None, pattern=PLACEMENT_PATTERN),
    db: Session = Depends(get_db),
):
    """
    Winning campaign per placement right now.

    Placements without an eligible campaign are left out of the response.
    """
    try:
        winners = selector.select_active(db, placement=placement)
    except SQLAlchemyError as e:
        raise datastore_error(e, "selecting active campaigns")
    return ActiveCampaignsResponse(placements=winners)


@router.post("/spotlight/metrics/track", response_model=TrackAck, status_code=status.HTTP_200_OK)
def track_event(event_in: TrackEventIn, db: Session = Depends(get_db)):
    """
    Impression/click beacon.

    Always acknowledges a well-formed event: storage failures are logged,
    never returned to the client.
    """
    try:
        campaign = crud.campaign.get(db, event_in.campaign_id)
        if campaign is None:
            logger.warning(f"Tracking event for unknown campaign {event_in.campaign_id} ignored")
            return TrackAck()

        crud.metrics.track_event(
            db,
            campaign_id=campaign.id,
            event=event_in.event.value,
            placement=event_in.placement,
            creative_id=event_in.creative_id,
            user_id=event_in.user_id,
            freq_cap=campaign.freq_cap_per_user_per_day,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record {event_in.event.value} for campaign {event_in.campaign_id}: {e}")

    return TrackAck()
