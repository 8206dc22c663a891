"""
Campaign selection: which sponsor wins each placement right now.
"""

from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.campaign import Campaign
from spotlight.schemas.campaign import ActiveCampaign, CreativeResponse


def pick_winners(
    campaigns: Iterable[Campaign], placement: Optional[str] = None
) -> Dict[str, Campaign]:
    """
    Map each placement to its winning campaign.

    `campaigns` must already be in selection order (priority desc, then
    created_at, then id): the first campaign seen for a placement wins, and
    a later one only replaces it with strictly greater priority.
    """
    winners: Dict[str, Campaign] = {}
    for campaign in campaigns:
        for slot in campaign.placements or []:
            if placement and slot != placement:
                continue
            current = winners.get(slot)
            if current is None or campaign.priority > current.priority:
                winners[slot] = campaign
    return winners


def to_active_campaign(campaign: Campaign, placement: str) -> ActiveCampaign:
    return ActiveCampaign(
        campaign_id=campaign.id,
        name=campaign.name,
        sponsor_name=campaign.sponsor_name,
        headline=campaign.headline,
        subline=campaign.subline,
        cta_text=campaign.cta_text,
        click_url=campaign.click_url,
        is_sponsored=campaign.is_sponsored,
        tags=campaign.tags or [],
        freq_cap_per_user_per_day=campaign.freq_cap_per_user_per_day,
        creatives=[
            CreativeResponse.model_validate(c) for c in campaign.creatives_for(placement)
        ],
    )


def select_active(
    db: Session, *, placement: Optional[str] = None, now: Optional[datetime] = None
) -> Dict[str, ActiveCampaign]:
    """Placements without an eligible campaign are simply absent."""
    campaigns = crud.campaign.get_active(db, now=now)
    winners = pick_winners(campaigns, placement)
    return {slot: to_active_campaign(c, slot) for slot, c in winners.items()}
