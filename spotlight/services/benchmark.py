"""
CTR benchmark: where a campaign's CTR ranks among its peers on the same
placement over the trailing 30 days.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.campaign import Campaign
from spotlight.models.metrics import calculate_ctr
from spotlight.schemas.portal import Benchmark
from spotlight.services.metrics import trailing_window_start

BADGES = (
    (75, "Top 25%"),
    (50, "Top 50%"),
    (25, "Above average"),
)


def badge_for(percentile: int) -> Optional[str]:
    for threshold, badge in BADGES:
        if percentile >= threshold:
            return badge
    return None


def compute_percentile(own_ctr: float, peer_ctrs: List[float]) -> Optional[int]:
    """
    Share of peers with a strictly lower CTR, as a whole percent rounded half
    up. None when there are no peers.
    """
    if not peer_ctrs:
        return None
    below = sum(1 for ctr in peer_ctrs if ctr < own_ctr)
    share = Decimal(below) / Decimal(len(peer_ctrs)) * 100
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_benchmark(
    db: Session,
    *,
    campaign: Campaign,
    today: Optional[date] = None,
) -> Optional[Benchmark]:
    """
    Benchmark on the campaign's primary placement, or None when no peer has
    enough traffic to compare against.
    """
    placement = campaign.primary_placement
    since = trailing_window_start(today)

    own = crud.metrics.get_totals(db, campaign_id=campaign.id, start=since, placement=placement)
    own_ctr = calculate_ctr(own["clicks"], own["billable_impressions"])

    peers = crud.metrics.get_peer_totals(
        db, exclude_campaign_id=campaign.id, placement=placement, since=since
    )
    peer_ctrs = sorted(calculate_ctr(p["clicks"], p["billable_impressions"]) for p in peers)

    percentile = compute_percentile(own_ctr, peer_ctrs)
    if percentile is None:
        return None

    return Benchmark(
        placement=placement,
        percentile=percentile,
        peer_count=len(peer_ctrs),
        badge=badge_for(percentile),
    )
