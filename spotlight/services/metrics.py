"""
Read side of the daily metrics rollups: totals, CTR and per-day series.
"""

from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.metrics import MetricsDaily, calculate_ctr
from spotlight.schemas.metrics import CampaignMetricsSummary, DailyPoint, MetricsTotals
from spotlight.utils.timeutils import utc_today

TRAILING_WINDOW_DAYS = 30


def trailing_window_start(today: Optional[date] = None, days: int = TRAILING_WINDOW_DAYS) -> date:
    """First day of the trailing window that ends today (inclusive)."""
    return (today or utc_today()) - timedelta(days=days - 1)


def to_totals(counts: Dict[str, int]) -> MetricsTotals:
    return MetricsTotals(
        **counts,
        ctr=calculate_ctr(counts["clicks"], counts["billable_impressions"]),
    )


def daily_series(rows: Iterable[MetricsDaily]) -> List[DailyPoint]:
    """Merge placement/creative rows into one point per date, oldest first."""
    by_date: "OrderedDict[date, Dict[str, int]]" = OrderedDict()
    for row in sorted(rows, key=lambda r: r.date):
        bucket = by_date.setdefault(
            row.date,
            {"raw_views": 0, "billable_impressions": 0, "unique_users": 0, "clicks": 0},
        )
        bucket["raw_views"] += row.raw_views
        bucket["billable_impressions"] += row.billable_impressions
        bucket["unique_users"] += row.unique_users
        bucket["clicks"] += row.clicks

    return [
        DailyPoint(
            date=day,
            **counts,
            ctr=calculate_ctr(counts["clicks"], counts["billable_impressions"]),
        )
        for day, counts in by_date.items()
    ]


def campaign_totals(
    db: Session,
    *,
    campaign_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> MetricsTotals:
    return to_totals(crud.metrics.get_totals(db, campaign_id=campaign_id, start=start, end=end))


def summarize_campaigns(
    db: Session, *, start: Optional[date] = None, end: Optional[date] = None
) -> List[CampaignMetricsSummary]:
    """Per-campaign totals for the admin dashboard, with campaign names where known."""
    summaries = crud.metrics.get_campaign_summaries(db, start=start, end=end)
    result = []
    for counts in summaries:
        campaign = crud.campaign.get(db, counts["campaign_id"])
        result.append(
            CampaignMetricsSummary(
                **counts,
                name=campaign.name if campaign else None,
                ctr=calculate_ctr(counts["clicks"], counts["billable_impressions"]),
            )
        )
    return result
