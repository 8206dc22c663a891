"""
Sponsor analytics portal: the metrics bundle behind a portal token and its
CSV export.
"""

import logging
from datetime import date
from io import BytesIO
from typing import Optional, Tuple

import pandas as pd
from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.campaign import Campaign
from spotlight.models.metrics import calculate_ctr
from spotlight.schemas.portal import PortalAnalytics, PortalCampaign
from spotlight.services.benchmark import compute_benchmark
from spotlight.services.metrics import campaign_totals, daily_series, trailing_window_start
from spotlight.utils.timeutils import utc_today

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "date",
    "placement",
    "raw_views",
    "billable_impressions",
    "unique_users",
    "clicks",
    "ctr",
]
COUNTER_COLUMNS = ["raw_views", "billable_impressions", "unique_users", "clicks"]


def _portal_campaign(campaign: Campaign) -> PortalCampaign:
    return PortalCampaign(
        id=campaign.id,
        name=campaign.name,
        sponsor_name=campaign.sponsor_name,
        headline=campaign.headline,
        placements=campaign.placements or [],
        start_at=campaign.start_at,
        end_at=campaign.end_at,
        is_active=campaign.is_active,
    )


def get_portal_analytics(
    db: Session, *, token: str, today: Optional[date] = None
) -> PortalAnalytics:
    """Validate the token and assemble everything the portal page shows."""
    token_row = crud.portal_token.validate(db, token=token)
    campaign = token_row.campaign
    today = today or utc_today()
    since = trailing_window_start(today)

    lifetime = campaign_totals(db, campaign_id=campaign.id)
    last_30_days = campaign_totals(db, campaign_id=campaign.id, start=since, end=today)
    rows = crud.metrics.get_rows(db, campaign_id=campaign.id, start=since, end=today)

    return PortalAnalytics(
        campaign=_portal_campaign(campaign),
        token_expires_at=token_row.expires_at,
        lifetime=lifetime,
        last_30_days=last_30_days,
        ctr=lifetime.ctr,
        benchmark=compute_benchmark(db, campaign=campaign, today=today),
        daily=daily_series(rows),
        generated_on=today,
    )


def build_metrics_frame(rows, *, fallback_placement: str, today: date) -> pd.DataFrame:
    """
    One row per (date, placement), creatives merged, oldest first.

    Never empty: with no data it holds a single zero row dated today.
    """
    records = [
        {
            "date": row.date.isoformat(),
            "placement": row.placement,
            "raw_views": row.raw_views,
            "billable_impressions": row.billable_impressions,
            "unique_users": row.unique_users,
            "clicks": row.clicks,
        }
        for row in rows
    ]

    if not records:
        records = [{
            "date": today.isoformat(),
            "placement": fallback_placement,
            **{column: 0 for column in COUNTER_COLUMNS},
        }]

    df = pd.DataFrame(records)
    df = (
        df.groupby(["date", "placement"], as_index=False)[COUNTER_COLUMNS]
        .sum()
        .sort_values(["date", "placement"])
    )
    df["ctr"] = [
        calculate_ctr(int(clicks), int(billable))
        for clicks, billable in zip(df["clicks"], df["billable_impressions"])
    ]
    return df[CSV_COLUMNS]


def export_portal_csv(
    db: Session, *, token: str, today: Optional[date] = None
) -> Tuple[BytesIO, str]:
    """
    Returns the CSV stream and a download filename.

    Covers the same trailing window as the portal's daily series. Each date
    is split by placement, so the rows for a date sum to the portal point.
    """
    token_row = crud.portal_token.validate(db, token=token)
    campaign = token_row.campaign
    today = today or utc_today()
    since = trailing_window_start(today)

    rows = crud.metrics.get_rows(db, campaign_id=campaign.id, start=since, end=today)
    df = build_metrics_frame(rows, fallback_placement=campaign.primary_placement, today=today)

    output = BytesIO()
    df.to_csv(output, index=False, float_format="%.2f")
    output.seek(0)

    logger.info(f"Portal CSV export for campaign {campaign.id}: {len(df)} rows")
    return output, f"spotlight_{campaign.id}_{today.isoformat()}.csv"
