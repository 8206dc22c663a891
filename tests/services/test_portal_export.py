from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from spotlight import crud
from spotlight.core.exceptions import PortalAccessError
from spotlight.services.portal import (
    CSV_COLUMNS,
    build_metrics_frame,
    export_portal_csv,
    get_portal_analytics,
)
from tests.utils.factories import create_test_campaign

TODAY = date(2025, 11, 3)


def row(day, placement, raw=0, billable=0, unique=0, clicks=0):
    return SimpleNamespace(
        date=day,
        placement=placement,
        raw_views=raw,
        billable_impressions=billable,
        unique_users=unique,
        clicks=clicks,
    )


class TestMetricsFrame:

    def test_empty_history_gives_single_zero_row(self):
        df = build_metrics_frame([], fallback_placement="home_mid", today=TODAY)

        assert list(df.columns) == CSV_COLUMNS
        assert len(df) == 1
        record = df.iloc[0]
        assert record["date"] == "2025-11-03"
        assert record["placement"] == "home_mid"
        assert record["clicks"] == 0
        assert record["ctr"] == 0.0

    def test_creatives_are_merged_per_date_and_placement(self):
        rows = [
            row(TODAY, "events_banner", raw=10, billable=8, unique=5, clicks=1),
            row(TODAY, "events_banner", raw=10, billable=12, unique=2, clicks=1),
            row(TODAY - timedelta(days=1), "events_banner", raw=4, billable=4),
        ]

        df = build_metrics_frame(rows, fallback_placement="events_banner", today=TODAY)

        assert list(df["date"]) == ["2025-11-02", "2025-11-03"]
        latest = df.iloc[1]
        assert latest["raw_views"] == 20
        assert latest["billable_impressions"] == 20
        assert latest["clicks"] == 2
        assert latest["ctr"] == 10.0


class TestPortalAnalytics:

    def test_analytics_for_valid_token(self, db):
        campaign = create_test_campaign(db)
        token = crud.portal_token.issue(db, campaign_id=campaign.id)
        crud.metrics.increment(
            db, campaign_id=campaign.id, placement="events_banner", day=TODAY,
            raw_views=250, billable_impressions=200, unique_users=90, clicks=3,
        )
        crud.metrics.increment(
            db, campaign_id=campaign.id, placement="events_banner", day=TODAY - timedelta(days=45),
            raw_views=100, billable_impressions=100, clicks=1,
        )
        db.commit()

        analytics = get_portal_analytics(db, token=token.token, today=TODAY)

        assert analytics.campaign.id == campaign.id
        assert analytics.lifetime.billable_impressions == 300
        assert analytics.last_30_days.billable_impressions == 200
        assert analytics.last_30_days.ctr == 1.5
        assert analytics.ctr == analytics.lifetime.ctr
        assert analytics.benchmark is None
        assert [point.date for point in analytics.daily] == [TODAY]

    def test_csv_for_campaign_without_metrics(self, db):
        campaign = create_test_campaign(db, placements=["home_mid"])
        token = crud.portal_token.issue(db, campaign_id=campaign.id)

        output, filename = export_portal_csv(db, token=token.token, today=TODAY)

        lines = output.getvalue().decode().strip().splitlines()
        assert lines[0] == ",".join(CSV_COLUMNS)
        assert lines[1] == "2025-11-03,home_mid,0,0,0,0,0.00"
        assert filename == f"spotlight_{campaign.id}_2025-11-03.csv"

    def test_csv_matches_portal_daily_series(self, db):
        campaign = create_test_campaign(db, placements=["events_banner", "home_mid"])
        token = crud.portal_token.issue(db, campaign_id=campaign.id)
        crud.metrics.increment(
            db, campaign_id=campaign.id, placement="events_banner", day=TODAY,
            raw_views=30, billable_impressions=20, clicks=1,
        )
        crud.metrics.increment(
            db, campaign_id=campaign.id, placement="home_mid", day=TODAY,
            raw_views=10, billable_impressions=10, clicks=2,
        )
        crud.metrics.increment(
            db, campaign_id=campaign.id, placement="events_banner", day=TODAY - timedelta(days=45),
            raw_views=100, billable_impressions=100, clicks=1,
        )
        db.commit()

        analytics = get_portal_analytics(db, token=token.token, today=TODAY)
        output, _ = export_portal_csv(db, token=token.token, today=TODAY)

        lines = output.getvalue().decode().strip().splitlines()[1:]
        assert lines == [
            "2025-11-03,events_banner,30,20,0,1,5.00",
            "2025-11-03,home_mid,10,10,0,2,20.00",
        ]
        assert [point.date for point in analytics.daily] == [TODAY]
        assert analytics.daily[0].billable_impressions == 30
        assert analytics.daily[0].clicks == 3

    def test_expired_token_is_refused(self, db):
        campaign = create_test_campaign(db)
        token = crud.portal_token.issue(db, campaign_id=campaign.id, ttl_days=1)

        with pytest.raises(PortalAccessError):
            crud.portal_token.validate(
                db, token=token.token, now=datetime.now(timezone.utc) + timedelta(days=2)
            )
