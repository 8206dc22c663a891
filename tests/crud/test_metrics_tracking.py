from datetime import date

import pytest

from spotlight import crud
from spotlight.models.metrics import calculate_ctr
from tests.utils.factories import create_test_campaign

DAY = date(2025, 11, 3)


def track(db, campaign, event="impression", user_id=None, creative_id=None, placement="events_banner"):
    return crud.metrics.track_event(
        db,
        campaign_id=campaign.id,
        event=event,
        placement=placement,
        creative_id=creative_id,
        user_id=user_id,
        freq_cap=campaign.freq_cap_per_user_per_day,
        day=DAY,
    )


def only_row(db, campaign):
    rows = crud.metrics.get_rows(db, campaign_id=campaign.id)
    assert len(rows) == 1
    return rows[0]


def test_frequency_cap_limits_billable_impressions(db):
    """Cap 3, five views from one user: raw 5, billable 3, unique 1."""
    campaign = create_test_campaign(db, freq_cap=3)

    for _ in range(5):
        track(db, campaign, user_id="user_1")

    row = only_row(db, campaign)
    assert row.raw_views == 5
    assert row.billable_impressions == 3
    assert row.unique_users == 1


def test_frequency_cap_is_shared_across_placements(db):
    """Cap 3 across two placements: 3 + 2 views from one user bill only 3."""
    campaign = create_test_campaign(db, placements=["events_banner", "home_mid"], freq_cap=3)

    for _ in range(3):
        track(db, campaign, user_id="user_1", placement="events_banner")
    for _ in range(2):
        track(db, campaign, user_id="user_1", placement="home_mid")

    totals = crud.metrics.get_totals(db, campaign_id=campaign.id)
    assert totals["raw_views"] == 5
    assert totals["billable_impressions"] == 3
    # First view on each placement still counts as unique there.
    assert totals["unique_users"] == 2

    home = crud.metrics.get_rows(db, campaign_id=campaign.id, placement="home_mid")
    assert home[0].billable_impressions == 0


def test_frequency_cap_resets_per_campaign(db):
    first = create_test_campaign(db, freq_cap=1)
    second = create_test_campaign(db, freq_cap=1)

    track(db, first, user_id="user_1")
    track(db, second, user_id="user_1")

    assert only_row(db, first).billable_impressions == 1
    assert only_row(db, second).billable_impressions == 1


def test_zero_cap_means_unlimited(db):
    campaign = create_test_campaign(db, freq_cap=0)

    for _ in range(4):
        track(db, campaign, user_id="user_1")

    row = only_row(db, campaign)
    assert row.billable_impressions == 4
    assert row.unique_users == 1


def test_each_viewer_counts_once_as_unique(db):
    campaign = create_test_campaign(db, freq_cap=1)

    track(db, campaign, user_id="user_1")
    track(db, campaign, user_id="user_2")
    track(db, campaign, user_id="user_2")

    row = only_row(db, campaign)
    assert row.raw_views == 3
    assert row.billable_impressions == 2
    assert row.unique_users == 2


def test_anonymous_impressions_are_billable_but_not_unique(db):
    campaign = create_test_campaign(db, freq_cap=1)

    track(db, campaign)
    track(db, campaign)

    row = only_row(db, campaign)
    assert row.raw_views == 2
    assert row.billable_impressions == 2
    assert row.unique_users == 0


def test_clicks_are_counted_without_impressions(db):
    campaign = create_test_campaign(db)

    deltas = track(db, campaign, event="click", user_id="user_1")

    assert deltas == {"raw_views": 0, "billable_impressions": 0, "unique_users": 0, "clicks": 1}
    row = only_row(db, campaign)
    assert row.clicks == 1
    assert row.billable_impressions == 0


def test_rows_are_split_by_creative_and_placement(db):
    campaign = create_test_campaign(db, placements=["events_banner", "home_mid"])

    track(db, campaign, creative_id="crv_1")
    track(db, campaign, creative_id="crv_1")
    track(db, campaign)
    track(db, campaign, placement="home_mid")

    rows = crud.metrics.get_rows(db, campaign_id=campaign.id)
    assert len(rows) == 3
    totals = crud.metrics.get_totals(db, campaign_id=campaign.id)
    assert totals["raw_views"] == 4


def test_unknown_event_type_is_rejected(db):
    campaign = create_test_campaign(db)

    with pytest.raises(ValueError):
        track(db, campaign, event="hover")


def test_totals_are_zero_without_rows(db):
    campaign = create_test_campaign(db)

    assert crud.metrics.get_totals(db, campaign_id=campaign.id) == {
        "raw_views": 0,
        "billable_impressions": 0,
        "unique_users": 0,
        "clicks": 0,
    }


def test_ctr():
    assert calculate_ctr(3, 200) == 1.5
    assert calculate_ctr(1, 3) == 33.33
    assert calculate_ctr(5, 0) == 0.0
