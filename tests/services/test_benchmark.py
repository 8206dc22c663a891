from datetime import date, timedelta

from spotlight import crud
from spotlight.services.benchmark import badge_for, compute_benchmark, compute_percentile
from tests.utils.factories import create_test_campaign

TODAY = date(2025, 11, 3)


def seed(db, campaign, *, billable, clicks, day=TODAY, placement="events_banner"):
    crud.metrics.increment(
        db,
        campaign_id=campaign.id,
        placement=placement,
        day=day,
        raw_views=billable,
        billable_impressions=billable,
        clicks=clicks,
    )
    db.commit()


class TestPercentile:

    def test_share_of_peers_strictly_below(self):
        assert compute_percentile(2.0, [1.0, 1.5, 2.0, 3.0]) == 50

    def test_rounds_half_up(self):
        # 1 of 8 below = 12.5% -> 13
        assert compute_percentile(1.0, [0.5] + [2.0] * 7) == 13

    def test_no_peers(self):
        assert compute_percentile(4.0, []) is None

    def test_badges(self):
        assert badge_for(80) == "Top 25%"
        assert badge_for(75) == "Top 25%"
        assert badge_for(50) == "Top 50%"
        assert badge_for(25) == "Above average"
        assert badge_for(24) is None


class TestComputeBenchmark:

    def test_no_qualifying_peers(self, db):
        own = create_test_campaign(db, name="Own")
        peer = create_test_campaign(db, name="Small peer")
        seed(db, own, billable=500, clicks=10)
        seed(db, peer, billable=100, clicks=1)  # needs more than 100

        assert compute_benchmark(db, campaign=own, today=TODAY) is None

    def test_ranks_against_peers_on_primary_placement(self, db):
        own = create_test_campaign(db, name="Own")
        low = create_test_campaign(db, name="Low CTR")
        high = create_test_campaign(db, name="High CTR")
        other_slot = create_test_campaign(db, name="Other slot", placements=["home_mid"])

        seed(db, own, billable=1000, clicks=30)           # 3.0%
        seed(db, low, billable=1000, clicks=10)           # 1.0%
        seed(db, high, billable=1000, clicks=50)          # 5.0%
        seed(db, other_slot, billable=1000, clicks=1, placement="home_mid")

        benchmark = compute_benchmark(db, campaign=own, today=TODAY)

        assert benchmark.placement == "events_banner"
        assert benchmark.peer_count == 2
        assert benchmark.percentile == 50
        assert benchmark.badge == "Top 50%"

    def test_ignores_rows_outside_trailing_window(self, db):
        own = create_test_campaign(db, name="Own")
        old_peer = create_test_campaign(db, name="Old peer")
        seed(db, own, billable=500, clicks=10)
        seed(db, old_peer, billable=5000, clicks=5, day=TODAY - timedelta(days=30))

        assert compute_benchmark(db, campaign=own, today=TODAY) is None
