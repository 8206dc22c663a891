from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from spotlight import crud
from tests.utils.factories import create_test_campaign


def test_active_campaigns_by_placement(client: TestClient, db: Session) -> None:
    banner = create_test_campaign(db, name="Banner", placements=["events_banner"], priority=5)
    home = create_test_campaign(db, name="Home", placements=["home_mid"])

    response = client.get("/api/spotlight/active")

    assert response.status_code == 200
    placements = response.json()["placements"]
    assert placements["events_banner"]["campaign_id"] == banner.id
    assert placements["home_mid"]["campaign_id"] == home.id
    assert placements["home_mid"]["creatives"][0]["placement"] == "home_mid"


def test_active_campaigns_empty_placement_is_omitted(client: TestClient, db: Session) -> None:
    create_test_campaign(db, placements=["events_banner"])

    response = client.get("/api/spotlight/active", params={"placement": "home_mid"})

    assert response.status_code == 200
    assert response.json() == {"placements": {}}


def test_active_campaigns_rejects_bad_placement(client: TestClient) -> None:
    response = client.get("/api/spotlight/active", params={"placement": "Home Mid!"})
    assert response.status_code == 422


def test_track_impression_and_click(client: TestClient, db: Session) -> None:
    campaign = create_test_campaign(db, freq_cap=1)

    for _ in range(2):
        response = client.post(
            "/api/spotlight/metrics/track",
            json={"campaignId": campaign.id, "event": "impression", "userId": "u1"},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True}
    client.post("/api/spotlight/metrics/track", json={"campaignId": campaign.id, "event": "click"})

    totals = crud.metrics.get_totals(db, campaign_id=campaign.id)
    assert totals == {"raw_views": 2, "billable_impressions": 1, "unique_users": 1, "clicks": 1}


def test_track_unknown_campaign_is_acknowledged(client: TestClient, db: Session) -> None:
    response = client.post(
        "/api/spotlight/metrics/track",
        json={"campaignId": "cmp_missing", "event": "impression"},
    )

    assert response.status_code == 200
    assert crud.metrics.get_all_rows(db) == []


def test_track_rejects_unknown_event(client: TestClient) -> None:
    response = client.post(
        "/api/spotlight/metrics/track",
        json={"campaignId": "cmp_1", "event": "hover"},
    )
    assert response.status_code == 422


def test_redirect_merges_utm_and_counts_click(client: TestClient, db: Session) -> None:
    campaign = create_test_campaign(db)

    response = client.get(
        f"/api/r/{campaign.id}",
        params={"to": "https://chaico.example.com/menu?utm_source=ig", "utm_content": "hero"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "chaico.example.com"
    params = parse_qs(location.query)
    assert params["utm_source"] == ["ig"]
    assert params["utm_medium"] == ["spotlight"]
    assert params["utm_campaign"] == [campaign.id]
    assert params["utm_content"] == ["hero"]
    assert crud.metrics.get_totals(db, campaign_id=campaign.id)["clicks"] == 1


def test_redirect_rejects_non_http_target(client: TestClient) -> None:
    response = client.get(
        "/api/r/cmp_1", params={"to": "javascript:alert(1)"}, follow_redirects=False
    )
    assert response.status_code == 400


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}
