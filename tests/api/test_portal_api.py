from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from spotlight import crud
from tests.utils.factories import create_test_campaign


def seed_today(db, campaign, billable, clicks):
    crud.metrics.increment(
        db,
        campaign_id=campaign.id,
        placement=campaign.primary_placement,
        day=datetime.now(timezone.utc).date(),
        raw_views=billable,
        billable_impressions=billable,
        clicks=clicks,
    )
    db.commit()


def test_portal_without_peers_omits_benchmark(client: TestClient, db: Session) -> None:
    campaign = create_test_campaign(db)
    token = crud.portal_token.issue(db, campaign_id=campaign.id)
    seed_today(db, campaign, billable=400, clicks=8)

    response = client.get(f"/api/spotlight/portal/{token.token}")

    assert response.status_code == 200
    content = response.json()
    assert "benchmark" not in content
    assert content["campaign"]["id"] == campaign.id
    assert content["lifetime"]["billable_impressions"] == 400
    assert content["ctr"] == 2.0
    assert len(content["daily"]) == 1


def test_portal_with_peers_includes_benchmark(client: TestClient, db: Session) -> None:
    campaign = create_test_campaign(db, name="Own")
    peer = create_test_campaign(db, name="Peer")
    token = crud.portal_token.issue(db, campaign_id=campaign.id)
    seed_today(db, campaign, billable=400, clicks=8)
    seed_today(db, peer, billable=400, clicks=4)

    response = client.get(f"/api/spotlight/portal/{token.token}")

    benchmark = response.json()["benchmark"]
    assert benchmark == {
        "placement": "events_banner",
        "percentile": 100,
        "peer_count": 1,
        "badge": "Top 25%",
    }


def test_invalid_tokens_share_one_response(client: TestClient, db: Session) -> None:
    campaign = create_test_campaign(db)
    revoked = crud.portal_token.issue(db, campaign_id=campaign.id)
    crud.portal_token.revoke(db, db_obj=revoked)
    expired = crud.portal_token.issue(db, campaign_id=campaign.id)
    expired.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
    db.commit()

    responses = [
        client.get(f"/api/spotlight/portal/{token}")
        for token in ("unknown-token", revoked.token, expired.token)
    ]

    assert [r.status_code for r in responses] == [404, 404, 404]
    assert all(r.json() == {"detail": "Invalid or expired link"} for r in responses)


def test_csv_export(client: TestClient, db: Session) -> None:
    campaign = create_test_campaign(db, placements=["home_mid"])
    token = crud.portal_token.issue(db, campaign_id=campaign.id)

    response = client.get(f"/api/spotlight/portal/{token.token}/export.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=spotlight_" in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert lines[0] == "date,placement,raw_views,billable_impressions,unique_users,clicks,ctr"
    assert lines[1] == f"{datetime.now(timezone.utc).date().isoformat()},home_mid,0,0,0,0,0.00"


def test_csv_export_with_invalid_token(client: TestClient) -> None:
    response = client.get("/api/spotlight/portal/unknown-token/export.csv")
    assert response.status_code == 404
