from datetime import datetime, timedelta, timezone

import pytest

from spotlight import crud
from spotlight.core.exceptions import PortalAccessError
from spotlight.utils.timeutils import as_utc
from tests.utils.factories import create_test_campaign


def test_issue_creates_active_token_with_default_ttl(db):
    campaign = create_test_campaign(db)

    token = crud.portal_token.issue(db, campaign_id=campaign.id, emailed_to="a@example.com")

    assert token.is_active is True
    assert len(token.token) >= 40
    remaining = as_utc(token.expires_at) - datetime.now(timezone.utc)
    assert timedelta(days=13) < remaining <= timedelta(days=14)


def test_validate_stamps_last_accessed(db):
    campaign = create_test_campaign(db)
    token = crud.portal_token.issue(db, campaign_id=campaign.id)

    crud.portal_token.validate(db, token=token.token)

    db.refresh(token)
    assert token.last_accessed_at is not None


def test_unknown_inactive_and_expired_tokens_fail_identically(db):
    campaign = create_test_campaign(db)
    revoked = crud.portal_token.issue(db, campaign_id=campaign.id)
    crud.portal_token.revoke(db, db_obj=revoked)
    expired = crud.portal_token.issue(db, campaign_id=campaign.id)
    later = datetime.now(timezone.utc) + timedelta(days=15)

    messages = []
    for token, now in (("not-a-token", None), (revoked.token, None), (expired.token, later)):
        with pytest.raises(PortalAccessError) as exc_info:
            crud.portal_token.validate(db, token=token, now=now)
        messages.append(exc_info.value.message)

    assert messages == ["Invalid or expired link"] * 3


def test_deactivate_for_campaign_only_touches_that_lead(db):
    campaign = create_test_campaign(db)
    mine = crud.portal_token.issue(db, campaign_id=campaign.id, lead_id="lead_1")
    theirs = crud.portal_token.issue(db, campaign_id=campaign.id, lead_id="lead_2")

    count = crud.portal_token.deactivate_for_campaign(db, campaign_id=campaign.id, lead_id="lead_1")

    db.refresh(mine)
    db.refresh(theirs)
    assert count == 1
    assert mine.is_active is False
    assert theirs.is_active is True
