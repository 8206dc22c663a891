from datetime import datetime, timezone

import pytest

from spotlight import crud
from spotlight.core.exceptions import CampaignNotFoundError, LeadStateError
from spotlight.schemas.lead import LeadApprove
from spotlight.services import lead_review
from tests.utils.factories import create_test_campaign, create_test_lead

NOW = datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)


class TestStatusTransitions:

    def test_new_to_reviewing_to_rejected(self, db):
        lead = create_test_lead(db)

        lead = lead_review.update_status(db, lead_id=lead.id, status="reviewing", admin_notes="Looks good")
        assert lead.status == "reviewing"
        assert lead.admin_notes == "Looks good"

        lead = lead_review.update_status(db, lead_id=lead.id, status="rejected")
        assert lead.status == "rejected"

    def test_approval_is_not_a_manual_transition(self, db):
        lead = create_test_lead(db)

        with pytest.raises(LeadStateError):
            lead_review.update_status(db, lead_id=lead.id, status="approved")

    def test_rejected_is_final(self, db):
        lead = create_test_lead(db)
        lead_review.update_status(db, lead_id=lead.id, status="rejected")

        with pytest.raises(LeadStateError):
            lead_review.update_status(db, lead_id=lead.id, status="new")


class TestApproveLead:

    def test_approve_builds_draft_campaign_and_sends_portal_link(self, db, mock_onboarding_email):
        lead = create_test_lead(db)

        outcome = lead_review.approve_lead(
            db, lead_id=lead.id, obj_in=LeadApprove(approved_by="admin"), now=NOW
        )

        assert outcome.email_sent is True
        assert outcome.lead.status == "onboarding_sent"
        assert outcome.lead.approved_by == "admin"
        assert outcome.portal_url.endswith(f"/sponsor/{outcome.token.token}")

        campaign = crud.campaign.get(db, outcome.lead.campaign_id)
        assert campaign.is_active is False
        assert campaign.placements == ["events_banner"]
        assert campaign.click_url == "https://chaico.example.com"
        assert [c.image_desktop_url for c in campaign.creatives] == ["https://cdn.example.com/banner.png"]

        mock_onboarding_email.assert_called_once()
        kwargs = mock_onboarding_email.call_args.kwargs
        assert kwargs["to_email"] == "priya@chaico.example.com"
        assert kwargs["portal_token"] == outcome.token.token
        assert kwargs["expires_in_days"] == 14

    def test_approve_into_existing_campaign(self, db, mock_onboarding_email):
        campaign = create_test_campaign(db)
        lead = create_test_lead(db)

        outcome = lead_review.approve_lead(
            db, lead_id=lead.id, obj_in=LeadApprove(campaign_id=campaign.id)
        )

        assert outcome.lead.campaign_id == campaign.id
        assert outcome.token.campaign_id == campaign.id

    def test_unknown_campaign(self, db, mock_onboarding_email):
        lead = create_test_lead(db)

        with pytest.raises(CampaignNotFoundError):
            lead_review.approve_lead(db, lead_id=lead.id, obj_in=LeadApprove(campaign_id="cmp_missing"))

    def test_failed_email_keeps_lead_approved(self, db, mock_onboarding_email):
        mock_onboarding_email.return_value = {"success": False, "error": "Resend unavailable"}
        lead = create_test_lead(db)

        outcome = lead_review.approve_lead(db, lead_id=lead.id, obj_in=LeadApprove())

        assert outcome.email_sent is False
        assert outcome.email_error == "Resend unavailable"
        assert outcome.lead.status == "approved"
        assert outcome.token.is_active is True

    def test_rejected_lead_cannot_be_approved(self, db, mock_onboarding_email):
        lead = create_test_lead(db)
        lead_review.update_status(db, lead_id=lead.id, status="rejected")

        with pytest.raises(LeadStateError):
            lead_review.approve_lead(db, lead_id=lead.id, obj_in=LeadApprove())


class TestResendOnboarding:

    def approved_lead(self, db):
        lead = create_test_lead(db)
        return lead_review.approve_lead(db, lead_id=lead.id, obj_in=LeadApprove())

    def test_resend_revokes_previous_token(self, db, mock_onboarding_email):
        first = self.approved_lead(db)

        second = lead_review.resend_onboarding(db, lead_id=first.lead.id)

        db.refresh(first.token)
        assert second.token.token != first.token.token
        assert first.token.is_active is False
        assert second.token.is_active is True
        assert mock_onboarding_email.call_count == 2

    def test_resend_can_keep_previous_token(self, db, mock_onboarding_email):
        first = self.approved_lead(db)

        lead_review.resend_onboarding(db, lead_id=first.lead.id, revoke_previous=False)

        db.refresh(first.token)
        assert first.token.is_active is True

    def test_resend_requires_approval(self, db, mock_onboarding_email):
        lead = create_test_lead(db)

        with pytest.raises(LeadStateError):
            lead_review.resend_onboarding(db, lead_id=lead.id)
