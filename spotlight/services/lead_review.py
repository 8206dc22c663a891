"""
Admin review lifecycle for sponsorship leads.

    new -> reviewing -> approved -> onboarding_sent
    new | reviewing -> rejected

Approval links the lead to a campaign (an inactive draft built from the
lead when none is given), issues a portal token and emails the portal link.
A failed email never undoes the approval; the lead simply stays "approved"
until a resend succeeds.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.core import email as mailer
from spotlight.core.config import settings
from spotlight.core.exceptions import CampaignNotFoundError, LeadNotFoundError, LeadStateError
from spotlight.models.campaign import Campaign
from spotlight.models.lead import Lead
from spotlight.models.portal_token import PortalToken
from spotlight.schemas.campaign import CampaignUpsert, CreativeIn
from spotlight.schemas.lead import LeadApprove, LeadStatus
from spotlight.services.pricing import DAILY, PACKAGE_PLACEMENTS
from spotlight.utils.timeutils import utcnow
from spotlight.utils.validators import validate_url

logger = logging.getLogger(__name__)

# Transitions an admin may set directly; approval has its own operation.
MANUAL_TRANSITIONS = {
    LeadStatus.NEW.value: {LeadStatus.REVIEWING.value, LeadStatus.REJECTED.value},
    LeadStatus.REVIEWING.value: {LeadStatus.NEW.value, LeadStatus.REJECTED.value},
}
APPROVABLE = {LeadStatus.NEW.value, LeadStatus.REVIEWING.value}
RESENDABLE = {LeadStatus.APPROVED.value, LeadStatus.ONBOARDING_SENT.value}


@dataclass
class OnboardingOutcome:
    lead: Lead
    token: Optional[PortalToken]
    portal_url: Optional[str]
    email_sent: bool
    email_error: Optional[str] = None


def get_lead_or_404(db: Session, lead_id: str) -> Lead:
    lead = crud.lead.get(db, lead_id)
    if lead is None:
        raise LeadNotFoundError("Lead not found")
    return lead


def update_status(
    db: Session, *, lead_id: str, status: str, admin_notes: Optional[str] = None
) -> Lead:
    lead = get_lead_or_404(db, lead_id)
    if status != lead.status and status not in MANUAL_TRANSITIONS.get(lead.status, set()):
        raise LeadStateError(f"Cannot move lead from {lead.status} to {status}")
    lead = crud.lead.set_status(db, db_obj=lead, status=status, admin_notes=admin_notes)
    logger.info(f"Lead {lead.id} status set to {status}")
    return lead


def _parse_day(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _draft_click_url(lead: Lead, click_url: Optional[str]) -> str:
    for candidate in (click_url, lead.website):
        if not candidate:
            continue
        if not candidate.startswith(("http://", "https://")):
            candidate = f"https://{candidate}"
        valid, _ = validate_url(candidate, "click_url")
        if valid:
            return candidate
    return settings.APP_BASE_URL


def build_draft_campaign(lead: Lead, *, click_url: Optional[str] = None, now: Optional[datetime] = None) -> CampaignUpsert:
    """
    An inactive campaign mirroring what the lead bought: the package's
    placements, the booked window and the submitted creatives.
    """
    now = now or utcnow()
    placements = PACKAGE_PLACEMENTS.get(lead.package_code, ["events_banner"])

    start_day = _parse_day(lead.start_date)
    start_at = datetime.combine(start_day, time.min, tzinfo=timezone.utc) if start_day else now
    booked_days = lead.num_days if lead.duration == DAILY else 7 * lead.num_weeks

    end_day = _parse_day(lead.end_date)
    if end_day and end_day >= start_at.date():
        end_at = datetime.combine(end_day, time.max, tzinfo=timezone.utc)
    else:
        end_at = start_at + timedelta(days=max(booked_days, 1))

    creatives = None
    if lead.desktop_asset_url or lead.mobile_asset_url:
        creatives = [
            CreativeIn(
                placement=placement,
                image_desktop_url=lead.desktop_asset_url,
                image_mobile_url=lead.mobile_asset_url,
                alt=lead.business_name,
            )
            for placement in placements
        ]

    return CampaignUpsert(
        name=f"{lead.business_name} - {lead.package_code}",
        sponsor_name=lead.business_name,
        click_url=_draft_click_url(lead, click_url),
        placements=placements,
        start_at=start_at,
        end_at=end_at,
        is_active=False,
        creatives=creatives,
    )


def _send_onboarding(db: Session, lead: Lead, token: PortalToken) -> OnboardingOutcome:
    result = mailer.send_portal_onboarding_email(
        to_email=lead.email,
        contact_name=lead.contact_name,
        business_name=lead.business_name,
        portal_token=token.token,
        expires_in_days=settings.PORTAL_TOKEN_TTL_DAYS,
    )
    portal_url = mailer.build_portal_url(token.token)

    if result.get("success"):
        lead = crud.lead.set_status(db, db_obj=lead, status=LeadStatus.ONBOARDING_SENT.value)
        return OnboardingOutcome(lead=lead, token=token, portal_url=portal_url, email_sent=True)

    logger.warning(f"Onboarding email for lead {lead.id} failed: {result.get('error')}")
    return OnboardingOutcome(
        lead=lead,
        token=token,
        portal_url=portal_url,
        email_sent=False,
        email_error=result.get("error"),
    )


def approve_lead(
    db: Session, *, lead_id: str, obj_in: LeadApprove, now: Optional[datetime] = None
) -> OnboardingOutcome:
    lead = get_lead_or_404(db, lead_id)
    if lead.status not in APPROVABLE:
        raise LeadStateError(f"Lead in status {lead.status} cannot be approved")

    if obj_in.campaign_id:
        campaign: Optional[Campaign] = crud.campaign.get(db, obj_in.campaign_id)
        if campaign is None:
            raise CampaignNotFoundError("Campaign not found")
    else:
        campaign = crud.campaign.upsert(
            db, obj_in=build_draft_campaign(lead, click_url=obj_in.click_url, now=now)
        )
        logger.info(f"Draft campaign {campaign.id} created for lead {lead.id}")

    lead = crud.lead.set_status(
        db,
        db_obj=lead,
        status=LeadStatus.APPROVED.value,
        admin_notes=obj_in.admin_notes,
        approved_at=now or utcnow(),
        approved_by=obj_in.approved_by,
        campaign_id=campaign.id,
    )

    token = crud.portal_token.issue(
        db, campaign_id=campaign.id, emailed_to=lead.email, lead_id=lead.id
    )
    logger.info(f"Lead {lead.id} approved; portal token {token.id} issued")
    return _send_onboarding(db, lead, token)


def resend_onboarding(
    db: Session, *, lead_id: str, revoke_previous: Optional[bool] = None
) -> OnboardingOutcome:
    """
    Issue a fresh portal token and email it again. Older tokens for the lead
    are deactivated unless disabled per call or by configuration.
    """
    lead = get_lead_or_404(db, lead_id)
    if lead.status not in RESENDABLE:
        raise LeadStateError(f"Lead in status {lead.status} has not been approved")
    if not lead.campaign_id or crud.campaign.get(db, lead.campaign_id) is None:
        raise CampaignNotFoundError("Lead is not linked to a campaign")

    if revoke_previous is None:
        revoke_previous = settings.PORTAL_REVOKE_PREVIOUS_ON_RESEND
    if revoke_previous:
        revoked = crud.portal_token.deactivate_for_campaign(
            db, campaign_id=lead.campaign_id, lead_id=lead.id
        )
        logger.info(f"Deactivated {revoked} previous portal token(s) for lead {lead.id}")

    token = crud.portal_token.issue(
        db, campaign_id=lead.campaign_id, emailed_to=lead.email, lead_id=lead.id
    )
    return _send_onboarding(db, lead, token)
