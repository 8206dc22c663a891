# spotlight/api/v1/endpoints/admin.py
"""
Admin tooling. Every route requires the X-Admin-Key header.
"""

import logging
from datetime import date
from io import BytesIO
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.api.deps import get_db, require_admin_key
from spotlight.api.errors import datastore_error, http_error
from spotlight.core.email import build_portal_url
from spotlight.core.exceptions import CampaignNotFoundError, SpotlightError
from spotlight.schemas.campaign import CampaignResponse, CampaignToggle, CampaignUpsert
from spotlight.schemas.lead import (
    LeadActionResult,
    LeadApprove,
    LeadResend,
    LeadResponse,
    LeadStatus,
    LeadStatusUpdate,
    LeadSummary,
)
from spotlight.schemas.metrics import MetricsRowResponse, MetricsSummaryResponse
from spotlight.schemas.portal import PortalTokenIssue, PortalTokenResponse
from spotlight.schemas.promo import PromoCodeCreate, PromoCodeResponse, PromoCodeUpdate
from spotlight.services import lead_review
from spotlight.services.metrics import summarize_campaigns
from spotlight.utils.timeutils import utc_today

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/spotlight/admin",
    tags=["Spotlight Admin"],
    dependencies=[Depends(require_admin_key)],
)


def _get_campaign_or_404(db: Session, campaign_id: str):
    campaign = crud.campaign.get(db, campaign_id)
    if campaign is None:
        raise http_error(CampaignNotFoundError("Campaign not found"))
    return campaign


# ==================== Campaigns ====================

@router.post("/campaigns", response_model=CampaignResponse)
def upsert_campaign(campaign_in: CampaignUpsert, db: Session = Depends(get_db)):
    """
    Create a campaign, or update it when `id` names an existing one.

    Sending `creatives` replaces the campaign's whole creative set.
    """
    try:
        return crud.campaign.upsert(db, obj_in=campaign_in)
    except SQLAlchemyError as e:
        db.rollback()
        raise datastore_error(e, "upserting a campaign")


@router.get("/campaigns", response_model=List[CampaignResponse])
def list_campaigns(
    active_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return crud.campaign.get_filtered(db, active_only=active_only, skip=skip, limit=limit)


@router.get("/campaigns/{campaign_id}", response_model=CampaignResponse)
def get_campaign(campaign_id: str, db: Session = Depends(get_db)):
    return _get_campaign_or_404(db, campaign_id)


@router.patch("/campaigns/{campaign_id}/toggle", response_model=CampaignResponse)
def toggle_campaign(campaign_id: str, body: CampaignToggle, db: Session = Depends(get_db)):
    campaign = _get_campaign_or_404(db, campaign_id)
    campaign = crud.campaign.set_active(db, db_obj=campaign, is_active=body.is_active)
    logger.info(f"Campaign {campaign_id} {'activated' if body.is_active else 'paused'}")
    return campaign


@router.delete("/campaigns/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campaign(campaign_id: str, db: Session = Depends(get_db)):
    """Deletes the campaign with its creatives, metrics and portal tokens."""
    _get_campaign_or_404(db, campaign_id)
    try:
        crud.campaign.remove(db, id=campaign_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise datastore_error(e, "deleting a campaign")
    logger.info(f"Campaign {campaign_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Portal tokens ====================

@router.post(
    "/portal-tokens",
    response_model=PortalTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def issue_portal_token(body: PortalTokenIssue, db: Session = Depends(get_db)):
    _get_campaign_or_404(db, body.campaign_id)
    token = crud.portal_token.issue(
        db,
        campaign_id=body.campaign_id,
        emailed_to=body.emailed_to,
        lead_id=body.lead_id,
        ttl_days=body.ttl_days,
        subscribed_to_reports=body.subscribed_to_reports,
    )
    response = PortalTokenResponse.model_validate(token)
    response.portal_url = build_portal_url(token.token)
    return response


# ==================== Metrics ====================

@router.get("/metrics/summary", response_model=MetricsSummaryResponse)
def metrics_summary(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return MetricsSummaryResponse(
        start=start, end=end, campaigns=summarize_campaigns(db, start=start, end=end)
    )


@router.get("/metrics/dump", response_model=List[MetricsRowResponse])
def metrics_dump(
    campaign_id: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    limit: int = Query(1000, ge=1, le=10000),
    db: Session = Depends(get_db),
):
    """Raw daily rows, newest first. For debugging tracking issues."""
    return crud.metrics.get_all_rows(
        db, campaign_id=campaign_id, start=start, end=end, limit=limit
    )


# ==================== Promo codes ====================

@router.get("/promo-codes", response_model=List[PromoCodeResponse])
def list_promo_codes(include_inactive: bool = False, db: Session = Depends(get_db)):
    return crud.promo_code.get_filtered(db, include_inactive=include_inactive)


@router.post(
    "/promo-codes",
    response_model=PromoCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_promo_code(promo_in: PromoCodeCreate, db: Session = Depends(get_db)):
    if crud.promo_code.get_by_code(db, code=promo_in.code):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Promo code {promo_in.code} already exists",
        )
    promo = crud.promo_code.create(db, obj_in=promo_in)
    logger.info(f"Promo code {promo.code} created")
    return promo


@router.patch("/promo-codes/{promo_id}", response_model=PromoCodeResponse)
def update_promo_code(promo_id: str, promo_in: PromoCodeUpdate, db: Session = Depends(get_db)):
    promo = crud.promo_code.get(db, promo_id)
    if promo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Promo code not found")
    data = promo_in.model_dump(exclude_unset=True)
    if "discount_type" in data and data["discount_type"] is not None:
        data["discount_type"] = promo_in.discount_type.value
    return crud.promo_code.update(db, db_obj=promo, obj_in=data)


@router.delete("/promo-codes/{promo_id}", response_model=PromoCodeResponse)
def deactivate_promo_code(promo_id: str, db: Session = Depends(get_db)):
    """Promo codes are deactivated, never deleted, so redemptions keep their reference."""
    promo = crud.promo_code.get(db, promo_id)
    if promo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Promo code not found")
    return crud.promo_code.deactivate(db, db_obj=promo)


# ==================== Leads ====================

LEAD_CSV_COLUMNS = [
    "id",
    "created_at",
    "status",
    "business_name",
    "contact_name",
    "email",
    "instagram",
    "website",
    "package_code",
    "duration",
    "num_weeks",
    "num_days",
    "start_date",
    "end_date",
    "promo_code",
    "total_cents",
    "currency",
]


def _action_result(outcome: lead_review.OnboardingOutcome) -> LeadActionResult:
    return LeadActionResult(
        lead=LeadResponse.model_validate(outcome.lead),
        portal_token_id=outcome.token.id if outcome.token else None,
        portal_url=outcome.portal_url,
        email_sent=outcome.email_sent,
        email_error=outcome.email_error,
    )


@router.get("/leads", response_model=List[LeadSummary])
def list_leads(
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    email: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return crud.lead.get_filtered(
        db,
        status=status_filter.value if status_filter else None,
        email=email,
        skip=skip,
        limit=limit,
    )


@router.get("/leads/export.csv")
def export_leads(
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    leads = crud.lead.get_filtered(
        db, status=status_filter.value if status_filter else None, limit=10000
    )
    df = pd.DataFrame(
        [{column: getattr(lead, column) for column in LEAD_CSV_COLUMNS} for lead in leads],
        columns=LEAD_CSV_COLUMNS,
    )

    output = BytesIO()
    df.to_csv(output, index=False)
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=sponsor_leads_{utc_today().isoformat()}.csv"},
    )


@router.get("/leads/{lead_id}", response_model=LeadResponse)
def get_lead(lead_id: str, db: Session = Depends(get_db)):
    try:
        return lead_review.get_lead_or_404(db, lead_id)
    except SpotlightError as e:
        raise http_error(e)


@router.patch("/leads/{lead_id}/status", response_model=LeadResponse)
def update_lead_status(lead_id: str, body: LeadStatusUpdate, db: Session = Depends(get_db)):
    """
    Move a lead between new, reviewing and rejected. Approval has its own route.

    **Errors**:
    - 404: Lead not found
    - 409: Transition not allowed
    """
    try:
        return lead_review.update_status(
            db, lead_id=lead_id, status=body.status.value, admin_notes=body.admin_notes
        )
    except SpotlightError as e:
        raise http_error(e)


@router.post("/leads/{lead_id}/approve", response_model=LeadActionResult)
def approve_lead(lead_id: str, body: LeadApprove, db: Session = Depends(get_db)):
    """
    Approve a lead, issue a portal token and email the portal link.

    The approval stands even if the email fails; `email_sent` reports it.
    """
    try:
        outcome = lead_review.approve_lead(db, lead_id=lead_id, obj_in=body)
    except SpotlightError as e:
        raise http_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        raise datastore_error(e, "approving a lead")
    return _action_result(outcome)


@router.post("/leads/{lead_id}/resend", response_model=LeadActionResult)
def resend_onboarding(
    lead_id: str,
    body: Optional[LeadResend] = None,
    db: Session = Depends(get_db),
):
    """Issue a fresh portal link and email it again."""
    try:
        outcome = lead_review.resend_onboarding(
            db,
            lead_id=lead_id,
            revoke_previous=body.revoke_previous if body else None,
        )
    except SpotlightError as e:
        raise http_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        raise datastore_error(e, "resending onboarding")
    return _action_result(outcome)
