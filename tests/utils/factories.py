from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.models.campaign import Campaign
from spotlight.models.lead import Lead
from spotlight.models.promo_code import PromoCode
from spotlight.schemas.campaign import CampaignUpsert, CreativeIn
from spotlight.schemas.lead import ApplicationCreate
from spotlight.schemas.promo import PromoCodeCreate
from spotlight.services.applications import create_application


def create_test_campaign(
    db: Session,
    *,
    placements: Optional[list] = None,
    priority: int = 0,
    freq_cap: int = 0,
    is_active: bool = True,
    with_creatives: bool = True,
    **overrides,
) -> Campaign:
    """
    Creates a campaign that is live right now on the given placements.
    """
    now = datetime.now(timezone.utc)
    placements = placements or ["events_banner"]
    campaign_in = CampaignUpsert(
        name=overrides.pop("name", "Test Campaign"),
        sponsor_name=overrides.pop("sponsor_name", "Chai Co."),
        click_url=overrides.pop("click_url", "https://chaico.example.com/offer"),
        placements=placements,
        start_at=overrides.pop("start_at", now - timedelta(days=1)),
        end_at=overrides.pop("end_at", now + timedelta(days=7)),
        priority=priority,
        is_active=is_active,
        freq_cap_per_user_per_day=freq_cap,
        creatives=[
            CreativeIn(
                placement=placement,
                image_desktop_url=f"https://cdn.example.com/{placement}.png",
                alt="Chai Co. banner",
            )
            for placement in placements
        ] if with_creatives else None,
        **overrides,
    )
    return crud.campaign.upsert(db, obj_in=campaign_in)


def create_test_promo(db: Session, **overrides) -> PromoCode:
    now = datetime.now(timezone.utc)
    promo_in = PromoCodeCreate(
        code=overrides.pop("code", "LAUNCH20"),
        discount_type=overrides.pop("discount_type", "percentage"),
        discount_value=overrides.pop("discount_value", 20),
        valid_from=overrides.pop("valid_from", now - timedelta(days=1)),
        valid_to=overrides.pop("valid_to", now + timedelta(days=30)),
        **overrides,
    )
    return crud.promo_code.create(db, obj_in=promo_in)


def application_payload(**overrides) -> dict:
    """A standalone application body, as the web client sends it (camelCase)."""
    payload = {
        "packageCode": "events_spotlight",
        "duration": "weekly",
        "numWeeks": 1,
        "businessName": "Chai Co.",
        "contactName": "Priya Sharma",
        "email": "Priya@ChaiCo.example.com",
        "website": "https://chaico.example.com",
        "objective": "Launch our new store",
        "desktopAssetUrl": "https://cdn.example.com/banner.png",
    }
    payload.update(overrides)
    return payload


def create_test_lead(db: Session, now: Optional[datetime] = None, **overrides) -> Lead:
    # Outside September 2025 so the launch promo never applies
    now = now or datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)
    application_in = ApplicationCreate(**application_payload(**overrides))
    return create_application(db, obj_in=application_in, now=now)
