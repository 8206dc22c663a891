"""
Click redirector: tracking-parameter merge and best-effort click logging.
"""

import logging
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.crud.crud_metrics import CLICK

logger = logging.getLogger(__name__)

UTM_SOURCE = "jugnu"
UTM_MEDIUM = "spotlight"


def merge_utm_params(url: str, campaign_id: str, utm_content: Optional[str] = None) -> str:
    """
    Add utm_source/utm_medium/utm_campaign (and utm_content when supplied),
    each only if the destination does not already carry it. Existing query
    parameters, their order and the fragment are preserved.
    """
    parsed = urlparse(url)
    params = parse_qsl(parsed.query, keep_blank_values=True)
    present = {key for key, _ in params}

    additions = [
        ("utm_source", UTM_SOURCE),
        ("utm_medium", UTM_MEDIUM),
        ("utm_campaign", campaign_id),
    ]
    if utm_content:
        additions.append(("utm_content", utm_content))

    for key, value in additions:
        if key not in present:
            params.append((key, value))

    return urlunparse(parsed._replace(query=urlencode(params)))


def log_redirect_click(db: Session, *, campaign_id: str) -> bool:
    """
    Count a click on the campaign's primary placement for today.

    Never raises: a failed write is logged and the redirect goes ahead.
    Unknown campaigns are skipped since the metrics row needs a campaign.
    """
    try:
        campaign = crud.campaign.get(db, campaign_id)
        if campaign is None:
            logger.warning(
                f"Redirect click for unknown campaign {campaign_id}, not recorded"
            )
            return False
        crud.metrics.track_event(
            db,
            campaign_id=campaign.id,
            event=CLICK,
            placement=campaign.primary_placement,
        )
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to log redirect click for campaign {campaign_id}: {e}")
        return False
