# spotlight/api/v1/endpoints/redirect.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from spotlight.api.deps import get_db
from spotlight.services.redirect import log_redirect_click, merge_utm_params
from spotlight.utils.validators import validate_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Click Redirect"])


@router.get("/r/{campaign_id}", status_code=status.HTTP_302_FOUND)
def redirect_click(
    campaign_id: str,
    to: str = Query(..., description="URL-encoded destination"),
    utm_content: Optional[str] = Query(None, max_length=200),
    db: Session = Depends(get_db),
):
    """
    Record a click and send the browser on with tracking parameters merged in.
    Existing utm_* values on the destination are never overwritten.
    """
    valid, error = validate_url(to, "to")
    if not valid:
        logger.warning(f"Rejected redirect for campaign {campaign_id}: {error}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    destination = merge_utm_params(to, campaign_id, utm_content)
    log_redirect_click(db, campaign_id=campaign_id)

    return RedirectResponse(url=destination, status_code=status.HTTP_302_FOUND)
