# spotlight/api/v1/endpoints/applications.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotlight.api.deps import get_db, get_raw_json_body
from spotlight.api.errors import datastore_error, http_error
from spotlight.core.exceptions import SpotlightError
from spotlight.core.limiter import limiter, public_write_limit
from spotlight.schemas.lead import ApplicationCreate, ApplicationCreated
from spotlight.services.applications import create_application

router = APIRouter(tags=["Spotlight Applications"])


@router.post(
    "/spotlight/applications",
    response_model=ApplicationCreated,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(public_write_limit)
def submit_application(
    request: Request,
    application_in: ApplicationCreate,
    raw_body: Dict[str, Any] = Depends(get_raw_json_body),
    db: Session = Depends(get_db),
):
    """
    Submit a sponsorship application, from a quote or a standalone selection.

    **Errors**:
    - 400: Invalid selection, missing acknowledgements, bad creative URL
    - 404: Quote not found
    - 410: Quote expired
    - 429: Too many submissions from this address
    """
    try:
        lead = create_application(db, obj_in=application_in, raw_payload=raw_body)
    except SpotlightError as e:
        raise http_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        raise datastore_error(e, "submitting an application")

    return ApplicationCreated(
        lead_id=lead.id,
        status=lead.status,
        total_cents=lead.total_cents,
        promo_applied=lead.promo_applied,
        promo_code=lead.promo_code,
        currency=lead.currency,
    )
