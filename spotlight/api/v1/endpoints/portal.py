# spotlight/api/v1/endpoints/portal.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotlight.api.deps import get_db
from spotlight.api.errors import datastore_error, http_error
from spotlight.core.exceptions import SpotlightError
from spotlight.schemas.portal import PortalAnalytics
from spotlight.services.portal import export_portal_csv, get_portal_analytics

router = APIRouter(tags=["Sponsor Portal"])


@router.get("/spotlight/portal/{token}", response_model=PortalAnalytics)
def read_portal(token: str, db: Session = Depends(get_db)):
    """
    Campaign analytics for the holder of a portal link.

    Unknown, revoked and expired links all return the same 404.
    `benchmark` is omitted when there are no comparable campaigns.
    """
    try:
        analytics = get_portal_analytics(db, token=token)
    except SpotlightError as e:
        raise http_error(e)
    except SQLAlchemyError as e:
        raise datastore_error(e, "loading portal analytics")

    exclude = {"benchmark"} if analytics.benchmark is None else None
    return JSONResponse(content=analytics.model_dump(mode="json", exclude=exclude))


@router.get("/spotlight/portal/{token}/export.csv")
def export_portal(token: str, db: Session = Depends(get_db)):
    """
    The portal's daily series as CSV over the same 30-day window, split into
    one row per date and placement.
    """
    try:
        output, filename = export_portal_csv(db, token=token)
    except SpotlightError as e:
        raise http_error(e)
    except SQLAlchemyError as e:
        raise datastore_error(e, "exporting portal CSV")

    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
