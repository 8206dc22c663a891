# spotlight/api/v1/endpoints/quotes.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotlight import crud
from spotlight.api.deps import get_db
from spotlight.api.errors import datastore_error, http_error
from spotlight.core.exceptions import SpotlightError
from spotlight.core.limiter import limiter, public_write_limit
from spotlight.schemas.quote import QuoteCreate, QuoteResponse
from spotlight.services.quotes import create_quote

router = APIRouter(tags=["Spotlight Quotes"])


@router.post(
    "/spotlight/quotes",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(public_write_limit)
def create_quote_endpoint(
    request: Request,
    quote_in: QuoteCreate,
    db: Session = Depends(get_db),
):
    """
    Price a package selection and store it as a quote valid for 7 days.

    **Errors**:
    - 400: Unknown package/add-on, or a weekly-only package booked daily
    - 429: Too many quotes from this address
    """
    try:
        quote = create_quote(db, obj_in=quote_in)
    except SpotlightError as e:
        raise http_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        raise datastore_error(e, "creating a quote")
    return QuoteResponse.from_quote(quote)


@router.get("/spotlight/quotes/{quote_id}", response_model=QuoteResponse)
def get_quote(quote_id: str, db: Session = Depends(get_db)):
    """
    **Errors**:
    - 404: Quote does not exist
    - 410: Quote has expired
    """
    try:
        quote = crud.quote.get_valid(db, quote_id=quote_id)
    except SpotlightError as e:
        raise http_error(e)
    return QuoteResponse.from_quote(quote)
