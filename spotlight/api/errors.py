# spotlight/api/errors.py
"""
Translation of domain errors into HTTP responses.
"""

import logging

from fastapi import HTTPException, status

from spotlight.core.exceptions import (
    ApplicationValidationError,
    CampaignNotFoundError,
    LeadNotFoundError,
    LeadStateError,
    PortalAccessError,
    PricingValidationError,
    QuoteExpiredError,
    QuoteNotFoundError,
    SpotlightError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (PricingValidationError, status.HTTP_400_BAD_REQUEST),
    (ApplicationValidationError, status.HTTP_400_BAD_REQUEST),
    (QuoteExpiredError, status.HTTP_410_GONE),
    (QuoteNotFoundError, status.HTTP_404_NOT_FOUND),
    (PortalAccessError, status.HTTP_404_NOT_FOUND),
    (CampaignNotFoundError, status.HTTP_404_NOT_FOUND),
    (LeadNotFoundError, status.HTTP_404_NOT_FOUND),
    (LeadStateError, status.HTTP_409_CONFLICT),
)


def http_error(exc: SpotlightError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)


def datastore_error(exc: Exception, action: str) -> HTTPException:
    """Log a database failure and hide its details from the caller."""
    logger.error(f"Database error while {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
