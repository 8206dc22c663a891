# spotlight/core/exceptions.py
"""
Domain errors raised by the Spotlight services.

Endpoints translate these into HTTP responses; services never build
HTTPException themselves.
"""


class SpotlightError(Exception):
    """Base class for every Spotlight domain error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PricingValidationError(SpotlightError):
    """The requested package/duration/add-on combination cannot be priced."""


class ApplicationValidationError(SpotlightError):
    """A sponsorship application is missing or has invalid fields."""


class QuoteNotFoundError(SpotlightError):
    pass


class QuoteExpiredError(SpotlightError):
    """The quote exists but its validity window has elapsed."""


class PortalAccessError(SpotlightError):
    """
    Raised for unknown, inactive and expired portal tokens alike, so callers
    cannot tell which tokens exist.
    """

    def __init__(self, message: str = "Invalid or expired link"):
        super().__init__(message)


class CampaignNotFoundError(SpotlightError):
    pass


class LeadNotFoundError(SpotlightError):
    pass


class LeadStateError(SpotlightError):
    """The requested lead status transition is not allowed."""
