# spotlight/models/__init__.py
# Import all models so Base.metadata knows every table and SQLAlchemy can
# resolve string-based relationships. Campaign first: the others point at it.

from spotlight.db.base_class import Base
from spotlight.models.campaign import Campaign, Creative
from spotlight.models.metrics import MetricsDaily, ViewerCampaignTally, ViewerDailyTally
from spotlight.models.portal_token import PortalToken
from spotlight.models.quote import Quote
from spotlight.models.promo_code import PromoCode, PromoRedemption
from spotlight.models.lead import Lead
