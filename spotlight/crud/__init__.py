# spotlight/crud/__init__.py

from .crud_campaign import campaign
from .crud_lead import lead
from .crud_metrics import metrics
from .crud_portal_token import portal_token
from .crud_promo_code import promo_code, promo_redemption
from .crud_quote import quote
