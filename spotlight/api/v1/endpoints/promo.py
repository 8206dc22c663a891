# spotlight/api/v1/endpoints/promo.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from spotlight.api.deps import get_db
from spotlight.schemas.promo import PromoValidateRequest, PromoValidateResponse
from spotlight.services.promo import preview_promo

router = APIRouter(tags=["Spotlight Promo Codes"])


@router.post("/spotlight/promo/validate", response_model=PromoValidateResponse)
def validate_promo_code(body: PromoValidateRequest, db: Session = Depends(get_db)):
    """
    Preview what a promo code would take off. Does not use up the code.

    Rejections come back as `valid: false` with the reason in `message`.
    """
    return preview_promo(db, body)
