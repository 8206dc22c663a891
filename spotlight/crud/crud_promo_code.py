# spotlight/crud/crud_promo_code.py
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from spotlight.crud.base import CRUDBase
from spotlight.models.promo_code import PromoCode, PromoRedemption
from spotlight.schemas.promo import PromoCodeCreate, PromoCodeUpdate
from spotlight.utils.timeutils import utcnow


class CRUDPromoCode(CRUDBase[PromoCode, PromoCodeCreate, PromoCodeUpdate]):
    """CRUD operations for PromoCode model."""

    def get_by_code(self, db: Session, *, code: str) -> Optional[PromoCode]:
        """Get a promo code by its code string (case-insensitive)."""
        return db.query(self.model).filter(self.model.code == code.strip().upper()).first()

    def get_filtered(self, db: Session, *, include_inactive: bool = False) -> List[PromoCode]:
        query = db.query(self.model)
        if not include_inactive:
            query = query.filter(self.model.is_active == True)
        return query.order_by(self.model.created_at.desc()).all()

    def create(self, db: Session, *, obj_in: PromoCodeCreate) -> PromoCode:
        data = obj_in.model_dump()
        data["code"] = data["code"].upper()
        data["discount_type"] = obj_in.discount_type.value
        db_obj = self.model(**data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def deactivate(self, db: Session, *, db_obj: PromoCode) -> PromoCode:
        db_obj.is_active = False
        db_obj.updated_at = utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def try_increment_usage(self, db: Session, *, promo_code_id: str) -> bool:
        """
        Claim one use of a promo code with a conditional UPDATE.

        Zero rows updated means the code was deactivated or its cap was
        reached by a concurrent submission. Does not commit: the caller
        commits together with the lead that consumes the use.
        """
        result = db.execute(
            update(self.model)
            .where(
                self.model.id == promo_code_id,
                self.model.is_active == True,
                or_(
                    self.model.max_uses == None,
                    self.model.current_uses < self.model.max_uses,
                ),
            )
            .values(current_uses=self.model.current_uses + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class CRUDPromoRedemption(CRUDBase[PromoRedemption, PromoCodeCreate, PromoCodeUpdate]):
    def has_redeemed(self, db: Session, *, code: str, email: str) -> bool:
        return (
            db.query(self.model.id)
            .filter(
                self.model.promo_code == code.upper(),
                self.model.sponsor_email == email.strip().lower(),
            )
            .first()
            is not None
        )

    def add(
        self,
        db: Session,
        *,
        code: str,
        sponsor_email: str,
        discount_cents: int,
        promo_code_id: Optional[str] = None,
        lead_id: Optional[str] = None,
        once_per_email: bool = False,
        notes: Optional[str] = None,
    ) -> PromoRedemption:
        """
        Add a ledger row and flush it. Does not commit.

        With `once_per_email` the row carries a unique redemption key, so a
        second redemption by the same email fails with IntegrityError.
        """
        email = sponsor_email.strip().lower()
        db_obj = self.model(
            promo_code=code.upper(),
            promo_code_id=promo_code_id,
            sponsor_email=email,
            lead_id=lead_id,
            applied_discount_cents=discount_cents,
            redemption_key=f"{code.upper()}:{email}" if once_per_email else None,
            notes=notes,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_for_code(self, db: Session, *, promo_code_id: str) -> List[PromoRedemption]:
        return (
            db.query(self.model)
            .filter(self.model.promo_code_id == promo_code_id)
            .order_by(self.model.created_at.desc())
            .all()
        )


# Create singleton instances
promo_code = CRUDPromoCode(PromoCode)
promo_redemption = CRUDPromoRedemption(PromoRedemption)
