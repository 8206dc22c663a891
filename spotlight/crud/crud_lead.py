# spotlight/crud/crud_lead.py
from typing import List, Optional

from sqlalchemy.orm import Session

from spotlight.crud.base import CRUDBase
from spotlight.models.lead import Lead
from spotlight.schemas.lead import ApplicationCreate, LeadStatusUpdate
from spotlight.utils.timeutils import utcnow


class CRUDLead(CRUDBase[Lead, ApplicationCreate, LeadStatusUpdate]):
    def get_filtered(
        self,
        db: Session,
        *,
        status: Optional[str] = None,
        email: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Lead]:
        query = db.query(self.model)
        if status:
            query = query.filter(self.model.status == status)
        if email:
            query = query.filter(self.model.email == email.strip().lower())
        return (
            query.order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def set_status(
        self,
        db: Session,
        *,
        db_obj: Lead,
        status: str,
        admin_notes: Optional[str] = None,
        **fields,
    ) -> Lead:
        """Only review fields change after submission; everything else is frozen."""
        db_obj.status = status
        if admin_notes is not None:
            db_obj.admin_notes = admin_notes
        for field, value in fields.items():
            setattr(db_obj, field, value)
        db_obj.updated_at = utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Create singleton instance
lead = CRUDLead(Lead)
