from typing import List, Optional
from sqlalchemy import case
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.safety_contact import SafetyContact
from app.schemas.safety_contact import SafetyContactCreate

class CRUDSafetyContact(CRUDBase[SafetyContact, SafetyContactCreate, SafetyContactCreate]):
    def get_by_user(self, db: Session, *, user_id: str) -> List[SafetyContact]:
        """Primary contact first, then in the order they were added"""
        return db.query(SafetyContact).filter(
            SafetyContact.user_id == user_id
        ).order_by(SafetyContact.is_primary.desc(), SafetyContact.id).all()

    def get_for_user(self, db: Session, *, contact_id: int, user_id: str) -> Optional[SafetyContact]:
        return db.query(SafetyContact).filter(
            SafetyContact.id == contact_id,
            SafetyContact.user_id == user_id
        ).first()

    def get_primary_contact(self, db: Session, *, user_id: str) -> Optional[SafetyContact]:
        return db.query(SafetyContact).filter(
            SafetyContact.user_id == user_id,
            SafetyContact.is_primary.is_(True)
        ).first()

    def create_with_user(self, db: Session, *, obj_in: SafetyContactCreate, user_id: str) -> SafetyContact:
        # The first contact a user adds becomes their primary contact
        has_contacts = db.query(SafetyContact.id).filter(
            SafetyContact.user_id == user_id
        ).first() is not None

        db_obj = SafetyContact(
            **obj_in.model_dump(),
            user_id=user_id,
            is_primary=not has_contacts
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove_for_user(self, db: Session, *, contact_id: int, user_id: str) -> Optional[SafetyContact]:
        contact = self.get_for_user(db, contact_id=contact_id, user_id=user_id)
        if contact:
            db.delete(contact)
            db.commit()
        return contact

    def set_primary(self, db: Session, *, contact_id: int, user_id: str) -> Optional[SafetyContact]:
        """
        Make one contact the user's primary contact.

        A single UPDATE over all of the user's rows sets the flag on the target
        and clears it everywhere else, so no reader ever sees zero or two primaries.
        Returns None when the contact does not exist or belongs to someone else.
        """
        contact = self.get_for_user(db, contact_id=contact_id, user_id=user_id)
        if not contact:
            return None

        db.query(SafetyContact).filter(
            SafetyContact.user_id == user_id
        ).update(
            {SafetyContact.is_primary: case((SafetyContact.id == contact_id, True), else_=False)},
            synchronize_session=False
        )
        db.commit()
        db.refresh(contact)
        return contact

safety_contact = CRUDSafetyContact(SafetyContact)
