from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core import deps
from app.db.database import get_db

router = APIRouter()

@router.get("/", response_model=List[schemas.SafetyContact])
def get_safety_contacts(
    db: Session = Depends(get_db),
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Get all safety contacts for current user, primary first"""
    return crud.safety_contact.get_by_user(db, user_id=current_user.id)

@router.post("/", response_model=schemas.SafetyContact, status_code=status.HTTP_201_CREATED)
def create_safety_contact(
    *,
    db: Session = Depends(get_db),
    contact_in: schemas.SafetyContactCreate,
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Create new safety contact"""
    return crud.safety_contact.create_with_user(
        db, obj_in=contact_in, user_id=current_user.id
    )

@router.post("/{contact_id}/primary", response_model=schemas.SafetyContact)
def set_primary_safety_contact(
    *,
    db: Session = Depends(get_db),
    contact_id: int,
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Make this contact the one escalated to"""
    contact = crud.safety_contact.set_primary(
        db, contact_id=contact_id, user_id=current_user.id
    )
    if not contact:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Safety contact not found"
        )
    return contact

@router.delete("/{contact_id}")
def delete_safety_contact(
    *,
    db: Session = Depends(get_db),
    contact_id: int,
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Delete safety contact"""
    contact = crud.safety_contact.remove_for_user(
        db, contact_id=contact_id, user_id=current_user.id
    )
    if not contact:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Safety contact not found"
        )
    return {"message": "Safety contact deleted successfully"}
