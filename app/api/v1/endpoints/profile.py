# File: app/api/v1/endpoints/profile.py
from typing import Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core import deps
from app.db.database import get_db
from app.models.user_profile import UserProfile
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/me", response_model=schemas.UserProfile)
def get_my_profile(
    profile: UserProfile = Depends(deps.get_current_profile)
) -> Any:
    """Get current user's onboarding profile"""
    return profile

@router.post("/me", response_model=schemas.UserProfile, status_code=status.HTTP_201_CREATED)
def create_my_profile(
    *,
    db: Session = Depends(get_db),
    profile_in: schemas.UserProfileCreate,
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Complete onboarding by creating the profile"""
    try:
        profile = crud.user_profile.create_with_user(
            db, obj_in=profile_in, user_id=current_user.id
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    logger.info(f"Profile created for user {current_user.id}")
    return profile

@router.patch("/me", response_model=schemas.UserProfile)
def update_my_profile(
    *,
    db: Session = Depends(get_db),
    profile_in: schemas.UserProfileUpdate,
    profile: UserProfile = Depends(deps.get_current_profile)
) -> Any:
    """Update phone number and/or safe word"""
    # null means "leave unchanged"; both columns are required
    changes = profile_in.model_dump(exclude_unset=True, exclude_none=True)
    return crud.user_profile.update(db, db_obj=profile, obj_in=changes)
