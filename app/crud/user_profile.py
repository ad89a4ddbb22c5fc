from typing import Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.user_profile import UserProfile
from app.schemas.user_profile import UserProfileCreate, UserProfileUpdate

class CRUDUserProfile(CRUDBase[UserProfile, UserProfileCreate, UserProfileUpdate]):
    def get_by_user(self, db: Session, *, user_id: str) -> Optional[UserProfile]:
        return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()

    def exists_for_user(self, db: Session, *, user_id: str) -> bool:
        return db.query(UserProfile.id).filter(UserProfile.user_id == user_id).first() is not None

    def create_with_user(self, db: Session, *, obj_in: UserProfileCreate, user_id: str) -> UserProfile:
        if self.exists_for_user(db, user_id=user_id):
            raise ValueError("Profile already exists for this user")

        db_obj = UserProfile(**obj_in.model_dump(), user_id=user_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

user_profile = CRUDUserProfile(UserProfile)
