from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.models.base import BaseModel

class UserProfile(BaseModel):
    __tablename__ = "user_profiles"

    # Identity issued by the auth provider (token "sub" claim)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=False)
    phone = Column(String(32), nullable=False)
    safe_word = Column(String(100), nullable=False)  # spoken on the check-in call
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
