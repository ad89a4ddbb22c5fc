from typing import Optional
from pydantic import BaseModel, validator
from datetime import datetime

SAFE_WORD_OPTIONS = [
    "Pineapple",
    "Umbrella",
    "Butterfly",
    "Sunshine",
    "Coconut",
    "Rainbow",
    "Starfish",
    "Lavender",
]

class UserProfileBase(BaseModel):
    first_name: str
    phone: str
    safe_word: str

class UserProfileCreate(UserProfileBase):
    @validator('first_name', 'phone', 'safe_word')
    def strip_required(cls, v):
        v = (v or '').strip()
        if not v:
            raise ValueError('must not be blank')
        return v

class UserProfileUpdate(BaseModel):
    """Only phone and safe word are editable after onboarding"""
    phone: Optional[str] = None
    safe_word: Optional[str] = None

    @validator('phone', 'safe_word')
    def strip_optional(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

class UserProfile(UserProfileBase):
    id: int
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
