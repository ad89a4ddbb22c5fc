from typing import Optional
from pydantic import BaseModel, validator
from datetime import datetime

class SafetyContactBase(BaseModel):
    name: str
    phone: str
    relationship: str

class SafetyContactCreate(SafetyContactBase):
    @validator('name', 'phone', 'relationship')
    def strip_required(cls, v):
        v = (v or '').strip()
        if not v:
            raise ValueError('must not be blank')
        return v

class SafetyContact(SafetyContactBase):
    id: int
    user_id: str
    is_primary: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
