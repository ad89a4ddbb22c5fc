from typing import Optional
from pydantic import BaseModel, EmailStr, validator
from datetime import datetime

class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None

class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: AuthUser

class OtpRequest(BaseModel):
    email: EmailStr

class OtpVerify(BaseModel):
    email: EmailStr
    code: str

    @validator('code')
    def strip_code(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v
