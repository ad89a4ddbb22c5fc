from typing import Optional
from pydantic import BaseModel, validator
from datetime import datetime, timezone
from app.models.scheduled_call import CallStatus

class ScheduledCallCreate(BaseModel):
    scheduled_time: datetime

    @validator('scheduled_time')
    def must_be_future(cls, v):
        # Naive values are taken as UTC
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError('Scheduled time must be in the future')
        return v

class ScheduledCall(BaseModel):
    id: int
    user_id: str
    scheduled_time: datetime
    status: CallStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True
