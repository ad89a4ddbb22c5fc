from sqlalchemy import Column, String, DateTime, Enum
from app.models.base import BaseModel
import enum

class CallStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ScheduledCall(BaseModel):
    __tablename__ = "scheduled_calls"

    user_id = Column(String(64), nullable=False, index=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        Enum(CallStatus, name="call_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CallStatus.PENDING,
    )
