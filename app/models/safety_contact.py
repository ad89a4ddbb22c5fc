from sqlalchemy import Column, String, Boolean
from app.models.base import BaseModel

class SafetyContact(BaseModel):
    __tablename__ = "safety_contacts"

    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    relationship = Column(String(100), nullable=False)  # e.g., "Friend", "Family", "Partner"
    is_primary = Column(Boolean, nullable=False, default=False)
