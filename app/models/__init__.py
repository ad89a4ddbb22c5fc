from .base import BaseModel
from .user_profile import UserProfile
from .safety_contact import SafetyContact
from .scheduled_call import ScheduledCall, CallStatus

__all__ = ["BaseModel", "UserProfile", "SafetyContact", "ScheduledCall", "CallStatus"]
