from .user_profile import user_profile
from .safety_contact import safety_contact
from .scheduled_call import scheduled_call, CallNotPendingError

__all__ = ["user_profile", "safety_contact", "scheduled_call", "CallNotPendingError"]
