# File: app/schemas/__init__.py
from .auth import AuthUser, AuthSession, OtpRequest, OtpVerify
from .user_profile import (
    UserProfile, UserProfileBase, UserProfileCreate, UserProfileUpdate, SAFE_WORD_OPTIONS
)
from .safety_contact import SafetyContact, SafetyContactBase, SafetyContactCreate
from .scheduled_call import ScheduledCall, ScheduledCallCreate
from .trigger_call import TriggerCallRequest, TriggerCallResponse

__all__ = [
    "AuthUser", "AuthSession", "OtpRequest", "OtpVerify",
    "UserProfile", "UserProfileBase", "UserProfileCreate", "UserProfileUpdate", "SAFE_WORD_OPTIONS",
    "SafetyContact", "SafetyContactBase", "SafetyContactCreate",
    "ScheduledCall", "ScheduledCallCreate",
    "TriggerCallRequest", "TriggerCallResponse",
]
