# File: app/api/v1/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import profile, safety_contacts, scheduled_calls

# Create main API router
api_router = APIRouter()

api_router.include_router(
    profile.router,
    prefix="/profile",
    tags=["profile"]
)

api_router.include_router(
    safety_contacts.router,
    prefix="/safety-contacts",
    tags=["safety-contacts"]
)

api_router.include_router(
    scheduled_calls.router,
    prefix="/scheduled-calls",
    tags=["scheduled-calls"]
)
