from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from app import crud
from app.core.config import settings
from app.core.session import resolve_session
from app.db.database import get_db
from app.models.user_profile import UserProfile
from app.schemas.auth import AuthUser
from app.services.auth_provider import AuthProviderClient
from app.services.call_relay import CallRelayService


def get_auth_provider(request: Request) -> Optional[AuthProviderClient]:
    return getattr(request.app.state, "auth_provider", None)


def get_call_relay() -> CallRelayService:
    return CallRelayService.from_settings(settings)


def get_optional_user(
    request: Request,
    provider: Optional[AuthProviderClient] = Depends(get_auth_provider),
) -> Optional[AuthUser]:
    # The route guard has usually resolved the session already
    state = getattr(request.state, "session", None)
    if state is not None:
        return state.user
    if provider is None:
        return None
    return resolve_session(provider, request).user


def get_current_user(
    user: Optional[AuthUser] = Depends(get_optional_user),
) -> AuthUser:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_profile(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
) -> UserProfile:
    profile = crud.user_profile.get_by_user(db, user_id=current_user.id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found, complete onboarding first"
        )
    return profile
