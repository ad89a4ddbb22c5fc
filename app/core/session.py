# File: app/core/session.py
from typing import Optional
from fastapi import Request, Response
from app.core.config import settings
from app.schemas.auth import AuthSession, AuthUser
from app.services.auth_provider import AuthProviderClient, AuthProviderError
import logging

logger = logging.getLogger(__name__)


class SessionState:
    """Outcome of reading the session cookies for one request"""

    def __init__(
        self,
        user: Optional[AuthUser] = None,
        refreshed: Optional[AuthSession] = None,
        clear_cookies: bool = False,
    ):
        self.user = user
        self.refreshed = refreshed
        self.clear_cookies = clear_cookies


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def resolve_session(provider: AuthProviderClient, request: Request) -> SessionState:
    """
    Resolve the caller from the access token cookie (or a Bearer header),
    falling back to the refresh token when the access token is no longer valid.
    """
    access_token = request.cookies.get(settings.ACCESS_TOKEN_COOKIE) or _bearer_token(request)
    refresh_token = request.cookies.get(settings.REFRESH_TOKEN_COOKIE)

    if access_token:
        try:
            user = provider.get_user(access_token)
        except AuthProviderError as e:
            logger.error(f"Could not verify session: {str(e)}")
            return SessionState()
        if user:
            return SessionState(user=user)

    if refresh_token:
        try:
            session = provider.refresh(refresh_token)
        except AuthProviderError as e:
            # Only drop the cookies when the provider refused the token
            return SessionState(clear_cookies=e.is_rejection)
        return SessionState(user=session.user, refreshed=session)

    return SessionState(clear_cookies=bool(request.cookies.get(settings.ACCESS_TOKEN_COOKIE)))


def set_session_cookies(response: Response, session: AuthSession) -> None:
    response.set_cookie(
        settings.ACCESS_TOKEN_COOKIE,
        session.access_token,
        max_age=settings.REFRESH_TOKEN_MAX_AGE,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    if session.refresh_token:
        response.set_cookie(
            settings.REFRESH_TOKEN_COOKIE,
            session.refresh_token,
            max_age=settings.REFRESH_TOKEN_MAX_AGE,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
        )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE)
    response.delete_cookie(settings.REFRESH_TOKEN_COOKIE)


def apply_session_state(response: Response, state: SessionState) -> None:
    if state.refreshed:
        set_session_cookies(response, state.refreshed)
    elif state.clear_cookies:
        clear_session_cookies(response)
