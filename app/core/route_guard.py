# File: app/core/route_guard.py
"""
Route guard applied ahead of every page render.

Resolves the session (refreshing tokens when needed) and redirects between
/login, /onboarding and /dashboard depending on whether the caller is signed
in and has finished onboarding.
"""
import enum
import logging
from typing import Callable, Optional
from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from app import crud
from app.core.session import SessionState, apply_session_state, resolve_session
from app.db import database
from app.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

AUTH_PATH_PREFIXES = ("/login", "/auth")
ONBOARDING_PATH_PREFIX = "/onboarding"

# Session is still resolved for these, but they are never redirected
UNGUARDED_PATH_PREFIXES = ("/api", "/docs", "/redoc", "/openapi.json", "/health", "/static", "/favicon.ico")


class RouteDecision(enum.Enum):
    PASS = None
    LOGIN = "/login"
    DASHBOARD = "/dashboard"
    ONBOARDING = "/onboarding"


def is_auth_path(path: str) -> bool:
    return path.startswith(AUTH_PATH_PREFIXES)


def is_onboarding_path(path: str) -> bool:
    return path.startswith(ONBOARDING_PATH_PREFIX)


def is_guarded_path(path: str) -> bool:
    return not path.startswith(UNGUARDED_PATH_PREFIXES)


def lookup_profile(user_id: str) -> Optional[bool]:
    """True/False when the profile lookup succeeds, None when it fails"""
    db = database.SessionLocal()
    try:
        return crud.user_profile.exists_for_user(db, user_id=user_id)
    except SQLAlchemyError as e:
        logger.warning(f"Profile lookup failed for {user_id}: {str(e)}")
        return None
    finally:
        db.close()


def decide_route(
    path: str,
    user: Optional[AuthUser],
    profile_lookup: Callable[[str], Optional[bool]] = lookup_profile,
) -> RouteDecision:
    auth_path = is_auth_path(path)
    onboarding_path = is_onboarding_path(path)

    if user is None:
        return RouteDecision.PASS if auth_path else RouteDecision.LOGIN

    if auth_path:
        return RouteDecision.DASHBOARD

    if onboarding_path:
        if profile_lookup(user.id):
            return RouteDecision.DASHBOARD
        return RouteDecision.PASS

    # A failed lookup (None) must not send the user to onboarding
    if profile_lookup(user.id) is False:
        return RouteDecision.ONBOARDING

    return RouteDecision.PASS


async def route_guard(request: Request, call_next: Callable) -> Response:
    provider = getattr(request.app.state, "auth_provider", None)
    if provider is None:
        # Auth provider not configured: let every request through
        logger.warning(f"⚠️ Auth provider not configured, route guard disabled for {request.url.path}")
        return await call_next(request)

    state: SessionState = await run_in_threadpool(resolve_session, provider, request)
    request.state.session = state

    path = request.url.path
    decision = RouteDecision.PASS
    if is_guarded_path(path):
        decision = await run_in_threadpool(decide_route, path, state.user, lookup_profile)

    if decision is not RouteDecision.PASS:
        logger.info(f"↪️ {path} -> {decision.value}")
        response = RedirectResponse(decision.value, status_code=status.HTTP_303_SEE_OTHER)
        apply_session_state(response, state)
        return response

    response = await call_next(request)
    # Handlers that end the session (sign out) reset request.state.session
    state = getattr(request.state, "session", None)
    if state is not None:
        apply_session_state(response, state)
    return response
