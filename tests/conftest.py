import os

# Configure before anything under app/ is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_URL"] = "http://auth.test"
os.environ["AUTH_ANON_KEY"] = "anon-test-key"
os.environ["AUTH_JWT_SECRET"] = "test-jwt-secret"
os.environ["GUARDIAN_WEBHOOK_URL"] = "http://webhook.test/guardian-alert"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from app import crud, schemas
from app.core.config import settings
from app.db.database import Base, SessionLocal, engine
from app.main import app
from app.schemas.auth import AuthSession, AuthUser
from app.services.auth_provider import AuthProviderError

ALICE = AuthUser(id="user-alice", email="alice@example.com")
BOB = AuthUser(id="user-bob", email="bob@example.com")


class FakeAuthProvider:
    """In-memory stand-in for the hosted auth provider"""

    def __init__(self):
        self.access_tokens: Dict[str, AuthUser] = {}
        self.refresh_tokens: Dict[str, AuthSession] = {}
        self.codes: Dict[str, str] = {}
        self.sent_codes: List[str] = []
        self.signed_out: List[str] = []

    def issue(self, user: AuthUser, access_token: str, refresh_token: Optional[str] = None) -> AuthSession:
        self.access_tokens[access_token] = user
        session = AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
            user=user,
        )
        return session

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        return self.access_tokens.get(access_token)

    def refresh(self, refresh_token: str) -> AuthSession:
        if refresh_token not in self.refresh_tokens:
            raise AuthProviderError("Invalid Refresh Token", status_code=400)
        return self.refresh_tokens.pop(refresh_token)

    def send_otp(self, email: str) -> None:
        self.sent_codes.append(email)

    def verify_otp(self, email: str, code: str) -> AuthSession:
        if self.codes.get(email) != code:
            raise AuthProviderError("Token has expired or is invalid", status_code=403)
        local_part = email.split("@")[0]
        user = AuthUser(id=f"user-{local_part}", email=email)
        return self.issue(user, f"token-{local_part}", f"refresh-{local_part}")

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)
        self.access_tokens.pop(access_token, None)


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_provider():
    provider = FakeAuthProvider()
    provider.issue(ALICE, "token-alice")
    provider.issue(BOB, "token-bob")
    original = app.state.auth_provider
    app.state.auth_provider = provider
    yield provider
    app.state.auth_provider = original


@pytest.fixture
def client(auth_provider):
    with_overrides = dict(app.dependency_overrides)
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides = with_overrides


@pytest.fixture
def alice_client(client):
    client.cookies.set(settings.ACCESS_TOKEN_COOKIE, "token-alice")
    return client


@pytest.fixture
def alice_profile(db):
    return crud.user_profile.create_with_user(
        db,
        obj_in=schemas.UserProfileCreate(first_name="Alice", phone="+15550100", safe_word="Pineapple"),
        user_id=ALICE.id,
    )


@pytest.fixture
def add_contact(db):
    def _add(user_id: str = ALICE.id, name: str = "Sam", phone: str = "+15550111", relationship: str = "Friend"):
        return crud.safety_contact.create_with_user(
            db,
            obj_in=schemas.SafetyContactCreate(name=name, phone=phone, relationship=relationship),
            user_id=user_id,
        )
    return _add


def webhook_response(status_code: int = 200, text: str = "ok") -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    return response


def naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
