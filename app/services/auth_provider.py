"""
Hosted Auth Provider Client
Handles one-time email codes, session refresh and token verification
"""

import requests
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from app.core.config import Settings
from app.core.security import decode_token, token_expiry
from app.schemas.auth import AuthSession, AuthUser
import logging

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rejection(self) -> bool:
        """The provider answered and refused the credentials"""
        return self.status_code is not None and 400 <= self.status_code < 500


class AuthProviderClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        jwt_secret: Optional[str] = None,
        algorithm: str = "HS256",
        audience: Optional[str] = "authenticated",
        timeout: int = 10,
    ):
        self.base_url = base_url.rstrip('/')
        self.anon_key = anon_key
        self.jwt_secret = jwt_secret
        self.algorithm = algorithm
        self.audience = audience
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["AuthProviderClient"]:
        if not settings.auth_configured:
            return None
        return cls(
            base_url=settings.AUTH_URL,
            anon_key=settings.AUTH_ANON_KEY,
            jwt_secret=settings.AUTH_JWT_SECRET,
            algorithm=settings.ALGORITHM,
            audience=settings.AUTH_JWT_AUDIENCE,
            timeout=settings.AUTH_TIMEOUT,
        )

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/auth/v1{path}"
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                params=params,
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Auth provider unreachable ({method} {path}): {str(e)}")
            raise AuthProviderError(f"Auth provider unreachable: {str(e)}") from e

        if not response.ok:
            message = self._error_message(response)
            logger.warning(f"Auth provider {method} {path} failed with {response.status_code}: {message}")
            raise AuthProviderError(message, status_code=response.status_code)

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return (
            data.get("error_description")
            or data.get("msg")
            or data.get("message")
            or data.get("error")
            or f"HTTP {response.status_code}"
        )

    def _session_from_response(self, data: Dict[str, Any]) -> AuthSession:
        access_token = data.get("access_token")
        user = data.get("user") or {}
        if not access_token or not user.get("id"):
            raise AuthProviderError("Auth provider returned an incomplete session")

        expires_at = token_expiry(access_token)
        if expires_at is None and data.get("expires_in"):
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))

        return AuthSession(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            user=AuthUser(id=user["id"], email=user.get("email")),
        )

    def send_otp(self, email: str) -> None:
        """Email a one-time sign-in code, creating the account on first use"""
        self._request("POST", "/otp", payload={"email": email, "create_user": True})
        logger.info(f"📧 Sign-in code sent to {email}")

    def verify_otp(self, email: str, code: str) -> AuthSession:
        data = self._request(
            "POST", "/verify", payload={"type": "email", "email": email, "token": code}
        )
        session = self._session_from_response(data)
        logger.info(f"✅ Signed in user {session.user.id}")
        return session

    def refresh(self, refresh_token: str) -> AuthSession:
        data = self._request(
            "POST", "/token",
            params={"grant_type": "refresh_token"},
            payload={"refresh_token": refresh_token},
        )
        session = self._session_from_response(data)
        logger.info(f"🔄 Refreshed session for user {session.user.id}")
        return session

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        """
        Return the user an access token belongs to, or None when the token is
        invalid or expired. Tokens are verified locally when the signing secret
        is configured, otherwise the provider is asked.
        """
        if self.jwt_secret:
            claims = decode_token(
                access_token,
                self.jwt_secret,
                algorithm=self.algorithm,
                audience=self.audience,
            )
            if not claims or not claims.get("sub"):
                return None
            return AuthUser(id=claims["sub"], email=claims.get("email"))

        try:
            data = self._request("GET", "/user", access_token=access_token)
        except AuthProviderError as e:
            if e.is_rejection:
                return None
            raise
        if not data.get("id"):
            return None
        return AuthUser(id=data["id"], email=data.get("email"))

    def sign_out(self, access_token: str) -> None:
        try:
            self._request("POST", "/logout", access_token=access_token)
        except AuthProviderError as e:
            # The local cookies are cleared regardless
            logger.warning(f"Sign-out was not acknowledged by the provider: {str(e)}")
