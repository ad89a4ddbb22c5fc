from datetime import datetime, timezone
from typing import Any, Dict, Optional
from jose import JWTError, ExpiredSignatureError, jwt
import logging

logger = logging.getLogger(__name__)


def decode_token(
    token: str,
    secret: str,
    *,
    algorithm: str = "HS256",
    audience: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Verify a provider-issued access token. Returns None if invalid or expired."""
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except ExpiredSignatureError:
        logger.debug("Access token expired")
        return None
    except JWTError as e:
        logger.warning(f"Rejected access token: {str(e)}")
        return None


def token_expiry(token: str) -> Optional[datetime]:
    """Read the exp claim without verifying the signature"""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)
