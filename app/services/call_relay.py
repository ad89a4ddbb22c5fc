"""
Guardian Call Relay
Forwards safety check-in requests to the external call-automation webhook
"""

import requests
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app import crud
from app.core.config import Settings
from app.models.safety_contact import SafetyContact
from app.models.scheduled_call import ScheduledCall
from app.models.user_profile import UserProfile
from app.schemas.trigger_call import TriggerCallRequest
import logging

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """The webhook could not be reached or answered with a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def details(self) -> str:
        if self.status_code is None:
            return str(self)
        return f"{self} (upstream status {self.status_code}: {self.body or ''})"


def _mask_phone(phone: str) -> str:
    return f"***{phone[-4:]}" if len(phone) > 4 else "***"


class CallRelayService:
    def __init__(self, webhook_url: str, payload_shape: str = "full", timeout: int = 30):
        self.webhook_url = webhook_url
        self.payload_shape = payload_shape
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "CallRelayService":
        return cls(
            webhook_url=settings.GUARDIAN_WEBHOOK_URL,
            payload_shape=settings.WEBHOOK_PAYLOAD_SHAPE,
            timeout=settings.WEBHOOK_TIMEOUT,
        )

    def forward(self, call: TriggerCallRequest) -> None:
        """Single best-effort POST to the webhook; no retries"""
        payload = call.webhook_payload(self.payload_shape)
        masked = _mask_phone(call.phone or "")
        logger.info(f"📞 Forwarding safety call for {masked} ({sorted(payload)})")

        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"❌ Guardian webhook unreachable: {str(e)}")
            raise RelayError(f"Guardian webhook unreachable: {str(e)}") from e

        if not response.ok:
            logger.error(f"❌ Guardian webhook returned {response.status_code}: {response.text[:500]}")
            raise RelayError(
                "Failed to trigger guardian alert",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info(f"✅ Guardian webhook accepted call for {masked}")


def trigger_safety_call(
    db: Session,
    relay: CallRelayService,
    *,
    user_id: str,
    call: TriggerCallRequest,
) -> Optional[ScheduledCall]:
    """
    Validate and forward one call request. Immediate calls are logged as a
    completed scheduled call; the log row is written only after the webhook
    accepted the call and is not rolled back into the webhook result.
    """
    if not (call.phone or "").strip():
        raise ValueError("Phone number required")

    relay.forward(call)

    if not call.immediate:
        return None

    try:
        return crud.scheduled_call.log_completed(
            db, user_id=user_id, called_at=datetime.now(timezone.utc)
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Call for user {user_id} was placed but could not be logged")
        return None


def build_check_in_call(
    profile: UserProfile, primary_contact: Optional[SafetyContact] = None
) -> TriggerCallRequest:
    """Immediate check-in call for the signed-in user, escalating to their primary contact"""
    return TriggerCallRequest(
        phone=profile.phone,
        name=profile.first_name,
        code_word=profile.safe_word,
        emergency_name=primary_contact.name if primary_contact else None,
        emergency_phone=primary_contact.phone if primary_contact else None,
        immediate=True,
    )
