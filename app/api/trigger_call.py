from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from app.core.deps import get_call_relay, get_optional_user
from app.db.database import get_db
from app.schemas.auth import AuthUser
from app.schemas.trigger_call import TriggerCallRequest, TriggerCallResponse
from app.services.call_relay import CallRelayService, RelayError, trigger_safety_call
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/trigger-call", response_model=TriggerCallResponse)
async def trigger_call(
    request: Request,
    db: Session = Depends(get_db),
    relay: CallRelayService = Depends(get_call_relay),
    current_user: Optional[AuthUser] = Depends(get_optional_user),
):
    """
    Forward a safety check-in call to the guardian webhook.
    Supports:
    - Immediate calls (`immediate: true`), logged as a completed scheduled call
    - Forwarding a `scheduled_time` for the call automation to honour
    """
    if current_user is None:
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})
    if not isinstance(body, dict):
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        call = TriggerCallRequest(**body)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": str(e)}
        )

    if not (call.phone or "").strip():
        return JSONResponse(status_code=400, content={"error": "Phone number required"})

    try:
        # Webhook POST and log write block, keep them off the event loop
        await run_in_threadpool(
            trigger_safety_call, db, relay, user_id=current_user.id, call=call
        )
    except RelayError as e:
        logger.error(f"Error triggering call for {current_user.id}: {e.details}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to trigger call", "details": e.details}
        )
    except Exception as e:
        logger.exception(f"Error triggering call for {current_user.id}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to trigger call", "details": str(e)}
        )

    return TriggerCallResponse(success=True)
