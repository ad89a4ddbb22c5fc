# File: app/web/pages.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core.deps import get_auth_provider, get_call_relay, get_optional_user
from app.core.session import clear_session_cookies, set_session_cookies
from app.core.config import settings
from app.db.database import get_db
from app.services.auth_provider import AuthProviderClient, AuthProviderError
from app.services.call_relay import CallRelayService, RelayError, build_check_in_call, trigger_safety_call
from app.web import templates
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

SIGN_IN_UNAVAILABLE = "Sign-in is not configured on this server"


def redirect(path: str, *, error: Optional[str] = None, notice: Optional[str] = None) -> RedirectResponse:
    params = {k: v for k, v in (("error", error), ("notice", notice)) if v}
    url = f"{path}?{urlencode(params)}" if params else path
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def validation_message(e: ValidationError) -> str:
    first = e.errors()[0]
    field = str(first["loc"][-1]).replace("_", " ") if first.get("loc") else "value"
    return f"{field.capitalize()}: {first['msg']}"


def local_to_utc(value: str, tz_offset: Optional[str]) -> datetime:
    """
    Convert a datetime-local form value to UTC. tz_offset is the browser's
    getTimezoneOffset() in minutes; without it the value is taken as UTC.
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        minutes = int(tz_offset) if tz_offset and tz_offset.strip() else 0
        if abs(minutes) > 14 * 60:
            raise ValueError(f"Timezone offset out of range: {minutes}")
        parsed = parsed.replace(tzinfo=timezone(timedelta(minutes=-minutes)))
    return parsed.astimezone(timezone.utc)


@router.get("/")
def index():
    return redirect("/dashboard")


# ---------------------- Login ----------------------

@router.get("/login", response_class=HTMLResponse)
def login_form(error: Optional[str] = None, notice: Optional[str] = None):
    return HTMLResponse(templates.login_page(error=error, notice=notice))


@router.post("/login", response_class=HTMLResponse)
def send_login_code(
    email: str = Form(...),
    provider: Optional[AuthProviderClient] = Depends(get_auth_provider),
):
    try:
        otp = schemas.OtpRequest(email=email.strip())
    except ValidationError:
        return HTMLResponse(
            templates.login_page(email=email, error="Please enter a valid email address"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if provider is None:
        return HTMLResponse(
            templates.login_page(email=otp.email, error=SIGN_IN_UNAVAILABLE),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    try:
        provider.send_otp(otp.email)
    except AuthProviderError as e:
        return HTMLResponse(
            templates.login_page(email=otp.email, error=str(e)),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    return HTMLResponse(
        templates.login_page(email=otp.email, otp_sent=True, notice="Code sent! Check your email.")
    )


@router.post("/login/verify")
def verify_login_code(
    email: str = Form(...),
    code: str = Form(...),
    provider: Optional[AuthProviderClient] = Depends(get_auth_provider),
):
    if provider is None:
        return HTMLResponse(
            templates.login_page(email=email, error=SIGN_IN_UNAVAILABLE),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    try:
        otp = schemas.OtpVerify(email=email.strip(), code=code)
    except ValidationError:
        return HTMLResponse(
            templates.login_page(email=email, otp_sent=True, error="Please enter the code from your email"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        session = provider.verify_otp(otp.email, otp.code)
    except AuthProviderError as e:
        return HTMLResponse(
            templates.login_page(email=email, otp_sent=True, error=str(e)),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    response = redirect("/dashboard")
    set_session_cookies(response, session)
    return response


@router.post("/logout")
def logout(
    request: Request,
    provider: Optional[AuthProviderClient] = Depends(get_auth_provider),
):
    access_token = request.cookies.get(settings.ACCESS_TOKEN_COOKIE)
    if provider is not None and access_token:
        provider.sign_out(access_token)

    response = redirect("/login")
    clear_session_cookies(response)
    # The guard would otherwise re-apply refreshed cookies
    request.state.session = None
    return response


# ---------------------- Onboarding ----------------------

@router.get("/onboarding", response_class=HTMLResponse)
def onboarding_form():
    return HTMLResponse(templates.onboarding_page())


@router.post("/onboarding")
def complete_onboarding(
    first_name: str = Form(""),
    phone: str = Form(""),
    safe_word: str = Form(""),
    custom_word: str = Form(""),
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    final_safe_word = custom_word if custom_word.strip() else safe_word

    def form_error(message: str) -> HTMLResponse:
        return HTMLResponse(
            templates.onboarding_page(
                first_name=first_name, phone=phone, safe_word=safe_word,
                custom_word=custom_word, error=message,
            ),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if not first_name.strip():
        return form_error("Please enter your first name")
    if not phone.strip():
        return form_error("Please enter your phone number")
    if not final_safe_word.strip():
        return form_error("Please select or enter a safe word")

    profile_in = schemas.UserProfileCreate(
        first_name=first_name, phone=phone, safe_word=final_safe_word
    )
    try:
        crud.user_profile.create_with_user(db, obj_in=profile_in, user_id=current_user.id)
    except ValueError:
        # Already onboarded
        return redirect("/dashboard")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not save profile for {current_user.id}: {str(e)}")
        return form_error("An error occurred, please try again")

    logger.info(f"🎉 Onboarding completed for {current_user.id}")
    return redirect("/dashboard")


# ---------------------- Dashboard ----------------------

@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    error: Optional[str] = None,
    notice: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    profile = crud.user_profile.get_by_user(db, user_id=current_user.id)
    contacts = crud.safety_contact.get_by_user(db, user_id=current_user.id)
    pending_calls = crud.scheduled_call.get_pending(db, user_id=current_user.id)

    return HTMLResponse(templates.dashboard_page(
        profile=profile,
        contacts=contacts,
        pending_calls=pending_calls,
        error=error,
        notice=notice,
    ))


@router.post("/dashboard/call-now")
def call_me_now(
    db: Session = Depends(get_db),
    relay: CallRelayService = Depends(get_call_relay),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    profile = crud.user_profile.get_by_user(db, user_id=current_user.id)
    if not profile or not profile.phone:
        return redirect("/dashboard", error="Add your phone number first")

    primary = crud.safety_contact.get_primary_contact(db, user_id=current_user.id)
    call = build_check_in_call(profile, primary)

    try:
        trigger_safety_call(db, relay, user_id=current_user.id, call=call)
    except (RelayError, ValueError) as e:
        logger.error(f"Failed to trigger call for {current_user.id}: {str(e)}")
        return redirect("/dashboard", error="Failed - Try Again")

    return redirect("/dashboard", notice="Call Triggered!")


@router.post("/dashboard/schedule")
def schedule_call(
    minutes: Optional[int] = Form(None),
    scheduled_time: Optional[str] = Form(None),
    tz_offset: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    if not crud.safety_contact.get_by_user(db, user_id=current_user.id):
        return redirect("/dashboard", error="Add a safety contact first")

    if minutes is not None:
        call_time = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    elif scheduled_time:
        try:
            call_time = local_to_utc(scheduled_time, tz_offset)
        except ValueError:
            return redirect("/dashboard", error="Choose a valid date and time")
    else:
        return redirect("/dashboard", error="Choose a date and time")

    try:
        call_in = schemas.ScheduledCallCreate(scheduled_time=call_time)
    except ValidationError as e:
        return redirect("/dashboard", error=validation_message(e))

    crud.scheduled_call.create_pending(db, obj_in=call_in, user_id=current_user.id)
    return redirect("/dashboard", notice="Call scheduled")


@router.post("/dashboard/calls/{call_id}/cancel")
def cancel_call(
    call_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    try:
        call = crud.scheduled_call.cancel(db, call_id=call_id, user_id=current_user.id)
    except crud.CallNotPendingError as e:
        return redirect("/dashboard", error=str(e))
    if not call:
        return redirect("/dashboard", error="Call not found")
    return redirect("/dashboard", notice="Call cancelled")


@router.post("/dashboard/profile")
def update_profile(
    phone: Optional[str] = Form(None),
    safe_word: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    profile = crud.user_profile.get_by_user(db, user_id=current_user.id)
    if not profile:
        return redirect("/onboarding")

    try:
        submitted = {"phone": phone, "safe_word": safe_word}
        profile_in = schemas.UserProfileUpdate(**{k: v for k, v in submitted.items() if v is not None})
    except ValidationError as e:
        return redirect("/dashboard", error=validation_message(e))

    crud.user_profile.update(db, db_obj=profile, obj_in=profile_in)
    return redirect("/dashboard", notice="Profile updated")


# ---------------------- Contacts ----------------------

@router.get("/contacts", response_class=HTMLResponse)
def contacts(
    error: Optional[str] = None,
    notice: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    return HTMLResponse(templates.contacts_page(
        contacts=crud.safety_contact.get_by_user(db, user_id=current_user.id),
        error=error,
        notice=notice,
    ))


@router.post("/contacts")
def add_contact(
    name: str = Form(""),
    phone: str = Form(""),
    relationship: str = Form(""),
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    try:
        contact_in = schemas.SafetyContactCreate(name=name, phone=phone, relationship=relationship)
    except ValidationError as e:
        return HTMLResponse(
            templates.contacts_page(
                contacts=crud.safety_contact.get_by_user(db, user_id=current_user.id),
                form={"name": name, "phone": phone, "relationship": relationship},
                error=validation_message(e),
            ),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    crud.safety_contact.create_with_user(db, obj_in=contact_in, user_id=current_user.id)
    return redirect("/contacts", notice="Contact added")


@router.post("/contacts/{contact_id}/delete")
def delete_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    if not crud.safety_contact.remove_for_user(db, contact_id=contact_id, user_id=current_user.id):
        return redirect("/contacts", error="Contact not found")
    return redirect("/contacts", notice="Contact removed")


@router.post("/contacts/{contact_id}/primary")
def make_primary_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[schemas.AuthUser] = Depends(get_optional_user),
):
    if current_user is None:
        return redirect("/login")

    if not crud.safety_contact.set_primary(db, contact_id=contact_id, user_id=current_user.id):
        return redirect("/contacts", error="Contact not found")
    return redirect("/contacts", notice="Primary contact updated")
