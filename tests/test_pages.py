from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from app import crud
from app.core.config import settings
from app.models.safety_contact import SafetyContact
from app.models.scheduled_call import CallStatus, ScheduledCall
from app.models.user_profile import UserProfile
from tests.conftest import ALICE, naive_utc, webhook_response

WEBHOOK_POST = "app.services.call_relay.requests.post"


# ---------------------- Login ----------------------

def test_login_sends_code(client, auth_provider):
    response = client.post("/login", data={"email": "carol@example.com"})

    assert response.status_code == 200
    assert "Code sent! Check your email." in response.text
    assert 'action="/login/verify"' in response.text
    assert auth_provider.sent_codes == ["carol@example.com"]


def test_login_rejects_bad_email(client, auth_provider):
    response = client.post("/login", data={"email": "not-an-email"})

    assert response.status_code == 400
    assert auth_provider.sent_codes == []


def test_verify_code_sets_session_cookies(client, auth_provider):
    auth_provider.codes["carol@example.com"] = "123456"

    response = client.post(
        "/login/verify",
        data={"email": "carol@example.com", "code": "123456"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    set_cookies = " ".join(response.headers.get_list("set-cookie"))
    assert f"{settings.ACCESS_TOKEN_COOKIE}=token-carol;" in set_cookies
    assert settings.REFRESH_TOKEN_COOKIE in set_cookies


def test_wrong_code_shows_error(client, auth_provider):
    auth_provider.codes["carol@example.com"] = "123456"

    response = client.post("/login/verify", data={"email": "carol@example.com", "code": "000000"})

    assert response.status_code == 400
    assert "Token has expired or is invalid" in response.text


def test_blank_code_is_not_sent_to_provider(client, auth_provider):
    auth_provider.codes["carol@example.com"] = ""

    response = client.post("/login/verify", data={"email": "carol@example.com", "code": "   "})

    assert response.status_code == 400
    assert "Please enter the code from your email" in response.text
    assert not response.headers.get_list("set-cookie")


def test_login_page_redirects_signed_in_user(alice_client, alice_profile):
    response = alice_client.get("/login", follow_redirects=False)
    assert response.headers["location"] == "/dashboard"


def test_logout_clears_cookies(alice_client, auth_provider, alice_profile):
    response = alice_client.post("/logout", follow_redirects=False)

    assert response.headers["location"] == "/login"
    assert auth_provider.signed_out == ["token-alice"]
    set_cookies = " ".join(response.headers.get_list("set-cookie"))
    assert settings.ACCESS_TOKEN_COOKIE in set_cookies


# ---------------------- Onboarding ----------------------

def test_onboarding_creates_profile(alice_client, db):
    response = alice_client.post(
        "/onboarding",
        data={"first_name": " Alice ", "phone": "+15550100", "safe_word": "Umbrella"},
        follow_redirects=False,
    )

    assert response.headers["location"] == "/dashboard"
    profile = db.query(UserProfile).filter(UserProfile.user_id == ALICE.id).one()
    assert profile.first_name == "Alice"
    assert profile.safe_word == "Umbrella"


def test_custom_safe_word_wins(alice_client, db):
    alice_client.post(
        "/onboarding",
        data={"first_name": "Alice", "phone": "+15550100", "safe_word": "Umbrella", "custom_word": "Marmalade"},
    )

    profile = db.query(UserProfile).filter(UserProfile.user_id == ALICE.id).one()
    assert profile.safe_word == "Marmalade"


def test_onboarding_requires_each_field(alice_client, db):
    no_name = alice_client.post("/onboarding", data={"phone": "+15550100", "safe_word": "Umbrella"})
    no_phone = alice_client.post("/onboarding", data={"first_name": "Alice", "safe_word": "Umbrella"})
    no_word = alice_client.post("/onboarding", data={"first_name": "Alice", "phone": "+15550100"})

    assert "Please enter your first name" in no_name.text
    assert "Please enter your phone number" in no_phone.text
    assert "Please select or enter a safe word" in no_word.text
    assert db.query(UserProfile).count() == 0


# ---------------------- Dashboard ----------------------

def test_dashboard_shows_primary_contact_and_pending_calls(alice_client, db, alice_profile, add_contact):
    add_contact(name="Sam")
    crud.scheduled_call.log_completed(db, user_id=ALICE.id)

    response = alice_client.get("/dashboard")

    assert "Safe word: Pineapple" in response.text
    assert "connect you to Sam" in response.text
    assert "1 contact configured" in response.text
    assert "Upcoming Calls" not in response.text


def test_call_me_now_uses_profile_and_primary_contact(alice_client, db, alice_profile, add_contact):
    add_contact(name="Sam", phone="+15550111")

    with patch(WEBHOOK_POST, return_value=webhook_response()) as post:
        response = alice_client.post("/dashboard/call-now", follow_redirects=False)

    assert response.headers["location"].startswith("/dashboard?notice=")
    assert post.call_args.kwargs["json"] == {
        "phone": "+15550100",
        "name": "Alice",
        "code_word": "Pineapple",
        "emergency_name": "Sam",
        "emergency_phone": "+15550111",
        "immediate": True,
    }
    calls = db.query(ScheduledCall).all()
    assert [c.status for c in calls] == [CallStatus.COMPLETED]


def test_call_me_now_failure_is_reported(alice_client, db, alice_profile):
    with patch(WEBHOOK_POST, return_value=webhook_response(500, "boom")):
        response = alice_client.post("/dashboard/call-now", follow_redirects=False)

    assert "error=" in response.headers["location"]
    assert db.query(ScheduledCall).count() == 0


def test_schedule_in_fifteen_minutes(alice_client, db, alice_profile, add_contact):
    add_contact()
    before = naive_utc(datetime.now(timezone.utc))

    alice_client.post("/dashboard/schedule", data={"minutes": "15"})

    call = db.query(ScheduledCall).one()
    assert call.status is CallStatus.PENDING
    delay = naive_utc(call.scheduled_time) - before
    assert timedelta(minutes=14) < delay <= timedelta(minutes=16)


def test_schedule_custom_time(alice_client, db, alice_profile, add_contact):
    add_contact()

    alice_client.post("/dashboard/schedule", data={"scheduled_time": "2030-01-01T09:30"})

    call = db.query(ScheduledCall).one()
    assert naive_utc(call.scheduled_time) == datetime(2030, 1, 1, 9, 30)


def test_custom_time_uses_browser_timezone(alice_client, db, alice_profile, add_contact):
    add_contact()

    # getTimezoneOffset() is -180 at UTC+3 and 300 at UTC-5
    alice_client.post("/dashboard/schedule", data={"scheduled_time": "2030-01-01T09:30", "tz_offset": "-180"})
    alice_client.post("/dashboard/schedule", data={"scheduled_time": "2030-01-02T09:30", "tz_offset": "300"})

    times = [naive_utc(c.scheduled_time) for c in crud.scheduled_call.get_pending(db, user_id=ALICE.id)]
    assert times == [datetime(2030, 1, 1, 6, 30), datetime(2030, 1, 2, 14, 30)]


def test_custom_time_rejects_garbage(alice_client, db, alice_profile, add_contact):
    add_contact()

    bad_time = alice_client.post("/dashboard/schedule", data={"scheduled_time": "tomorrow"}, follow_redirects=False)
    bad_offset = alice_client.post(
        "/dashboard/schedule",
        data={"scheduled_time": "2030-01-01T09:30", "tz_offset": "9999"},
        follow_redirects=False,
    )

    assert "error=" in bad_time.headers["location"]
    assert "error=" in bad_offset.headers["location"]
    assert db.query(ScheduledCall).count() == 0


def test_custom_time_input_has_minimum(alice_client, alice_profile, add_contact):
    add_contact()

    response = alice_client.get("/dashboard")

    assert 'type="datetime-local" min="' in response.text
    assert 'name="tz_offset"' in response.text


def test_schedule_needs_a_contact(alice_client, db, alice_profile):
    response = alice_client.post("/dashboard/schedule", data={"minutes": "15"}, follow_redirects=False)

    assert "error=" in response.headers["location"]
    assert db.query(ScheduledCall).count() == 0


def test_cancel_from_dashboard(alice_client, db, alice_profile, add_contact):
    add_contact()
    alice_client.post("/dashboard/schedule", data={"minutes": "60"})
    call = db.query(ScheduledCall).one()

    alice_client.post(f"/dashboard/calls/{call.id}/cancel")

    db.expire_all()
    assert db.get(ScheduledCall, call.id).status is CallStatus.CANCELLED


def test_update_phone_keeps_safe_word(alice_client, db, alice_profile):
    alice_client.post("/dashboard/profile", data={"phone": "+15550199"})

    db.expire_all()
    profile = db.query(UserProfile).filter(UserProfile.user_id == ALICE.id).one()
    assert profile.phone == "+15550199"
    assert profile.safe_word == "Pineapple"


# ---------------------- Contacts ----------------------

def test_contact_management_flow(alice_client, db, alice_profile):
    alice_client.post("/contacts", data={"name": "Sam", "phone": "+15550111", "relationship": "Friend"})
    alice_client.post("/contacts", data={"name": "Riley", "phone": "+15550122", "relationship": "Sister"})
    riley = db.query(SafetyContact).filter(SafetyContact.name == "Riley").one()

    alice_client.post(f"/contacts/{riley.id}/primary")
    db.expire_all()
    assert [c.name for c in crud.safety_contact.get_by_user(db, user_id=ALICE.id)] == ["Riley", "Sam"]

    alice_client.post(f"/contacts/{riley.id}/delete")
    db.expire_all()
    assert [c.name for c in crud.safety_contact.get_by_user(db, user_id=ALICE.id)] == ["Sam"]


def test_contact_form_requires_fields(alice_client, db, alice_profile):
    response = alice_client.post("/contacts", data={"name": "Sam", "phone": "", "relationship": "Friend"})

    assert response.status_code == 400
    assert db.query(SafetyContact).count() == 0


def test_contact_names_are_escaped(alice_client, alice_profile, add_contact):
    add_contact(name="<script>alert(1)</script>")

    response = alice_client.get("/contacts")

    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;" in response.text
