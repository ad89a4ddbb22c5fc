# File: app/web/templates.py
"""HTML for the Pronto pages. Every user-supplied value goes through esc()."""
from datetime import datetime, timezone
from html import escape
from typing import List, Optional
from app.models.safety_contact import SafetyContact
from app.models.scheduled_call import ScheduledCall
from app.models.user_profile import UserProfile
from app.schemas.user_profile import SAFE_WORD_OPTIONS

STYLE = """
body { font-family: system-ui, sans-serif; background: #fffbeb; margin: 0; padding: 1rem; }
main { max-width: 28rem; margin: 0 auto; }
.card { background: #fff; border-radius: 0.75rem; padding: 1.25rem; margin-bottom: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,.08); }
label { display: block; font-weight: 600; margin: 0.75rem 0 0.25rem; }
input { width: 100%; padding: 0.5rem; box-sizing: border-box; }
button { padding: 0.5rem 1rem; margin-top: 0.75rem; cursor: pointer; }
.primary { background: #059669; color: #fff; border: 0; border-radius: 0.5rem; width: 100%; font-size: 1.1rem; }
.error { color: #b91c1c; }
.notice { color: #047857; }
.row { display: flex; justify-content: space-between; align-items: center; gap: 0.5rem; }
.muted { color: #6b7280; font-size: 0.9rem; }
ul { list-style: none; padding: 0; }
li { padding: 0.5rem 0; border-bottom: 1px solid #f3f4f6; }
"""


# Custom times are typed in the browser's local time; the server gets the
# getTimezoneOffset() minutes for the chosen date alongside the naive value.
LOCAL_TIME_SCRIPT = """
(function () {
  var form = document.getElementById("custom-time");
  if (!form) { return; }
  var input = document.getElementById("scheduled_time");
  var offset = document.getElementById("tz_offset");
  var now = new Date();
  offset.value = now.getTimezoneOffset();
  input.min = new Date(now.getTime() - now.getTimezoneOffset() * 60000).toISOString().slice(0, 16);
  form.addEventListener("submit", function () {
    if (input.value) { offset.value = new Date(input.value).getTimezoneOffset(); }
  });
})();
"""

def esc(value) -> str:
    return escape("" if value is None else str(value), quote=True)


def format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime("%b %d, %I:%M %p UTC").replace(" 0", " ")


def layout(title: str, body: str, *, error: Optional[str] = None, notice: Optional[str] = None) -> str:
    messages = ""
    if error:
        messages += f'<p class="error" role="alert">{esc(error)}</p>'
    if notice:
        messages += f'<p class="notice" role="status">{esc(notice)}</p>'
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{esc(title)} - Pronto</title>
<style>{STYLE}</style>
</head>
<body>
<main>
{messages}
{body}
</main>
</body>
</html>"""


# ---------------------- Login ----------------------

def login_page(*, email: str = "", otp_sent: bool = False, error: Optional[str] = None, notice: Optional[str] = None) -> str:
    if otp_sent:
        body = f"""
<section class="card">
  <h1>Pronto</h1>
  <p class="muted">Enter your code</p>
  <form method="post" action="/login/verify">
    <label>Email</label>
    <p>{esc(email)}</p>
    <input type="hidden" name="email" value="{esc(email)}">
    <label for="code">Code</label>
    <input id="code" name="code" inputmode="numeric" autocomplete="one-time-code" required>
    <button class="primary" type="submit">Verify</button>
  </form>
  <form method="post" action="/login">
    <input type="hidden" name="email" value="{esc(email)}">
    <button type="submit">Resend code</button>
  </form>
  <p><a href="/login">Use a different email</a></p>
</section>"""
    else:
        body = f"""
<section class="card">
  <h1>Pronto</h1>
  <p class="muted">Sign in with email</p>
  <form method="post" action="/login">
    <label for="email">Email</label>
    <input id="email" name="email" type="email" value="{esc(email)}" placeholder="you@example.com" required>
    <button class="primary" type="submit">Send code</button>
  </form>
</section>"""
    return layout("Sign in", body, error=error, notice=notice)


# ---------------------- Onboarding ----------------------

def onboarding_page(
    *,
    first_name: str = "",
    phone: str = "",
    safe_word: str = "",
    custom_word: str = "",
    error: Optional[str] = None,
) -> str:
    options = "".join(
        f'<label><input type="radio" name="safe_word" value="{esc(word)}"'
        f'{" checked" if word == safe_word else ""}> {esc(word)}</label>'
        for word in SAFE_WORD_OPTIONS
    )
    body = f"""
<section class="card">
  <h1>Welcome to Pronto</h1>
  <p class="muted">Let's set up your profile</p>
  <form method="post" action="/onboarding">
    <label for="first_name">What should we call you?</label>
    <input id="first_name" name="first_name" value="{esc(first_name)}" placeholder="Your first name">
    <label for="phone">Your phone number</label>
    <input id="phone" name="phone" type="tel" value="{esc(phone)}" placeholder="+1 (555) 123-4567">
    <p class="muted">We'll call this number for safety check-ins</p>
    <fieldset>
      <legend>Choose your safe word</legend>
      {options}
      <label for="custom_word">Or enter your own</label>
      <input id="custom_word" name="custom_word" value="{esc(custom_word)}" placeholder="Custom safe word">
    </fieldset>
    <p class="muted">Say this word during a check-in call to confirm you're safe</p>
    <button class="primary" type="submit">Continue</button>
  </form>
</section>"""
    return layout("Onboarding", body, error=error)


# ---------------------- Dashboard ----------------------

def dashboard_page(
    *,
    profile: Optional[UserProfile],
    contacts: List[SafetyContact],
    pending_calls: List[ScheduledCall],
    error: Optional[str] = None,
    notice: Optional[str] = None,
) -> str:
    primary = next((c for c in contacts if c.is_primary), None)
    greeting = f"Hey, {esc(profile.first_name)}" if profile else "Pronto"
    safe_word = f'<p class="muted">Safe word: {esc(profile.safe_word)}</p>' if profile else ""
    no_phone = "" if profile and profile.phone else " disabled"
    no_contacts = "" if contacts else " disabled"

    if primary:
        call_description = f"We'll call you and connect you to {esc(primary.name)} if you say the safe phrase"
    else:
        call_description = "Add a safety contact first"

    calls_section = ""
    if pending_calls:
        items = "".join(
            f"""<li class="row"><span>{esc(format_time(call.scheduled_time))}</span>
<form method="post" action="/dashboard/calls/{call.id}/cancel"><button type="submit">Cancel</button></form></li>"""
            for call in pending_calls
        )
        calls_section = f"""
<section class="card">
  <h2>Upcoming Calls</h2>
  <ul>{items}</ul>
</section>"""

    # Replaced with the browser's local "now" by LOCAL_TIME_SCRIPT
    min_time = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M")

    count = len(contacts)
    contacts_summary = (
        "You need at least one contact" if count == 0
        else f"{count} contact{'s' if count != 1 else ''} configured"
    )

    profile_section = ""
    if profile:
        profile_section = f"""
<section class="card">
  <h2>Your details</h2>
  <form method="post" action="/dashboard/profile">
    <label for="phone">Phone number</label>
    <input id="phone" name="phone" type="tel" value="{esc(profile.phone)}">
    <label for="safe_word">Safe word</label>
    <input id="safe_word" name="safe_word" value="{esc(profile.safe_word)}">
    <button type="submit">Save</button>
  </form>
</section>"""

    body = f"""
<header class="row">
  <div><h1>{greeting}</h1>{safe_word}</div>
  <form method="post" action="/logout"><button type="submit">Sign out</button></form>
</header>
<section class="card">
  <h2>Request Safety Call</h2>
  <p class="muted">{call_description}</p>
  <form method="post" action="/dashboard/call-now">
    <button class="primary" type="submit"{no_phone}>Call Me Now</button>
  </form>
  <div class="row">
    <form method="post" action="/dashboard/schedule"><input type="hidden" name="minutes" value="15"><button type="submit"{no_contacts}>In 15 min</button></form>
    <form method="post" action="/dashboard/schedule"><input type="hidden" name="minutes" value="60"><button type="submit"{no_contacts}>In 1 hour</button></form>
  </div>
  <form id="custom-time" method="post" action="/dashboard/schedule">
    <label for="scheduled_time">Schedule Custom Time</label>
    <input id="scheduled_time" name="scheduled_time" type="datetime-local" min="{min_time}"{no_contacts}>
    <input id="tz_offset" name="tz_offset" type="hidden">
    <button type="submit"{no_contacts}>Schedule Call</button>
  </form>
</section>
<script>{LOCAL_TIME_SCRIPT}</script>
{calls_section}
<section class="card">
  <h2>Safety Contacts</h2>
  <p class="muted">{contacts_summary}</p>
  <a href="/contacts">{"Add Safety Contacts" if count == 0 else "Manage Contacts"}</a>
</section>
{profile_section}"""
    return layout("Dashboard", body, error=error, notice=notice)


# ---------------------- Contacts ----------------------

def contacts_page(
    *,
    contacts: List[SafetyContact],
    form: Optional[dict] = None,
    error: Optional[str] = None,
    notice: Optional[str] = None,
) -> str:
    form = form or {}
    if contacts:
        rows = []
        for contact in contacts:
            star = ' <strong>Primary</strong>' if contact.is_primary else ""
            make_primary = "" if contact.is_primary else (
                f'<form method="post" action="/contacts/{contact.id}/primary">'
                f'<button type="submit" title="Set as primary">Set primary</button></form>'
            )
            rows.append(f"""<li class="row">
<div><p>{esc(contact.name)}{star}</p><p class="muted">{esc(contact.relationship)} &middot; {esc(contact.phone)}</p></div>
<div class="row">{make_primary}
<form method="post" action="/contacts/{contact.id}/delete"><button type="submit">Delete</button></form></div>
</li>""")
        listing = f"<ul>{''.join(rows)}</ul>"
    else:
        listing = '<p class="muted">No contacts yet</p>'

    body = f"""
<header class="row">
  <a href="/dashboard">&larr; Back</a>
  <h1>Safety Contacts</h1>
</header>
<section class="card">
  <p class="muted">These people will be called when you request a safety check-in</p>
  {listing}
</section>
<section class="card">
  <h2>New Contact</h2>
  <form method="post" action="/contacts">
    <label for="name">Name</label>
    <input id="name" name="name" value="{esc(form.get('name'))}" placeholder="John Doe" required>
    <label for="phone">Phone Number</label>
    <input id="phone" name="phone" type="tel" value="{esc(form.get('phone'))}" placeholder="+1 (555) 123-4567" required>
    <label for="relationship">Relationship</label>
    <input id="relationship" name="relationship" value="{esc(form.get('relationship'))}" placeholder="Friend, Family, Partner..." required>
    <button class="primary" type="submit">Add Contact</button>
  </form>
</section>"""
    return layout("Contacts", body, error=error, notice=notice)
