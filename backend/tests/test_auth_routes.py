"""
Sign-in, sign-out, Google callback, password reset, impersonation exit and
onboarding over HTTP.
"""
import pytest
import httpx
from httpx import ASGITransport

from backend.web import main

from conftest import build_user

pytestmark = pytest.mark.anyio("asyncio")


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


def _session_cookie(response: httpx.Response) -> str:
    header = response.headers.get("set-cookie", "")
    assert header.startswith(f"{main.SESSION_COOKIE_NAME}=")
    return header.split(";", 1)[0].split("=", 1)[1]


def _api_user(role: str, complete: bool = True) -> dict:
    return {"id": 7, "name": "Pat", "email": "pat@example.com", "role": role, "isProfileComplete": complete}


@pytest.mark.anyio
@pytest.mark.parametrize(
    "role,complete,origin,expected",
    [
        ("super_admin", True, "/faq", "/admin"),
        ("student", False, "/faq", "/onboarding"),
        ("tutor", False, None, "/onboarding"),
        ("affiliate", False, None, "/onboarding"),
        ("student", True, "/faq", "/faq"),
        ("tutor", True, None, "/tickets/manage"),
        ("student", True, None, "/"),
        ("student", True, "//evil.example", "/"),
    ],
)
async def test_login_lands_by_role_and_profile(fake_api, session_store, role, complete, origin, expected):
    fake_api.on("POST", "/auth/login/", {"access": "A1", "refresh": "R1", "user": _api_user(role, complete)})
    form = {"email": "pat@example.com", "password": "secret-pw"}
    if origin:
        form["from"] = origin
    async with _client() as c:
        r = await c.post("/login", data=form, follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == expected
    rec = session_store.get(_session_cookie(r))
    assert rec.user.role == role
    assert rec.access_token == "A1" and rec.refresh_token == "R1"
    assert "HttpOnly" in r.headers["set-cookie"] and "Secure" in r.headers["set-cookie"]


@pytest.mark.anyio
async def test_login_with_bad_credentials_rerenders_form(fake_api, session_store):
    fake_api.on("POST", "/auth/login/", {"detail": "No active account"}, status=401)
    async with _client() as c:
        r = await c.post("/login", data={"email": "pat@example.com", "password": "nope"})
    assert r.status_code == 401
    assert "Invalid email or password." in r.text
    assert 'value="pat@example.com"' in r.text
    assert "set-cookie" not in r.headers


@pytest.mark.anyio
async def test_login_when_api_is_down_returns_502(session_store):
    async with _client() as c:
        r = await c.post("/login", data={"email": "pat@example.com", "password": "pw"})
    assert r.status_code == 502
    assert "temporarily unavailable" in r.text


@pytest.mark.anyio
async def test_login_requires_both_fields(session_store):
    async with _client() as c:
        r = await c.post("/login", data={"email": "", "password": ""})
    assert r.status_code == 400


@pytest.mark.anyio
async def test_login_page_keeps_valid_origin_only(session_store):
    async with _client() as c:
        ok = await c.get("/login", params={"from": "/tickets"})
        bad = await c.get("/login", params={"from": "https://evil.example"})
    assert 'name="from" value="/tickets"' in ok.text
    assert 'name="from"' not in bad.text


@pytest.mark.anyio
async def test_signed_in_user_visiting_login_is_sent_on(login_as):
    sid = login_as(build_user("tutor"))
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.get("/login", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/tickets/manage"


@pytest.mark.anyio
async def test_logout_clears_session_and_cookie(session_store, login_as):
    sid = login_as(build_user())
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.post("/logout", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    assert session_store.get(sid) is None
    assert "Max-Age=0" in r.headers["set-cookie"]


@pytest.mark.anyio
async def test_cross_origin_post_is_rejected(session_store, login_as):
    sid = login_as(build_user())
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.post("/logout", headers={"Origin": "http://evil.example"})
    assert r.status_code == 403
    assert r.json() == {"error": "csrf_violation"}
    assert r.headers["cache-control"] == "private, no-store"
    assert session_store.get(sid) is not None


@pytest.mark.anyio
async def test_same_origin_referer_is_accepted(session_store, login_as):
    sid = login_as(build_user())
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.post("/logout", headers={"Referer": "http://test/dashboard"}, follow_redirects=False)
    assert r.status_code == 303


@pytest.mark.anyio
async def test_impersonation_exit_restores_admin(session_store):
    admin = build_user("super_admin")
    sid = session_store.create(admin).session_id
    session_store.start_impersonation(sid, build_user("student", name="Asha"))
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        home = await c.get("/")
        r = await c.post("/auth/impersonation/exit", follow_redirects=False)
    assert "Viewing as <strong>Asha</strong>" in home.text
    assert r.status_code == 303 and r.headers["location"] == "/admin"
    assert session_store.get_session(sid) == admin
    assert session_store.is_impersonating(sid) is False


@pytest.mark.anyio
async def test_google_callback_logs_in_with_api_tokens(fake_api, session_store):
    fake_api.on("GET", "/users/me/", _api_user("student", True))
    async with _client() as c:
        r = await c.get("/google-callback", params={"access": "GA", "refresh": "GR"}, follow_redirects=False)
    assert r.status_code == 303 and r.headers["location"] == "/"
    rec = session_store.get(_session_cookie(r))
    assert rec.access_token == "GA"
    assert fake_api.called("GET", "/users/me/")[0]["headers"]["Authorization"] == "Bearer GA"


@pytest.mark.anyio
async def test_google_callback_without_token_returns_to_login(session_store):
    async with _client() as c:
        r = await c.get("/google-callback", follow_redirects=False)
    assert r.headers["location"] == "/login?error=invalid_credentials"


@pytest.mark.anyio
async def test_reset_password_validates_and_confirms(fake_api, session_store):
    fake_api.on("POST", "/auth/password-reset-confirm/", None, status=204)
    async with _client() as c:
        mismatch = await c.post("/reset-password/u1/t1", data={"password": "longenough", "confirm_password": "other-one"})
        done = await c.post("/reset-password/u1/t1", data={"password": "longenough", "confirm_password": "longenough"})
    assert mismatch.status_code == 400 and "Passwords do not match." in mismatch.text
    assert done.status_code == 200 and "Password updated" in done.text
    assert fake_api.called("POST", "/auth/password-reset-confirm/")[0]["json"] == {
        "uid": "u1",
        "token": "t1",
        "new_password": "longenough",
    }


@pytest.mark.anyio
async def test_reset_password_with_expired_link(fake_api, session_store):
    fake_api.on("POST", "/auth/password-reset-confirm/", {"detail": "Invalid token"}, status=400)
    async with _client() as c:
        r = await c.post("/reset-password/u1/t1", data={"password": "longenough", "confirm_password": "longenough"})
    assert r.status_code == 400 and "invalid or has expired" in r.text


_STUDENT_ANSWERS = {
    "whatsapp_number": "+91 90000 00000",
    "dob": "2001-04-02",
    "address": "12 Lake Road",
    "pincode": "560001",
    "qualification": "B.Sc",
    "batch": "Sep 2025",
    "aim": "Build a portfolio site",
}


@pytest.mark.anyio
async def test_onboarding_form_lists_role_fields(session_store, login_as):
    sid = login_as(build_user("student", complete=False))
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.get("/onboarding")
    assert r.status_code == 200
    for name in _STUDENT_ANSWERS:
        assert f'name="{name}"' in r.text
    assert "Sep 2025" in r.text  # default batches when settings are unreachable


@pytest.mark.anyio
async def test_onboarding_rejects_missing_fields(session_store, login_as):
    sid = login_as(build_user("student", complete=False))
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.post("/onboarding", data={"whatsapp_number": "123"})
    assert r.status_code == 400
    assert "This field is required." in r.text


@pytest.mark.anyio
async def test_onboarding_completes_profile_and_refreshes_session(fake_api, session_store, login_as):
    user = build_user("student", complete=False)
    sid = login_as(user)
    completed = dict(_STUDENT_ANSWERS, id=user.id, name=user.name, email=user.email, role="student", is_profile_complete=True)
    fake_api.on("PATCH", f"/users/{user.id}/", completed)
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.post("/onboarding", data=_STUDENT_ANSWERS, follow_redirects=False)
    assert r.status_code == 303 and r.headers["location"] == "/"
    sent = fake_api.called("PATCH", f"/users/{user.id}/")[0]["json"]
    assert sent["is_profile_complete"] is True and sent["batch"] == "Sep 2025"
    refreshed = session_store.get_session(sid)
    assert refreshed.is_profile_complete is True and refreshed.whatsapp_number == "+91 90000 00000"


@pytest.mark.anyio
async def test_onboarding_api_failure_keeps_answers(fake_api, session_store, login_as):
    user = build_user("student", complete=False)
    sid = login_as(user)
    fake_api.on("PATCH", f"/users/{user.id}/", {"detail": "boom"}, status=500)
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await c.post("/onboarding", data=_STUDENT_ANSWERS)
    assert r.status_code == 502
    assert "12 Lake Road" in r.text
    assert session_store.get_session(sid).is_profile_complete is False
