"""
End-to-end guard behaviour through the middleware, plus baseline headers.
"""
import pytest
import httpx
from httpx import ASGITransport

from backend.web import main

from conftest import build_user

pytestmark = pytest.mark.anyio("asyncio")


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


async def _get(path: str, sid=None) -> httpx.Response:
    async with _client() as c:
        if sid:
            c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        return await c.get(path, follow_redirects=False)


@pytest.mark.anyio
async def test_anonymous_protected_page_redirects_to_login_with_origin(session_store):
    r = await _get("/tickets")
    assert r.status_code == 302
    assert r.headers["location"] == "/login?from=%2Ftickets"


@pytest.mark.anyio
async def test_anonymous_admin_visit_redirects_to_login_with_origin(session_store):
    r = await _get("/admin")
    assert r.status_code == 302
    assert r.headers["location"] == "/login?from=%2Fadmin"
    assert r.headers["cache-control"] == "private, no-store"


@pytest.mark.anyio
async def test_unknown_session_cookie_is_treated_as_anonymous(session_store):
    r = await _get("/faq", sid="not-a-session")
    assert r.status_code == 302
    assert r.headers["location"].startswith("/login")


@pytest.mark.anyio
async def test_incomplete_student_on_dashboard_goes_to_onboarding(login_as):
    r = await _get("/dashboard", login_as(build_user("student", complete=False)))
    assert r.status_code == 302 and r.headers["location"] == "/onboarding"


@pytest.mark.anyio
async def test_incomplete_student_may_open_contact(login_as):
    r = await _get("/contact", login_as(build_user("student", complete=False)))
    assert r.status_code == 200
    assert 'action="/contact"' in r.text


@pytest.mark.anyio
async def test_complete_user_on_onboarding_goes_home(login_as):
    r = await _get("/onboarding", login_as(build_user("affiliate")))
    assert r.status_code == 302 and r.headers["location"] == "/"


@pytest.mark.anyio
async def test_incomplete_super_admin_may_view_public_home(login_as):
    r = await _get("/", login_as(build_user("super_admin", complete=False)))
    assert r.status_code == 200


@pytest.mark.anyio
async def test_incomplete_affiliate_on_public_home_goes_to_onboarding(login_as):
    r = await _get("/", login_as(build_user("affiliate", complete=False)))
    assert r.status_code == 302 and r.headers["location"] == "/onboarding"


@pytest.mark.anyio
async def test_student_cannot_open_admin(login_as):
    r = await _get("/admin", login_as(build_user("student")))
    assert r.status_code == 302 and r.headers["location"] == "/"


@pytest.mark.anyio
async def test_staff_visiting_student_ticket_list_goes_to_inbox(login_as):
    r = await _get("/tickets", login_as(build_user("tutor")))
    assert r.status_code == 303 and r.headers["location"] == "/tickets/manage"


@pytest.mark.anyio
@pytest.mark.parametrize("path", ["/student/dashboard", "/tutor/dashboard", "/affiliate/dashboard"])
async def test_legacy_dashboards_redirect_home(session_store, path):
    r = await _get(path)
    assert r.status_code == 302 and r.headers["location"] == "/"


@pytest.mark.anyio
async def test_home_for_anonymous_visitor(session_store):
    r = await _get("/")
    assert r.status_code == 200
    assert "Sign in" in r.text
    assert "cache-control" not in r.headers


@pytest.mark.anyio
async def test_personalised_pages_are_not_cached(login_as):
    r = await _get("/", login_as(build_user("student", name="Ravi")))
    assert "Welcome back, Ravi" in r.text
    assert r.headers["cache-control"] == "private, no-store"


@pytest.mark.anyio
async def test_student_dashboard_shows_profile_and_open_tickets(fake_api, login_as):
    fake_api.on("GET", "/tickets/", [{"id": 1, "title": "A", "status": "Open"}, {"id": 2, "title": "B", "status": "Closed"}])
    r = await _get("/dashboard", login_as(build_user("student", batch="Sep 2025")))
    assert r.status_code == 200
    assert "Sep 2025" in r.text
    assert "1 open ticket(s)" in r.text


@pytest.mark.anyio
async def test_unread_notifications_badge(fake_api, login_as):
    fake_api.on("GET", "/notifications/", [
        {"id": 1, "title": "Reply", "message": "m", "is_read": False},
        {"id": 2, "title": "Old", "message": "m", "is_read": True},
    ])
    r = await _get("/faq", login_as(build_user("student")))
    assert 'class="nav-badge" aria-label="unread">1<' in r.text


@pytest.mark.anyio
async def test_health_and_security_headers(session_store):
    r = await _get("/health")
    assert r.status_code == 200 and r.json() == {"status": "healthy"}
    assert r.headers["x-frame-options"] == "SAMEORIGIN"
    assert r.headers["x-content-type-options"] == "nosniff"
    assert "default-src 'self'" in r.headers["content-security-policy"]
