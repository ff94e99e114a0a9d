"""
Student feedback page and the public testimonials on the home page.
"""
import pytest
import httpx
from httpx import ASGITransport

from backend.web import main

from conftest import build_user

pytestmark = pytest.mark.anyio("asyncio")


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


async def _as(sid, method: str, path: str, **kwargs) -> httpx.Response:
    async with _client() as c:
        if sid:
            c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        return await c.request(method, path, follow_redirects=False, **kwargs)


@pytest.mark.anyio
async def test_student_sees_feedback_form(login_as):
    r = await _as(login_as(build_user("student")), "GET", "/feedback")
    assert r.status_code == 200
    assert 'action="/feedback"' in r.text and 'enctype="multipart/form-data"' in r.text
    assert '<option value="5">5 - Excellent</option>' in r.text


@pytest.mark.anyio
async def test_feedback_is_for_students_only(login_as):
    r = await _as(login_as(build_user("tutor")), "GET", "/feedback")
    assert r.status_code == 302 and r.headers["location"] == "/"


@pytest.mark.anyio
@pytest.mark.parametrize("data", [
    {"rating": "", "message": "Nice"},
    {"rating": "9", "message": "Nice"},
    {"rating": "five", "message": "Nice"},
    {"rating": "4", "message": "  "},
])
async def test_feedback_validation(fake_api, login_as, data):
    r = await _as(login_as(build_user("student")), "POST", "/feedback", data=data)
    assert r.status_code == 400
    assert 'role="alert"' in r.text
    assert not fake_api.called("POST", "/feedbacks/")


@pytest.mark.anyio
async def test_feedback_with_voice_note_is_sent(fake_api, login_as):
    fake_api.on("POST", "/feedbacks/", {"id": 3}, status=201)
    files = {"voice_note": ("recording.blob", b"OggS", "audio/ogg")}
    data = {"rating": "5", "category": "Mentorship", "message": "Very helpful"}
    r = await _as(login_as(build_user("student")), "POST", "/feedback", data=data, files=files)
    assert r.status_code == 303 and r.headers["location"] == "/feedback?sent=1"
    sent = fake_api.called("POST", "/feedbacks/")[0]
    assert sent["data"] == {"rating": "5", "message": "Very helpful", "category": "Mentorship"}
    assert sent["files"]["voice_note"][0] == "feedback_voice.ogg"


@pytest.mark.anyio
async def test_feedback_thanks_page(login_as):
    r = await _as(login_as(build_user("student")), "GET", "/feedback?sent=1")
    assert "Thanks for your feedback" in r.text
    assert 'action="/feedback"' not in r.text


@pytest.mark.anyio
async def test_feedback_api_failure_keeps_input(fake_api, login_as):
    fake_api.on("POST", "/feedbacks/", {"detail": "Attachment too large"}, status=413)
    data = {"rating": "3", "category": "Platform", "message": "Videos buffer"}
    r = await _as(login_as(build_user("student")), "POST", "/feedback", data=data)
    assert r.status_code == 502
    assert "Attachment too large" in r.text and "Videos buffer" in r.text


@pytest.mark.anyio
async def test_home_shows_only_public_testimonials(fake_api, session_store):
    fake_api.on("GET", "/feedbacks/", [
        {"id": 1, "student_name": "Asha", "rating": 5, "message": "Loved the mentors", "is_public": True},
        {"id": 2, "student_name": "Ravi", "rating": 2, "message": "Private complaint", "is_public": False},
    ])
    r = await _as(None, "GET", "/")
    assert "What students say" in r.text
    assert "Loved the mentors" in r.text
    assert "Private complaint" not in r.text
    assert fake_api.called("GET", "/feedbacks/")[0]["params"] == {"is_public": "true"}


@pytest.mark.anyio
async def test_home_without_testimonials(session_store):
    r = await _as(None, "GET", "/")
    assert r.status_code == 200
    assert "What students say" not in r.text
