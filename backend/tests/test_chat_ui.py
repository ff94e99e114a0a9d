"""
Learning assistant: conversation list, questions and session actions.
"""
import pytest
import httpx
from httpx import ASGITransport

from backend.web import main

from conftest import build_user

pytestmark = pytest.mark.anyio("asyncio")

HISTORY = [
    {"id": "s1", "title": "React hooks", "is_pinned": False, "turns": [
        {"id": "t1", "question": "What is useEffect?", "answer": "A hook for side effects",
         "sources": [{"id": "v1", "title": "Hooks video", "url": "https://videos.example.com/hooks"}]},
    ]},
    {"id": "s2", "title": "Deploying", "is_pinned": True, "turns": []},
    {"title": "Broken row without id"},
]


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


async def _as(sid, method: str, path: str, **kwargs) -> httpx.Response:
    async with _client() as c:
        c.cookies.set(main.SESSION_COOKIE_NAME, sid)
        return await c.request(method, path, follow_redirects=False, **kwargs)


@pytest.fixture
def student_sid(login_as):
    return login_as(build_user("student"))


@pytest.mark.anyio
async def test_chat_lists_pinned_sessions_first(fake_api, student_sid):
    fake_api.on("GET", "/chat/history/", HISTORY)
    r = await _as(student_sid, "GET", "/chat")
    assert r.status_code == 200
    assert r.text.index("Deploying") < r.text.index("React hooks")
    assert "Broken row without id" not in r.text
    assert "Find the best video for React hooks" in r.text


@pytest.mark.anyio
async def test_chat_shows_selected_session_turns(fake_api, student_sid):
    fake_api.on("GET", "/chat/history/", HISTORY)
    r = await _as(student_sid, "GET", "/chat?session=s1")
    assert "A hook for side effects" in r.text
    assert 'href="https://videos.example.com/hooks"' in r.text
    assert 'name="session_id" value="s1"' in r.text


@pytest.mark.anyio
async def test_chat_without_history(student_sid):
    r = await _as(student_sid, "GET", "/chat")
    assert r.status_code == 200
    assert "No conversations yet." in r.text


@pytest.mark.anyio
async def test_anonymous_chat_visit_redirects_to_login(session_store):
    async with _client() as c:
        r = await c.get("/chat", follow_redirects=False)
    assert r.status_code == 302 and r.headers["location"] == "/login?from=%2Fchat"


@pytest.mark.anyio
async def test_ask_redirects_to_session(fake_api, student_sid):
    fake_api.on("POST", "/chat/ask/", {"session_id": "s 9", "turn_id": "t1", "answer": "Use hooks"})
    r = await _as(student_sid, "POST", "/chat/ask", data={"question": "How?", "session_id": "s1"})
    assert r.status_code == 303 and r.headers["location"] == "/chat?session=s+9"
    assert fake_api.called("POST", "/chat/ask/")[0]["json"] == {"question": "How?", "session_id": "s1"}


@pytest.mark.anyio
async def test_ask_requires_question(fake_api, student_sid):
    r = await _as(student_sid, "POST", "/chat/ask", data={"question": "  "})
    assert r.status_code == 400
    assert not fake_api.called("POST", "/chat/ask/")


@pytest.mark.anyio
@pytest.mark.parametrize("status, payload", [(503, {"detail": "Assistant offline"}), (200, {"answer": "no session"})])
async def test_ask_failure_keeps_question(fake_api, student_sid, status, payload):
    fake_api.on("POST", "/chat/ask/", payload, status=status)
    r = await _as(student_sid, "POST", "/chat/ask", data={"question": "Where is the plugin guide?"})
    assert r.status_code == 502
    assert "Where is the plugin guide?" in r.text
    assert 'role="alert"' in r.text


@pytest.mark.anyio
async def test_rename_pin_and_delete_session(fake_api, student_sid):
    fake_api.on("PATCH", "/chat/session/s1/", {})
    fake_api.on("DELETE", "/chat/session/s1/", None, status=204)
    blank = await _as(student_sid, "POST", "/chat/sessions/s1/rename", data={"title": ""})
    renamed = await _as(student_sid, "POST", "/chat/sessions/s1/rename", data={"title": "Hooks"})
    pinned = await _as(student_sid, "POST", "/chat/sessions/s1/pin", data={"pinned": "true"})
    deleted = await _as(student_sid, "POST", "/chat/sessions/s1/delete")

    assert blank.status_code == 400
    assert renamed.status_code == 303 and renamed.headers["location"] == "/chat?session=s1"
    assert pinned.status_code == deleted.status_code == 303
    payloads = [kw["json"] for kw in fake_api.called("PATCH", "/chat/session/s1/")]
    assert payloads == [{"title": "Hooks"}, {"is_pinned": True}]
    assert len(fake_api.called("DELETE", "/chat/session/s1/")) == 1


@pytest.mark.anyio
async def test_session_action_failure_returns_502(student_sid):
    r = await _as(student_sid, "POST", "/chat/sessions/s1/delete")
    assert r.status_code == 502
    assert "The assistant is unavailable right now." in r.text
