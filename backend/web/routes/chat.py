"""
Learning assistant routes.

GET /chat renders the conversation list and, with `?session=`, the latest
turns of that conversation. Questions and session actions follow
Post/Redirect/Get; API failures re-render the page with status 502.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.portal.api import ApiError
from backend.portal.chat import ChatService, order_sessions

from ..components import ChatPanel
from ..pages import api_client, layout_response, see_other

chat_router = APIRouter(tags=["Chat"])
logger = logging.getLogger("skillmount.web.chat")


def _failure_text(exc: ApiError) -> str:
    if exc.status_code and exc.detail and exc.detail != "chat_response_invalid":
        return exc.detail
    return "The assistant is unavailable right now. Please try again."


def _render_chat(
    request: Request,
    session_id: Optional[str] = None,
    *,
    question: str = "",
    error: Optional[str] = None,
    status_code: int = 200,
):
    sessions = order_sessions(ChatService(api_client(request)).history())
    panel = ChatPanel(sessions, active_id=session_id, question=question, error=error)
    return layout_response(request, "Assistant", panel.render(), status_code=status_code)


@chat_router.get("/chat", response_class=HTMLResponse)
async def chat_page(request: Request, session: Optional[str] = None):
    return _render_chat(request, session)


@chat_router.post("/chat/ask", response_class=HTMLResponse)
async def chat_ask(request: Request):
    form = await request.form()
    question = str(form.get("question") or "").strip()
    session_id = str(form.get("session_id") or "").strip() or None
    if not question:
        return _render_chat(request, session_id, error="Type a question first.", status_code=400)
    try:
        answer = ChatService(api_client(request)).ask(question, session_id)
    except ApiError as exc:
        return _render_chat(request, session_id, question=question, error=_failure_text(exc), status_code=502)
    return see_other("/chat?" + urlencode({"session": answer.session_id}))


@chat_router.post("/chat/sessions/{session_id}/rename", response_class=HTMLResponse)
async def chat_rename(request: Request, session_id: str):
    form = await request.form()
    title = str(form.get("title") or "").strip()
    if not title:
        return _render_chat(request, session_id, error="A title is required.", status_code=400)
    try:
        ChatService(api_client(request)).rename(session_id, title)
    except ApiError as exc:
        return _render_chat(request, session_id, error=_failure_text(exc), status_code=502)
    return see_other("/chat?" + urlencode({"session": session_id}))


@chat_router.post("/chat/sessions/{session_id}/pin", response_class=HTMLResponse)
async def chat_pin(request: Request, session_id: str):
    form = await request.form()
    pinned = str(form.get("pinned") or "").lower()
    if pinned not in ("true", "false"):
        return _render_chat(request, session_id, error="Unknown pin state.", status_code=400)
    try:
        ChatService(api_client(request)).pin(session_id, pinned == "true")
    except ApiError as exc:
        return _render_chat(request, session_id, error=_failure_text(exc), status_code=502)
    return see_other("/chat")


@chat_router.post("/chat/sessions/{session_id}/delete", response_class=HTMLResponse)
async def chat_delete(request: Request, session_id: str):
    try:
        ChatService(api_client(request)).delete(session_id)
    except ApiError as exc:
        return _render_chat(request, error=_failure_text(exc), status_code=502)
    logger.info("Chat session deleted: id=%s", session_id)
    return see_other("/chat")
