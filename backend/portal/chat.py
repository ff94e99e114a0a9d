"""
Learning assistant chat.

The API answers questions against the course material and keeps the
conversation per session. Listing history degrades to an empty list; asking
and managing sessions propagate errors to the page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")

# Only the latest turns are shown next to the question box.
RECENT_TURNS = 6


@dataclass
class ChatSource:
    id: str
    title: str
    url: str
    source_type: str = ""
    score: float = 0.0


@dataclass
class ChatTurn:
    id: str
    question: str
    answer: str
    sources: List[ChatSource] = field(default_factory=list)


@dataclass
class ChatSession:
    id: str
    title: str
    is_pinned: bool = False
    turns: List[ChatTurn] = field(default_factory=list)


@dataclass
class ChatAnswer:
    session_id: str
    turn_id: str
    answer: str
    sources: List[ChatSource] = field(default_factory=list)
    title: Optional[str] = None


def _sources(rows: Any) -> List[ChatSource]:
    result = []
    for s in rows or []:
        if not isinstance(s, Mapping):
            continue
        try:
            score = float(s.get("score") or 0)
        except (TypeError, ValueError):
            score = 0.0
        result.append(
            ChatSource(
                id=str(s.get("id", "")),
                title=str(s.get("title") or ""),
                url=str(s.get("url") or ""),
                source_type=str(s.get("source_type") or ""),
                score=score,
            )
        )
    return result


def session_from_dict(data: Mapping[str, Any]) -> ChatSession:
    turns = [
        ChatTurn(
            id=str(t.get("id", "")),
            question=str(t.get("question") or ""),
            answer=str(t.get("answer") or ""),
            sources=_sources(t.get("sources")),
        )
        for t in (data.get("turns") or [])
        if isinstance(t, Mapping)
    ]
    return ChatSession(
        id=str(data.get("id", "")),
        title=str(data.get("title") or "New chat"),
        is_pinned=bool(data.get("is_pinned", False)),
        turns=turns,
    )


def order_sessions(sessions: List[ChatSession]) -> List[ChatSession]:
    """Pinned sessions first; otherwise keep the API order (newest first)."""
    return sorted(sessions, key=lambda s: not s.is_pinned)


class ChatService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def history(self) -> List[ChatSession]:
        try:
            rows = self.client.get("/chat/history/") or []
        except ApiError as exc:
            logger.warning("Failed to load chat history: status=%s", exc.status_code)
            return []
        # Rows without an id cannot be linked or managed.
        return [session_from_dict(row) for row in rows if isinstance(row, Mapping) and row.get("id") not in (None, "")]

    def ask(self, question: str, session_id: Optional[str] = None) -> ChatAnswer:
        payload = {"question": question}
        if session_id:
            payload["session_id"] = session_id
        try:
            body = self.client.post("/chat/ask/", json=payload)
        except ApiError as exc:
            logger.error("Chat question failed: status=%s", exc.status_code)
            raise
        if not isinstance(body, Mapping) or not body.get("session_id"):
            raise ApiError(502, "chat_response_invalid")
        return ChatAnswer(
            session_id=str(body["session_id"]),
            turn_id=str(body.get("turn_id") or ""),
            answer=str(body.get("answer") or ""),
            sources=_sources(body.get("sources")),
            title=body.get("title") or None,
        )

    def rename(self, session_id: str, title: str) -> None:
        self._patch(session_id, {"title": title})

    def pin(self, session_id: str, is_pinned: bool) -> None:
        self._patch(session_id, {"is_pinned": is_pinned})

    def _patch(self, session_id: str, changes: Mapping[str, Any]) -> None:
        try:
            self.client.patch(f"/chat/session/{session_id}/", json=dict(changes))
        except ApiError as exc:
            logger.error("Chat session %s update failed: status=%s", session_id, exc.status_code)
            raise

    def delete(self, session_id: str) -> None:
        try:
            self.client.delete(f"/chat/session/{session_id}/")
        except ApiError as exc:
            logger.error("Chat session %s delete failed: status=%s", session_id, exc.status_code)
            raise
