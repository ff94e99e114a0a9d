"""
Learning assistant page body.

Left: saved conversations (pinned first) with rename/pin/delete actions.
Right: the latest turns of the selected conversation and the question box.
"""

from typing import List, Optional, Sequence
from urllib.parse import urlencode

from backend.portal.chat import RECENT_TURNS, ChatSession, ChatTurn

from ..base import Component
from ..forms.fields import TextAreaField, TextInputField
from ..forms.submit import SubmitButton

SUGGESTIONS = (
    "Find the best video for React hooks",
    "Where is the WordPress plugin guide?",
    "Show materials about API integration",
    "Steps to deploy on Hostinger",
)


class ChatPanel(Component):
    def __init__(
        self,
        sessions: Sequence[ChatSession],
        *,
        active_id: Optional[str] = None,
        question: str = "",
        error: Optional[str] = None,
    ) -> None:
        self.sessions: List[ChatSession] = list(sessions)
        self.active = next((s for s in self.sessions if s.id == active_id), None)
        self.question = question
        self.error = error

    def _render_session(self, session: ChatSession) -> str:
        sid = self.escape(session.id)
        css = self.classes("chat-session", active=self.active is session, pinned=session.is_pinned)
        pin_label = "Unpin" if session.is_pinned else "Pin"
        return (
            f'<li class="{css}">'
            f'<a href="/chat?{self.escape(urlencode({"session": session.id}))}">{self.escape(session.title)}</a>'
            f'<form method="post" action="/chat/sessions/{sid}/pin" class="inline-form">'
            f'<input type="hidden" name="pinned" value="{"false" if session.is_pinned else "true"}">'
            f'{SubmitButton(pin_label, variant="link").render()}</form>'
            f'<form method="post" action="/chat/sessions/{sid}/rename" class="inline-form">'
            f'{TextInputField(f"chat-{sid}-title", "Title", name="title").render(value=session.title)}'
            f'{SubmitButton("Rename", variant="link").render()}</form>'
            f'<form method="post" action="/chat/sessions/{sid}/delete" class="inline-form">'
            f'{SubmitButton("Delete", variant="danger").render()}</form>'
            "</li>"
        )

    def _render_turn(self, turn: ChatTurn) -> str:
        sources = "".join(
            f'<li><a href="{self.escape(s.url)}" rel="noopener">{self.escape(s.title)}</a></li>'
            for s in turn.sources
            if s.url
        )
        sources_html = f'<ul class="chat-sources">{sources}</ul>' if sources else ""
        return (
            '<article class="chat-turn">'
            f'<p class="chat-question">{self.escape(turn.question)}</p>'
            f'<div class="chat-answer">{self.escape(turn.answer)}</div>'
            f"{sources_html}</article>"
        )

    def render(self) -> str:
        sessions = "".join(self._render_session(s) for s in self.sessions)
        sidebar = f'<ul class="chat-sessions">{sessions}</ul>' if sessions else '<p class="empty-state">No conversations yet.</p>'
        if self.active and self.active.turns:
            turns_html = "".join(self._render_turn(t) for t in self.active.turns[-RECENT_TURNS:])
        else:
            turns_html = '<ul class="chat-suggestions">' + "".join(
                f"<li>{self.escape(s)}</li>" for s in SUGGESTIONS
            ) + "</ul>"
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        hidden = (
            f'<input type="hidden" name="session_id" value="{self.escape(self.active.id)}">' if self.active else ""
        )
        question = TextAreaField("question", "Ask the assistant", required=True).render(value=self.question, rows=2)
        return f"""
        <div class="chat-layout">
            <aside class="chat-sidebar">
                <a class="btn btn-secondary" href="/chat">New chat</a>
                {sidebar}
            </aside>
            <section class="chat-main">
                <div class="chat-turns">{turns_html}</div>
                {error_html}
                <form method="post" action="/chat/ask" class="chat-form">
                    {hidden}
                    {question}
                    <div class="form-actions">{SubmitButton("Ask").render()}</div>
                </form>
            </section>
        </div>"""
