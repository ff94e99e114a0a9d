"""
Ticket create and reply forms (multipart: optional attachment and voice note).
"""
from typing import Mapping, Optional, Sequence

from backend.portal.tickets import TICKET_PRIORITIES

from ..base import Component
from .fields import FileUploadField, SelectField, TextAreaField, TextInputField
from .submit import SubmitButton

VOICE_ACCEPT = "audio/webm,audio/mp4,audio/ogg,audio/wav"


class TicketCreateForm(Component):
    def __init__(
        self,
        categories: Sequence[str],
        *,
        values: Optional[Mapping[str, str]] = None,
        error: Optional[str] = None,
    ) -> None:
        self.categories = list(categories)
        self.values = dict(values or {})
        self.error = error

    def render(self) -> str:
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        title = TextInputField("title", "Subject", required=True).render(value=self.values.get("title", ""))
        category = SelectField("category", "Category").render(self.categories, value=self.values.get("category", ""))
        priority = SelectField("priority", "Priority", required=True).render(
            TICKET_PRIORITIES, value=self.values.get("priority", "Medium"), placeholder="Priority"
        )
        description = TextAreaField("description", "Describe the problem", required=True).render(
            value=self.values.get("description", "")
        )
        attachment = FileUploadField("attachment", "Attachment", help_text="Screenshot or document (optional)").render()
        voice = FileUploadField("voice_note", "Voice note").render(accept=VOICE_ACCEPT)
        return f"""
        <section class="ticket-create">
            <h2>Raise a ticket</h2>
            {error_html}
            <form method="post" action="/tickets" enctype="multipart/form-data" class="ticket-create-form">
                {title}
                {category}
                {priority}
                {description}
                {attachment}
                {voice}
                <div class="form-actions">{SubmitButton("Submit ticket").render()}</div>
            </form>
        </section>"""


class TicketReplyForm(Component):
    """Reply box; staff additionally get canned replies from the settings macros."""

    def __init__(self, ticket_id: str, *, macros: Sequence[str] = (), error: Optional[str] = None) -> None:
        self.ticket_id = ticket_id
        self.macros = list(macros)
        self.error = error

    def render(self) -> str:
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        macro_html = ""
        if self.macros:
            macro_html = SelectField("macro", "Canned reply").render(self.macros, placeholder="None")
        message = TextAreaField("message", "Reply").render(rows=4)
        voice = FileUploadField("voice_note", "Voice note").render(accept=VOICE_ACCEPT)
        action = f"/tickets/{self.escape(self.ticket_id)}/reply"
        return f"""
        <form method="post" action="{action}" enctype="multipart/form-data" class="ticket-reply-form">
            {error_html}
            {macro_html}
            {message}
            {voice}
            <div class="form-actions">{SubmitButton("Send reply").render()}</div>
        </form>"""
