"""Student feedback form (rating, category, message, optional attachment and voice note)."""
from typing import Mapping, Optional

from backend.portal.feedback import FEEDBACK_CATEGORIES, RATINGS

from ..base import Component
from .fields import FileUploadField, SelectField, TextAreaField
from .submit import SubmitButton
from .ticket_forms import VOICE_ACCEPT

RATING_LABELS = {"1": "1 - Poor", "2": "2 - Fair", "3": "3 - Good", "4": "4 - Very good", "5": "5 - Excellent"}


class FeedbackForm(Component):
    def __init__(self, *, values: Optional[Mapping[str, str]] = None, error: Optional[str] = None, sent: bool = False) -> None:
        self.values = dict(values or {})
        self.error = error
        self.sent = sent

    def render(self) -> str:
        if self.sent:
            return """
        <section class="feedback-card">
            <h1>Thanks for your feedback</h1>
            <p>Our team reads every response.</p>
        </section>"""
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        rating = SelectField("rating", "Rating", required=True).render(
            [str(r) for r in RATINGS], value=self.values.get("rating", ""), placeholder="Rate us...", labels=RATING_LABELS
        )
        category = SelectField("category", "Category").render(FEEDBACK_CATEGORIES, value=self.values.get("category", ""))
        message = TextAreaField("message", "Your feedback", required=True).render(value=self.values.get("message", ""))
        attachment = FileUploadField("attachment", "Attachment").render()
        voice = FileUploadField("voice_note", "Voice note").render(accept=VOICE_ACCEPT)
        return f"""
        <section class="feedback-card">
            <h1>Share your feedback</h1>
            {error_html}
            <form method="post" action="/feedback" enctype="multipart/form-data" class="feedback-form">
                {rating}
                {category}
                {message}
                {attachment}
                {voice}
                <div class="form-actions">{SubmitButton("Send feedback").render()}</div>
            </form>
        </section>"""
