"""
Admin area forms: FAQ editor, settings lists, user management and the public
contact form.
"""
from typing import Mapping, Optional, Sequence
from urllib.parse import urlencode

from backend.identity_access.domain import User
from backend.portal.faqs import FAQ
from backend.portal.settings import SystemSettings

from ..base import Component
from .fields import SelectField, TextAreaField, TextInputField
from .submit import SubmitButton

SETTINGS_LABELS = {
    "batches": "Batches",
    "mentors": "Mentors",
    "coordinators": "Coordinators",
    "topics": "Topics",
    "platforms": "Platforms",
    "macros": "Reply macros",
    "faq_categories": "FAQ categories",
}


class FAQForm(Component):
    """Create form, or edit form when `faq` is given."""

    def __init__(self, categories: Sequence[str], faq: Optional[FAQ] = None) -> None:
        self.categories = list(categories)
        self.faq = faq

    def render(self) -> str:
        faq = self.faq
        prefix = f"faq-{faq.id}-" if faq else "faq-new-"
        action = f"/admin/faqs/{self.escape(faq.id)}" if faq else "/admin/faqs"
        q_html = TextInputField(prefix + "question", "Question", required=True, name="question").render(
            value=faq.question if faq else ""
        )
        answer = TextAreaField(prefix + "answer", "Answer", required=True, name="answer").render(
            value=faq.answer if faq else "", rows=3
        )
        category = SelectField(prefix + "category", "Category", required=True, name="category").render(
            self.categories, value=faq.category if faq else ""
        )
        label = "Save" if faq else "Add FAQ"
        return f"""
        <form method="post" action="{action}" class="faq-form">
            {q_html}
            {answer}
            {category}
            <div class="form-actions">{SubmitButton(label).render()}</div>
        </form>"""


class SettingsForm(Component):
    def __init__(self, settings: SystemSettings) -> None:
        self.settings = settings

    def render(self) -> str:
        data = self.settings.to_dict()
        fields_html = "\n".join(
            TextAreaField(name, label, help_text="One entry per line").render(value="\n".join(data[name]), rows=5)
            for name, label in SETTINGS_LABELS.items()
        )
        return f"""
        <form method="post" action="/admin/settings" class="settings-form">
            {fields_html}
            <div class="form-actions">{SubmitButton("Save settings").render()}</div>
        </form>"""


class ContactForm(Component):
    def __init__(self, *, values: Optional[Mapping[str, str]] = None, error: Optional[str] = None, sent: bool = False) -> None:
        self.values = dict(values or {})
        self.error = error
        self.sent = sent

    def render(self) -> str:
        if self.sent:
            return """
        <section class="contact-card">
            <h1>Thank you</h1>
            <p>Your message has been sent. We will get back to you shortly.</p>
        </section>"""
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        v = self.values.get
        return f"""
        <section class="contact-card">
            <h1>Contact us</h1>
            {error_html}
            <form method="post" action="/contact" class="contact-form">
                {TextInputField("name", "Name", required=True).render(value=v("name", ""), autocomplete="name")}
                {TextInputField("email", "Email", required=True).render(value=v("email", ""), input_type="email", autocomplete="email")}
                {TextInputField("phone", "Phone", required=True).render(value=v("phone", ""), input_type="tel", autocomplete="tel")}
                {TextInputField("subject", "Subject").render(value=v("subject", ""))}
                {TextAreaField("message", "Message", required=True).render(value=v("message", ""))}
                <div class="form-actions">{SubmitButton("Send message").render()}</div>
            </form>
        </section>"""


MANAGED_ROLES = ("student", "tutor", "affiliate")
USER_STATUSES = ("Active", "Inactive", "Pending", "Suspended")


class UserCreateForm(Component):
    """New account; the API generates the password and emails it."""

    def __init__(self, batches: Sequence[str], *, role: str = "student", values: Optional[Mapping[str, str]] = None) -> None:
        self.batches = list(batches)
        self.role = role if role in MANAGED_ROLES else "student"
        self.values = dict(values or {})

    def render(self) -> str:
        v = self.values.get
        batch = ""
        if self.role == "student":
            batch = SelectField("user-new-batch", "Batch", name="batch").render(self.batches, value=v("batch", ""))
        return f"""
        <form method="post" action="/admin/users" class="user-create-form">
            <input type="hidden" name="role" value="{self.escape(self.role)}">
            {TextInputField("user-new-name", "Name", required=True, name="name").render(value=v("name", ""))}
            {TextInputField("user-new-email", "Email", required=True, name="email").render(value=v("email", ""), input_type="email")}
            {TextInputField("user-new-phone", "Phone", name="phone").render(value=v("phone", ""), input_type="tel")}
            {batch}
            <div class="form-actions">{SubmitButton("Add " + self.role).render()}</div>
        </form>"""


class UserEditForm(Component):
    """Inline edit for one account row (name, phone, status)."""

    def __init__(self, user: User) -> None:
        self.user = user

    def render(self) -> str:
        u = self.user
        prefix = f"user-{u.id}-"
        return f"""
        <form method="post" action="/admin/users/{self.escape(u.id)}?{self.escape(urlencode({"role": u.role}))}" class="inline-form user-edit-form">
            {TextInputField(prefix + "name", "Name", name="name").render(value=u.name)}
            {TextInputField(prefix + "phone", "Phone", name="phone").render(value=u.phone or "", input_type="tel")}
            {SelectField(prefix + "status", "Status", name="status").render(USER_STATUSES, value=u.status or "", placeholder="Unchanged")}
            {SubmitButton("Save", variant="secondary").render()}
        </form>"""


class FeedbackReplyForm(Component):
    def __init__(self, feedback_id: str, reply: Optional[str] = None) -> None:
        self.feedback_id = feedback_id
        self.reply = reply

    def render(self) -> str:
        fid = self.escape(self.feedback_id)
        field = TextAreaField(f"feedback-{fid}-reply", "Reply", name="reply").render(value=self.reply or "", rows=2)
        return f"""
        <form method="post" action="/admin/feedback/{fid}/reply" class="feedback-reply-form">
            {field}
            {SubmitButton("Save reply", variant="secondary").render()}
        </form>"""
