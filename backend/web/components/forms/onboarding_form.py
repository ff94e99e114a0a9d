"""
Onboarding form.

Common contact fields for every role plus a role-specific block. Field names
match `User` attribute names so the values can be merged into the profile
unchanged.
"""
from typing import Dict, List, Mapping, Optional, Tuple

from backend.identity_access.domain import User
from backend.portal.settings import SystemSettings

from ..base import Component
from .fields import CheckboxGroupField, SelectField, TextAreaField, TextInputField
from .submit import SubmitButton

COMMON_FIELDS: Tuple[str, ...] = ("whatsapp_number", "dob", "address", "pincode")

ROLE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "student": ("qualification", "batch", "aim"),
    "tutor": ("qualification", "topics"),
    "affiliate": ("platform", "domain"),
}

LIST_FIELDS = frozenset({"topics"})


def required_fields(role: str) -> Tuple[str, ...]:
    """Fields that must be non-empty before the profile counts as complete."""
    return COMMON_FIELDS + ROLE_FIELDS.get(role, ())


def missing_fields(role: str, values: Mapping[str, object]) -> List[str]:
    return [name for name in required_fields(role) if not values.get(name)]


class OnboardingForm(Component):
    def __init__(
        self,
        user: User,
        settings: SystemSettings,
        *,
        values: Optional[Mapping[str, object]] = None,
        errors: Optional[List[str]] = None,
        error: Optional[str] = None,
    ) -> None:
        self.user = user
        self.settings = settings
        self.values = dict(values or {})
        self.errors = set(errors or [])
        self.error = error

    def _value(self, name: str) -> str:
        raw = self.values.get(name)
        if raw is None:
            raw = getattr(self.user, name, "")
        return "" if raw is None else str(raw)

    def _err(self, name: str) -> Optional[str]:
        return "This field is required." if name in self.errors else None

    def _render_field(self, name: str) -> str:
        if name == "whatsapp_number":
            return TextInputField(name, "WhatsApp number", required=True, error_text=self._err(name)).render(
                value=self._value(name), input_type="tel", autocomplete="tel"
            )
        if name == "dob":
            return TextInputField(name, "Date of birth", required=True, error_text=self._err(name)).render(
                value=self._value(name), input_type="date"
            )
        if name == "address":
            return TextAreaField(name, "Address", required=True, error_text=self._err(name)).render(
                value=self._value(name), rows=3
            )
        if name == "batch":
            return SelectField(name, "Batch", required=True, error_text=self._err(name)).render(
                self.settings.batches, value=self._value(name)
            )
        if name == "platform":
            return SelectField(name, "Primary platform", required=True, error_text=self._err(name)).render(
                self.settings.platforms, value=self._value(name)
            )
        if name == "topics":
            selected = self.values.get("topics") or self.user.topics
            return CheckboxGroupField(name, "Topics you teach", required=True, error_text=self._err(name)).render(
                self.settings.topics, selected=selected if isinstance(selected, list) else []
            )
        if name == "aim":
            return TextAreaField(name, "What do you want to achieve?", required=True, error_text=self._err(name)).render(
                value=self._value(name), rows=3
            )
        label = name.replace("_", " ").capitalize()
        return TextInputField(name, label, required=True, error_text=self._err(name)).render(value=self._value(name))

    def render(self) -> str:
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        fields_html = "\n".join(self._render_field(name) for name in required_fields(self.user.role))
        return f"""
        <section class="onboarding-card">
            <h1>Complete your profile</h1>
            <p class="text-muted">Welcome, {self.escape(self.user.name)}. A few details before you get started.</p>
            {error_html}
            <form method="post" action="/onboarding" class="onboarding-form">
                {fields_html}
                <div class="form-actions">{SubmitButton("Save profile").render()}</div>
            </form>
        </section>"""
