"""
Form components for SkillMount.

Basic building blocks (fields, submit button) plus the page forms built from
them.
"""

from .fields import FormField, TextAreaField, FileUploadField, TextInputField, SelectField, CheckboxGroupField
from .submit import SubmitButton
from .auth_forms import LoginForm, ResetPasswordForm
from .onboarding_form import OnboardingForm
from .ticket_forms import TicketCreateForm, TicketReplyForm
from .admin_forms import FAQForm, SettingsForm, ContactForm, UserCreateForm, UserEditForm, FeedbackReplyForm
from .feedback_form import FeedbackForm

__all__ = [
    "FormField",
    "TextAreaField",
    "FileUploadField",
    "TextInputField",
    "SelectField",
    "CheckboxGroupField",
    "SubmitButton",
    "LoginForm",
    "ResetPasswordForm",
    "OnboardingForm",
    "TicketCreateForm",
    "TicketReplyForm",
    "FAQForm",
    "SettingsForm",
    "ContactForm",
    "UserCreateForm",
    "UserEditForm",
    "FeedbackReplyForm",
    "FeedbackForm",
]
