# SkillMount Component System
# Pure Python components for server-side HTML rendering

from .base import Component
from .layout import Layout
from .navigation import Navigation
from .impersonation_banner import ImpersonationBanner
from .guards import OnboardingGuard, LoadingPlaceholder
from .cards import TicketTable, TicketDetail, NotificationList, FAQList, StudentTestimonials, ChatPanel
from .forms import (
    FormField,
    TextAreaField,
    FileUploadField,
    TextInputField,
    SelectField,
    SubmitButton,
    LoginForm,
    ResetPasswordForm,
    OnboardingForm,
    TicketCreateForm,
    TicketReplyForm,
    ContactForm,
    FeedbackForm,
)
from .admin import AdminConsole

__all__ = [
    "Component",
    "Layout",
    "Navigation",
    "ImpersonationBanner",
    "OnboardingGuard",
    "LoadingPlaceholder",
    "TicketTable",
    "TicketDetail",
    "NotificationList",
    "FAQList",
    "StudentTestimonials",
    "ChatPanel",
    "FormField",
    "TextAreaField",
    "FileUploadField",
    "TextInputField",
    "SelectField",
    "SubmitButton",
    "LoginForm",
    "ResetPasswordForm",
    "OnboardingForm",
    "TicketCreateForm",
    "TicketReplyForm",
    "ContactForm",
    "FeedbackForm",
    "AdminConsole",
]
