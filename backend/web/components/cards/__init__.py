"""
Card components for SkillMount: ticket tables and details, notifications,
the FAQ list, testimonials and the assistant chat.
"""

from .ticket import TicketTable, TicketDetail
from .notification import NotificationList
from .faq import FAQList
from .feedback import StudentTestimonials
from .chat import ChatPanel

__all__ = ["TicketTable", "TicketDetail", "NotificationList", "FAQList", "StudentTestimonials", "ChatPanel"]
