"""
Admin console.

One page with tabs; the active tab comes from `?tab=`. Unknown tabs fall back
to FAQs so old links never render an empty console.
"""

from typing import List, Optional, Sequence
from urllib.parse import urlencode

from backend.identity_access.domain import ONBOARDING_ROLES, User
from backend.portal.faqs import FAQ
from backend.portal.feedback import Feedback
from backend.portal.inquiries import Inquiry
from backend.portal.settings import SystemSettings
from backend.portal.stats import DashboardStats
from backend.portal.tickets import Ticket

from .base import Component
from .cards.ticket import TicketTable
from .forms.admin_forms import MANAGED_ROLES, FAQForm, FeedbackReplyForm, SettingsForm, UserCreateForm, UserEditForm
from .forms.submit import SubmitButton

ADMIN_TABS = (
    ("dashboard", "Dashboard"),
    ("faqs", "FAQs"),
    ("inquiries", "Inquiries"),
    ("feedback", "Feedback"),
    ("tickets", "Tickets"),
    ("users", "Users"),
    ("settings", "Settings"),
)
DEFAULT_TAB = "faqs"


def normalize_tab(tab: Optional[str]) -> str:
    known = {key for key, _ in ADMIN_TABS}
    return tab if tab in known else DEFAULT_TAB


class AdminTabs(Component):
    def __init__(self, active: str) -> None:
        self.active = normalize_tab(active)

    def render(self) -> str:
        links = []
        for key, label in ADMIN_TABS:
            is_active = key == self.active
            css = self.classes("tab", active=is_active)
            aria = ' aria-current="page"' if is_active else ""
            links.append(f'<a href="/admin?tab={key}" class="{css}"{aria}>{label}</a>')
        return f'<nav class="admin-tabs" aria-label="Admin sections">{"".join(links)}</nav>'


class FAQAdminPanel(Component):
    def __init__(self, faqs: Sequence[FAQ], categories: Sequence[str]) -> None:
        self.faqs = list(faqs)
        self.categories = list(categories)

    def render(self) -> str:
        rows = []
        for faq in self.faqs:
            rows.append(
                f'<div class="admin-faq" id="faq-{self.escape(faq.id)}">'
                f"{FAQForm(self.categories, faq).render()}"
                f'<form method="post" action="/admin/faqs/{self.escape(faq.id)}/delete" class="inline-form">'
                f'{SubmitButton("Delete", variant="danger").render()}</form>'
                "</div>"
            )
        existing = "".join(rows) or '<p class="empty-state">No FAQs yet.</p>'
        return f"""
        <section class="admin-panel" id="panel-faqs">
            <h2>New FAQ</h2>
            {FAQForm(self.categories).render()}
            <h2>Existing FAQs</h2>
            {existing}
        </section>"""


class InquiryAdminPanel(Component):
    def __init__(self, inquiries: Sequence[Inquiry]) -> None:
        self.inquiries = list(inquiries)

    def render(self) -> str:
        if not self.inquiries:
            return '<section class="admin-panel" id="panel-inquiries"><p class="empty-state">No inquiries.</p></section>'
        items = "".join(self._render_item(i) for i in self.inquiries)
        return f'<section class="admin-panel" id="panel-inquiries"><ul class="inquiry-list">{items}</ul></section>'

    def _render_item(self, inquiry: Inquiry) -> str:
        iid = self.escape(inquiry.id)
        mark = ""
        if inquiry.status == "New":
            mark = (
                f'<form method="post" action="/admin/inquiries/{iid}/read" class="inline-form">'
                f'{SubmitButton("Mark read", variant="secondary").render()}</form>'
            )
        subject = f"<em>{self.escape(inquiry.subject)}</em>" if inquiry.subject else ""
        return (
            f'<li class="{self.classes("inquiry", unread=inquiry.status == "New")}" id="inquiry-{iid}">'
            f"<strong>{self.escape(inquiry.name)}</strong> &lt;{self.escape(inquiry.email)}&gt; "
            f"{self.escape(inquiry.phone)} {subject}"
            f"<p>{self.escape(inquiry.message)}</p>"
            f'<span class="badge">{self.escape(inquiry.status)}</span> <time>{self.escape(inquiry.date)}</time>'
            f"{mark}"
            f'<form method="post" action="/admin/inquiries/{iid}/delete" class="inline-form">'
            f'{SubmitButton("Delete", variant="danger").render()}</form>'
            "</li>"
        )


class UserAdminPanel(Component):
    """Accounts of one role: create, inline edit, delete and "view as"."""

    def __init__(self, users: Sequence[User], *, role: str = "student", batches: Sequence[str] = ()) -> None:
        self.users: List[User] = list(users)
        self.role = role if role in MANAGED_ROLES else "student"
        self.batches = list(batches)

    def _render_role_filter(self) -> str:
        links = "".join(
            f'<a href="/admin?{urlencode({"tab": "users", "role": r})}" '
            f'class="{self.classes("filter", active=r == self.role)}">{r.title()}s</a> '
            for r in MANAGED_ROLES
        )
        return f'<nav class="role-filter" aria-label="Roles">{links}</nav>'

    def _render_row(self, u: User) -> str:
        uid = self.escape(u.id)
        view_as = ""
        if u.role in ONBOARDING_ROLES:
            view_as = (
                f'<form method="post" action="/admin/impersonate/{uid}" class="inline-form">'
                f'{SubmitButton("View as", variant="secondary").render()}</form>'
            )
        return (
            f"<tr><td>{self.escape(u.name)}</td><td>{self.escape(u.email)}</td>"
            f"<td>{self.escape(u.batch)}</td><td>{self.escape(u.status)}</td>"
            f'<td>{"Complete" if u.is_profile_complete else "Pending"}</td>'
            f"<td>{UserEditForm(u).render()}"
            f'<form method="post" action="/admin/users/{uid}/delete?{urlencode({"role": u.role})}" class="inline-form">'
            f'{SubmitButton("Delete", variant="danger").render()}</form>'
            f"{view_as}</td></tr>"
        )

    def render(self) -> str:
        if self.users:
            rows = "".join(self._render_row(u) for u in self.users)
            table = f"""
            <table class="user-table">
                <thead><tr><th>Name</th><th>Email</th><th>Batch</th><th>Status</th><th>Profile</th><th></th></tr></thead>
                <tbody>{rows}</tbody>
            </table>"""
        else:
            table = '<p class="empty-state">No users found.</p>'
        return f"""
        <section class="admin-panel" id="panel-users">
            {self._render_role_filter()}
            <h2>New {self.escape(self.role)}</h2>
            {UserCreateForm(self.batches, role=self.role).render()}
            {table}
        </section>"""


class FeedbackAdminPanel(Component):
    def __init__(self, feedbacks: Sequence[Feedback]) -> None:
        self.feedbacks: List[Feedback] = list(feedbacks)

    def _render_item(self, f: Feedback) -> str:
        fid = self.escape(f.id)
        media = ""
        if f.attachment_url:
            media += f'<a href="{self.escape(f.attachment_url)}" rel="noopener">Attachment</a> '
        if f.voice_url:
            media += f'<audio controls src="{self.escape(f.voice_url)}"></audio>'
        visibility = "Hide from home page" if f.is_public else "Show on home page"
        return (
            f'<li class="{self.classes("feedback", public=f.is_public)}" id="feedback-{fid}">'
            f"<strong>{self.escape(f.student_name)}</strong> "
            f'<span class="rating" aria-label="{f.rating} out of 5">{f.rating}/5</span> '
            f'<span class="badge">{self.escape(f.category)}</span> <time>{self.escape(f.date)}</time>'
            f"<p>{self.escape(f.message)}</p>{media}"
            f"{FeedbackReplyForm(f.id, f.admin_reply).render()}"
            f'<form method="post" action="/admin/feedback/{fid}/visibility" class="inline-form">'
            f'<input type="hidden" name="public" value="{"false" if f.is_public else "true"}">'
            f'{SubmitButton(visibility, variant="secondary").render()}</form>'
            f'<form method="post" action="/admin/feedback/{fid}/delete" class="inline-form">'
            f'{SubmitButton("Delete", variant="danger").render()}</form>'
            "</li>"
        )

    def render(self) -> str:
        if not self.feedbacks:
            return '<section class="admin-panel" id="panel-feedback"><p class="empty-state">No feedback yet.</p></section>'
        items = "".join(self._render_item(f) for f in self.feedbacks)
        return f'<section class="admin-panel" id="panel-feedback"><ul class="feedback-list">{items}</ul></section>'


class StatsPanel(Component):
    """Headline numbers, growth and batch distribution tables, recent activity."""

    def __init__(self, stats: DashboardStats) -> None:
        self.stats = stats

    def _render_points(self, title: str, points) -> str:
        if not points:
            return ""
        rows = "".join(
            f"<tr><td>{self.escape(p.name)}</td><td>{p.value:g}</td></tr>" for p in points
        )
        return f'<table class="stats-table"><caption>{self.escape(title)}</caption><tbody>{rows}</tbody></table>'

    def render(self) -> str:
        if self.stats.is_empty:
            return '<section class="admin-panel" id="panel-dashboard"><p class="empty-state">Statistics are unavailable right now.</p></section>'
        cards = "".join(
            f'<div class="stat-card trend-{self.escape(c.trend)}">'
            f'<span class="stat-label">{self.escape(c.label)}</span>'
            f'<span class="stat-value">{self.escape(c.value)}</span>'
            f'<span class="stat-change">{c.change:+g}%</span></div>'
            for c in self.stats.stats
        )
        activity = "".join(
            f'<li class="activity-{self.escape(a.kind)}"><strong>{self.escape(a.user)}</strong> '
            f"{self.escape(a.action)} <time>{self.escape(a.time)}</time></li>"
            for a in self.stats.activity
        )
        activity_html = f'<h2>Recent activity</h2><ul class="activity-feed">{activity}</ul>' if activity else ""
        return f"""
        <section class="admin-panel" id="panel-dashboard">
            <div class="stat-cards">{cards}</div>
            {self._render_points("Growth", self.stats.growth)}
            {self._render_points("Students per batch", self.stats.batches)}
            {activity_html}
        </section>"""


class AdminConsole(Component):
    def __init__(
        self,
        tab: str,
        *,
        faqs: Sequence[FAQ] = (),
        inquiries: Sequence[Inquiry] = (),
        feedbacks: Sequence[Feedback] = (),
        tickets: Sequence[Ticket] = (),
        users: Sequence[User] = (),
        user_role: str = "student",
        stats: Optional[DashboardStats] = None,
        settings: Optional[SystemSettings] = None,
        staff: Sequence[User] = (),
        error: Optional[str] = None,
    ) -> None:
        self.tab = normalize_tab(tab)
        self.faqs = faqs
        self.inquiries = inquiries
        self.feedbacks = feedbacks
        self.tickets = tickets
        self.users = users
        self.user_role = user_role
        self.stats = stats or DashboardStats()
        self.settings = settings or SystemSettings()
        self.staff = staff
        self.error = error

    def _render_panel(self) -> str:
        if self.tab == "dashboard":
            return StatsPanel(self.stats).render()
        if self.tab == "inquiries":
            return InquiryAdminPanel(self.inquiries).render()
        if self.tab == "feedback":
            return FeedbackAdminPanel(self.feedbacks).render()
        if self.tab == "tickets":
            table = TicketTable(self.tickets, staff=True, assignees=self.staff, can_delete=True)
            return f'<section class="admin-panel" id="panel-tickets">{table.render()}</section>'
        if self.tab == "settings":
            return f'<section class="admin-panel" id="panel-settings">{SettingsForm(self.settings).render()}</section>'
        if self.tab == "users":
            return UserAdminPanel(self.users, role=self.user_role, batches=self.settings.batches).render()
        return FAQAdminPanel(self.faqs, self.settings.faq_categories).render()

    def render(self) -> str:
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        return f"""
        <h1>Admin</h1>
        {AdminTabs(self.tab).render()}
        {error_html}
        {self._render_panel()}"""
