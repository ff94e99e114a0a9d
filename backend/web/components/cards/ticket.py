"""
Ticket components.

`TicketTable` lists tickets for students (own tickets) and for staff (inbox
with status/assignment controls). `TicketDetail` shows the conversation of a
single ticket together with the reply form.
"""

from typing import Iterable, List, Sequence

from backend.identity_access.domain import User
from backend.portal.tickets import SETTABLE_STATUSES, Ticket

from ..base import Component
from ..forms.submit import SubmitButton


def _status_badge(status: str) -> str:
    slug = status.lower().replace(" ", "-")
    return f'<span class="badge badge-{Component.escape(slug)}">{Component.escape(status)}</span>'


class TicketTable(Component):
    """
    Args:
        tickets: Tickets to show, already filtered by the API.
        staff: Render inbox controls (status, assignment) for tutors/admins.
        assignees: Staff members offered in the assignment dropdown.
        can_delete: Show the delete action (super_admin only).
    """

    def __init__(
        self,
        tickets: Iterable[Ticket],
        *,
        staff: bool = False,
        assignees: Sequence[User] = (),
        can_delete: bool = False,
        empty_text: str = "No tickets yet.",
    ) -> None:
        self.tickets: List[Ticket] = list(tickets)
        self.staff = staff
        self.assignees = list(assignees)
        self.can_delete = can_delete
        self.empty_text = empty_text

    def render(self) -> str:
        if not self.tickets:
            return f'<p class="empty-state">{self.escape(self.empty_text)}</p>'
        head = "<th>Subject</th><th>Category</th><th>Priority</th><th>Status</th><th>Created</th>"
        if self.staff:
            head = "<th>Student</th>" + head + "<th>Assigned</th><th>Actions</th>"
        rows = "".join(self._render_row(t) for t in self.tickets)
        return f"""
        <table class="ticket-table">
            <thead><tr>{head}</tr></thead>
            <tbody>{rows}</tbody>
        </table>"""

    def _render_row(self, ticket: Ticket) -> str:
        tid = self.escape(ticket.id)
        cells = (
            f'<td><a href="/tickets/{tid}">{self.escape(ticket.title)}</a></td>'
            f"<td>{self.escape(ticket.category)}</td>"
            f"<td>{self.escape(ticket.priority)}</td>"
            f"<td>{_status_badge(ticket.status)}</td>"
            f"<td>{self.escape(ticket.created_at[:10])}</td>"
        )
        if not self.staff:
            return f'<tr id="ticket-{tid}">{cells}</tr>'
        student = f"<td>{self.escape(ticket.student_name or ticket.student_email)}</td>"
        assigned = f"<td>{self.escape(ticket.assigned_to_name or 'Unassigned')}</td>"
        return f'<tr id="ticket-{tid}">{student}{cells}{assigned}<td>{self._render_actions(ticket)}</td></tr>'

    def _render_actions(self, ticket: Ticket) -> str:
        tid = self.escape(ticket.id)
        status_opts = "".join(
            f'<option value="{s}"{" selected" if s == ticket.status else ""}>{s}</option>' for s in SETTABLE_STATUSES
        )
        assign_opts = ['<option value="">Unassigned</option>']
        for user in self.assignees:
            selected = " selected" if ticket.assigned_to is not None and str(ticket.assigned_to) == user.id else ""
            assign_opts.append(f'<option value="{self.escape(user.id)}"{selected}>{self.escape(user.name)}</option>')
        parts = [
            f'<form method="post" action="/tickets/{tid}/status" class="inline-form">'
            f'<select name="status" aria-label="Status">{status_opts}</select>'
            f'{SubmitButton("Update", variant="secondary").render()}</form>',
            f'<form method="post" action="/tickets/{tid}/assign" class="inline-form">'
            f'<select name="user_id" aria-label="Assign to">{"".join(assign_opts)}</select>'
            f'{SubmitButton("Assign", variant="secondary").render()}</form>',
        ]
        if self.can_delete:
            parts.append(
                f'<form method="post" action="/tickets/{tid}/delete" class="inline-form">'
                f'{SubmitButton("Delete", variant="danger").render()}</form>'
            )
        return "".join(parts)


class TicketDetail(Component):
    def __init__(self, ticket: Ticket, *, reply_form_html: str = "", can_reopen: bool = True) -> None:
        self.ticket = ticket
        self.reply_form_html = reply_form_html
        self.can_reopen = can_reopen

    def render(self) -> str:
        t = self.ticket
        messages = "".join(self._render_message(m) for m in t.messages) or (
            '<p class="empty-state">No replies yet.</p>'
        )
        return f"""
        <article class="ticket-detail" id="ticket-{self.escape(t.id)}">
            <header>
                <h1>{self.escape(t.title)}</h1>
                <p class="ticket-meta">{_status_badge(t.status)} {self.escape(t.priority)} &middot; {self.escape(t.category)}</p>
            </header>
            <p class="ticket-description">{self.escape(t.description)}</p>
            <section class="ticket-messages" aria-label="Conversation">{messages}</section>
            {self._render_status_toggle()}
            {self.reply_form_html}
        </article>"""

    def _render_message(self, message) -> str:
        extras = []
        if message.attachment:
            extras.append(f'<a href="{self.escape(message.attachment)}" class="attachment">Attachment</a>')
        if message.voice_note:
            extras.append(f'<audio controls src="{self.escape(message.voice_note)}"></audio>')
        return f"""
            <div class="ticket-message">
                <div class="message-meta"><strong>{self.escape(message.sender_name)}</strong> <time>{self.escape(message.timestamp)}</time></div>
                <p>{self.escape(message.message)}</p>
                {''.join(extras)}
            </div>"""

    def _render_status_toggle(self) -> str:
        """Close an open ticket, or reopen a closed one."""
        if not self.can_reopen:
            return ""
        target = "Reopened" if self.ticket.status == "Closed" else "Closed"
        label = "Reopen ticket" if target == "Reopened" else "Close ticket"
        return (
            f'<form method="post" action="/tickets/{self.escape(self.ticket.id)}/close" class="inline-form">'
            f'<input type="hidden" name="status" value="{target}">'
            f'{SubmitButton(label, variant="secondary").render()}</form>'
        )
