"""
Notification list.

Links stored with old admin paths are rewritten through `fix_link` before
rendering so they land on the current admin tabs.
"""

from typing import Iterable, List

from backend.portal.notifications import Notification, fix_link

from ..base import Component
from ..forms.submit import SubmitButton


class NotificationList(Component):
    def __init__(self, notifications: Iterable[Notification]) -> None:
        self.notifications: List[Notification] = list(notifications)

    def render(self) -> str:
        if not self.notifications:
            return '<p class="empty-state">You are all caught up.</p>'
        unread = any(not n.is_read for n in self.notifications)
        mark_all = (
            '<form method="post" action="/notifications/read-all" class="inline-form">'
            f'{SubmitButton("Mark all as read", variant="secondary").render()}</form>'
            if unread
            else ""
        )
        items = "".join(self._render_item(n) for n in self.notifications)
        return f"""
        <section class="notification-list">
            {mark_all}
            <ul>{items}</ul>
        </section>"""

    def _render_item(self, n: Notification) -> str:
        css = self.classes("notification", unread=not n.is_read)
        action = ""
        if not n.is_read:
            action = (
                f'<form method="post" action="/notifications/{self.escape(n.id)}/read" class="inline-form">'
                f'{SubmitButton("Mark read", variant="link").render()}</form>'
            )
        return (
            f'<li class="{css}">'
            f'<a href="{self.escape(fix_link(n.link))}"><strong>{self.escape(n.title)}</strong></a>'
            f"<p>{self.escape(n.message)}</p>"
            f'<time>{self.escape(n.created_at)}</time>{action}</li>'
        )
