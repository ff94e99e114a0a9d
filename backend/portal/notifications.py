"""Notification service. Every call degrades silently; a missed badge is not an error."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")

NOTIFICATION_TYPES = ("ticket_reply", "ticket_create", "system")


@dataclass
class Notification:
    id: int
    title: str
    message: str
    is_read: bool
    notification_type: str
    created_at: str
    link: Optional[str] = None


def notification_from_dict(data: Mapping[str, Any]) -> Notification:
    return Notification(
        id=int(data.get("id", 0)),
        title=str(data.get("title") or ""),
        message=str(data.get("message") or ""),
        is_read=bool(data.get("is_read", False)),
        notification_type=str(data.get("notification_type") or "system"),
        created_at=str(data.get("created_at") or ""),
        link=data.get("link") or None,
    )


def fix_link(link: Optional[str]) -> str:
    """Rewrite links emitted by older backend versions to current admin tabs."""
    if not link:
        return "/"
    if "/admin/tickets" in link:
        return link.replace("/admin/tickets?", "/admin?tab=tickets&").replace("/admin/tickets", "/admin?tab=tickets")
    if "/admin/support" in link:
        return "/admin?tab=inquiries"
    return link


class NotificationService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self) -> List[Notification]:
        try:
            rows = self.client.get("/notifications/") or []
        except ApiError as exc:
            logger.warning("Failed to fetch notifications: status=%s", exc.status_code)
            return []
        notifications = []
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            try:
                notifications.append(notification_from_dict(row))
            except (TypeError, ValueError):
                logger.warning("Skipping malformed notification: id=%r", row.get("id"))
        return notifications

    def unread_count(self) -> int:
        return sum(1 for n in self.list() if not n.is_read)

    def mark_as_read(self, notification_id: int) -> None:
        try:
            self.client.patch(f"/notifications/{notification_id}/mark_read/")
        except ApiError as exc:
            logger.warning("Failed to mark notification %s as read: status=%s", notification_id, exc.status_code)

    def mark_all_as_read(self) -> None:
        try:
            self.client.patch("/notifications/mark_all_read/")
        except ApiError as exc:
            logger.warning("Failed to mark all notifications as read: status=%s", exc.status_code)
