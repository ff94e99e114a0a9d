"""Support ticket service (remote API wrapper)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")

TICKET_PRIORITIES = ("Low", "Medium", "High", "Urgent")
TICKET_CATEGORIES = ("General", "Technical", "Billing", "Academic", "Other")
TICKET_STATUSES = ("Open", "Pending", "In Progress", "Closed", "Reopened")
# Statuses a user may set explicitly (close/reopen flow).
SETTABLE_STATUSES = ("Open", "Closed", "Reopened")


@dataclass
class TicketMessage:
    id: str
    sender_name: str
    message: str
    timestamp: str
    attachment: Optional[str] = None
    voice_note: Optional[str] = None


@dataclass
class Ticket:
    id: str
    title: str
    description: str
    category: str
    priority: str
    status: str
    created_at: str
    student_name: str = ""
    student_email: str = ""
    assigned_to: Optional[int] = None
    assigned_to_name: Optional[str] = None
    messages: List[TicketMessage] = field(default_factory=list)


def ticket_from_dict(data: Mapping[str, Any]) -> Ticket:
    student = data.get("student") or {}
    assignee = data.get("assigned_to_details") or {}
    messages = [
        TicketMessage(
            id=str(m.get("id", "")),
            sender_name=str(m.get("sender_name") or ""),
            message=str(m.get("message") or ""),
            timestamp=str(m.get("timestamp") or ""),
            attachment=m.get("attachment"),
            voice_note=m.get("voice_note"),
        )
        for m in (data.get("messages") or [])
        if isinstance(m, Mapping)
    ]
    return Ticket(
        id=str(data.get("id", "")),
        title=str(data.get("title") or data.get("subject") or ""),
        description=str(data.get("description") or ""),
        category=str(data.get("category") or "General"),
        priority=str(data.get("priority") or "Medium"),
        status=str(data.get("status") or "Open"),
        created_at=str(data.get("created_at") or ""),
        student_name=str(student.get("name") or "") if isinstance(student, Mapping) else "",
        student_email=str(student.get("email") or "") if isinstance(student, Mapping) else "",
        assigned_to=data.get("assigned_to"),
        assigned_to_name=(assignee.get("name") if isinstance(assignee, Mapping) else None),
        messages=messages,
    )


def voice_note_filename(prefix: str, mime_type: Optional[str]) -> str:
    """Pick a file extension for an uploaded voice note based on its MIME type."""
    mime = (mime_type or "").lower()
    ext = "wav"
    if "webm" in mime:
        ext = "webm"
    elif "mp4" in mime:
        ext = "mp4"
    elif "ogg" in mime:
        ext = "ogg"
    return f"{prefix}_voice.{ext}"


Upload = Tuple[str, bytes, str]  # (filename, content, mime type)


class TicketService:
    """Tickets are filtered by role on the API side (students see their own)."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self, params: Optional[Dict[str, Any]] = None) -> List[Ticket]:
        try:
            body = self.client.get("/tickets/", params=params or {})
        except ApiError as exc:
            logger.error("Failed to load tickets: status=%s", exc.status_code)
            raise
        rows = body.get("results", []) if isinstance(body, dict) else (body or [])
        return [ticket_from_dict(row) for row in rows if isinstance(row, Mapping)]

    def get(self, ticket_id: str) -> Optional[Ticket]:
        try:
            body = self.client.get(f"/tickets/{ticket_id}/")
        except ApiError as exc:
            logger.warning("Failed to load ticket %s: status=%s", ticket_id, exc.status_code)
            return None
        return ticket_from_dict(body) if isinstance(body, Mapping) else None

    def create(
        self,
        *,
        title: str,
        description: str,
        priority: str,
        category: str = "",
        attachment: Optional[Upload] = None,
        voice_note: Optional[Upload] = None,
    ) -> Optional[str]:
        """Create a ticket; returns its id for the confirmation message."""
        data = {
            "title": title,
            "description": description,
            "priority": priority,
            "category": category or "General",
        }
        files: Dict[str, Upload] = {}
        if attachment:
            files["attachment"] = attachment
        if voice_note:
            _name, content, mime = voice_note
            files["voice_note"] = (voice_note_filename("ticket", mime), content, mime)
        try:
            body = self.client.post("/tickets/", data=data, files=files or None)
        except ApiError as exc:
            logger.error("Ticket creation failed: status=%s", exc.status_code)
            raise
        if isinstance(body, Mapping) and body.get("id") is not None:
            return str(body["id"])
        return None

    def reply(
        self,
        ticket_id: str,
        message: str,
        *,
        voice_note: Optional[Upload] = None,
        attachment: Optional[Upload] = None,
    ) -> None:
        files: Dict[str, Upload] = {}
        if voice_note:
            _name, content, mime = voice_note
            files["voice_note"] = (voice_note_filename("reply", mime), content, mime)
        if attachment:
            files["attachment"] = attachment
        try:
            self.client.post(f"/tickets/{ticket_id}/reply/", data={"message": message}, files=files or None)
        except ApiError as exc:
            logger.error("Reply to ticket %s failed: status=%s", ticket_id, exc.status_code)
            raise

    def update_status(self, ticket_id: str, status: str) -> None:
        if status not in SETTABLE_STATUSES:
            raise ValueError("invalid_status")
        try:
            self.client.post(f"/tickets/{ticket_id}/update-status/", json={"status": status})
        except ApiError as exc:
            logger.error("Status update for ticket %s failed: status=%s", ticket_id, exc.status_code)
            raise

    def delete(self, ticket_id: str) -> None:
        try:
            self.client.delete(f"/tickets/{ticket_id}/")
        except ApiError as exc:
            logger.error("Delete of ticket %s failed: status=%s", ticket_id, exc.status_code)
            raise

    def assign(self, ticket_id: str, user_id: Optional[int]) -> None:
        """Assign to a staff member, or unassign with None."""
        try:
            self.client.post(f"/tickets/{ticket_id}/assign/", json={"user_id": user_id})
        except ApiError as exc:
            logger.error("Assignment of ticket %s failed: status=%s", ticket_id, exc.status_code)
            raise
