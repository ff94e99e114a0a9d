"""
Student feedback service.

Students rate the course and may attach a file or a voice note (multipart,
same as tickets). Admins reply, delete and choose which entries are shown
publicly as testimonials. Reads degrade to an empty list; writes propagate.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
import logging

from .api import ApiClient, ApiError
from .tickets import Upload, voice_note_filename

logger = logging.getLogger("skillmount.portal")

FEEDBACK_CATEGORIES = ("Course Content", "Mentorship", "Platform", "Support", "Other")
RATINGS = (1, 2, 3, 4, 5)


@dataclass
class Feedback:
    id: str
    student_id: str
    student_name: str
    rating: int
    message: str
    date: str
    status: str
    category: str
    attachment_url: Optional[str] = None
    voice_url: Optional[str] = None
    is_public: bool = False
    admin_reply: Optional[str] = None


def feedback_from_dict(data: Mapping[str, Any]) -> Feedback:
    """Raises ValueError/TypeError on rows without a usable id or rating."""
    if data.get("id") in (None, ""):
        raise ValueError("missing_id")
    student = data.get("student")
    return Feedback(
        id=str(data["id"]),
        student_id=str(student) if student is not None else "N/A",
        student_name=str(data.get("student_name") or "Anonymous"),
        rating=int(data.get("rating") or 0),
        message=str(data.get("message") or ""),
        date=str(data.get("date") or ""),
        status=str(data.get("status") or "New"),
        category=str(data.get("category") or "Other"),
        attachment_url=data.get("attachment") or None,
        voice_url=data.get("voice_note") or None,
        is_public=bool(data.get("is_public", False)),
        admin_reply=data.get("admin_reply") or None,
    )


class FeedbackService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def _load(self, params: Optional[Dict[str, Any]] = None) -> List[Feedback]:
        try:
            body = self.client.get("/feedbacks/", params=params or {})
        except ApiError as exc:
            logger.warning("Failed to load feedback: status=%s", exc.status_code)
            return []
        rows = body.get("results", []) if isinstance(body, dict) else (body or [])
        items = []
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            try:
                items.append(feedback_from_dict(row))
            except (TypeError, ValueError):
                logger.warning("Skipping malformed feedback: id=%r", row.get("id"))
        return items

    def list(self) -> List[Feedback]:
        return self._load()

    def list_public(self) -> List[Feedback]:
        # Filter again locally; private entries must never reach the home page.
        return [f for f in self._load({"is_public": "true"}) if f.is_public]

    def create(
        self,
        *,
        rating: int,
        message: str,
        category: str = "",
        attachment: Optional[Upload] = None,
        voice_note: Optional[Upload] = None,
    ) -> None:
        if rating not in RATINGS:
            raise ValueError("invalid_rating")
        data = {"rating": str(rating), "message": message, "category": category or "Other"}
        files: Dict[str, Upload] = {}
        if attachment:
            files["attachment"] = attachment
        if voice_note:
            _name, content, mime = voice_note
            files["voice_note"] = (voice_note_filename("feedback", mime), content, mime)
        try:
            self.client.post("/feedbacks/", data=data, files=files or None)
        except ApiError as exc:
            logger.error("Feedback submission failed: status=%s", exc.status_code)
            raise

    def set_public(self, feedback_id: str, is_public: bool) -> None:
        try:
            self.client.patch(f"/feedbacks/{feedback_id}/", json={"is_public": is_public})
        except ApiError as exc:
            logger.error("Feedback %s visibility change failed: status=%s", feedback_id, exc.status_code)
            raise

    def reply(self, feedback_id: str, message: str) -> None:
        try:
            self.client.patch(f"/feedbacks/{feedback_id}/reply/", json={"admin_reply": message})
        except ApiError as exc:
            logger.error("Reply to feedback %s failed: status=%s", feedback_id, exc.status_code)
            raise

    def delete(self, feedback_id: str) -> None:
        try:
            self.client.delete(f"/feedbacks/{feedback_id}/")
        except ApiError as exc:
            logger.error("Delete of feedback %s failed: status=%s", feedback_id, exc.status_code)
            raise
