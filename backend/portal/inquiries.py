"""Contact inquiry service (public create, admin triage)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")

INQUIRY_STATUSES = ("New", "Read", "Replied")


@dataclass
class Inquiry:
    id: str
    name: str
    email: str
    phone: str
    message: str
    date: str
    status: str
    subject: Optional[str] = None


def inquiry_from_dict(data: Mapping[str, Any]) -> Inquiry:
    return Inquiry(
        id=str(data.get("id", "")),
        name=str(data.get("name") or ""),
        email=str(data.get("email") or ""),
        phone=str(data.get("phone") or ""),
        message=str(data.get("message") or ""),
        date=str(data.get("date") or data.get("created_at") or ""),
        status=str(data.get("status") or "New"),
        subject=data.get("subject") or None,
    )


class InquiryService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self) -> List[Inquiry]:
        try:
            rows = self.client.get("/inquiries/") or []
        except ApiError as exc:
            logger.warning("Failed to load inquiries: status=%s", exc.status_code)
            return []
        return [inquiry_from_dict(row) for row in rows if isinstance(row, Mapping)]

    def create(self, *, name: str, email: str, phone: str, message: str, subject: str = "") -> None:
        payload = {"name": name, "email": email, "phone": phone, "message": message}
        if subject:
            payload["subject"] = subject
        try:
            self.client.post("/inquiries/", json=payload)
        except ApiError as exc:
            logger.error("Inquiry create failed: status=%s", exc.status_code)
            raise

    def delete(self, inquiry_id: str) -> None:
        try:
            self.client.delete(f"/inquiries/{inquiry_id}/")
        except ApiError as exc:
            logger.error("Inquiry delete %s failed: status=%s", inquiry_id, exc.status_code)
            raise

    def mark_as_read(self, inquiry_id: str) -> None:
        try:
            self.client.patch(f"/inquiries/{inquiry_id}/", json={"status": "Read"})
        except ApiError as exc:
            logger.error("Inquiry update %s failed: status=%s", inquiry_id, exc.status_code)
            raise
