"""FAQ service. Reads are public and degrade to an empty list; admin writes propagate."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")


@dataclass
class FAQ:
    id: str
    question: str
    answer: str  # HTML from the rich text editor; rendered escaped
    category: str
    created_at: str = ""
    updated_at: str = ""


def faq_from_dict(data: Mapping[str, Any]) -> FAQ:
    return FAQ(
        id=str(data.get("id", "")),
        question=str(data.get("question") or ""),
        answer=str(data.get("answer") or ""),
        category=str(data.get("category") or ""),
        created_at=str(data.get("created_at") or data.get("createdAt") or ""),
        updated_at=str(data.get("updated_at") or data.get("updatedAt") or ""),
    )


def group_by_category(faqs: List[FAQ]) -> Dict[str, List[FAQ]]:
    """Group FAQs by category, keeping first-seen category order."""
    groups: Dict[str, List[FAQ]] = {}
    for faq in faqs:
        groups.setdefault(faq.category or "General", []).append(faq)
    return groups


class FAQService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self) -> List[FAQ]:
        try:
            rows = self.client.get("/faqs/") or []
        except ApiError as exc:
            logger.warning("Failed to load FAQs: status=%s", exc.status_code)
            return []
        return [faq_from_dict(row) for row in rows if isinstance(row, Mapping)]

    def create(self, *, question: str, answer: str, category: str) -> None:
        try:
            self.client.post("/faqs/", json={"question": question, "answer": answer, "category": category})
        except ApiError as exc:
            logger.error("FAQ create failed: status=%s", exc.status_code)
            raise

    def update(self, faq_id: str, **changes: str) -> None:
        try:
            self.client.patch(f"/faqs/{faq_id}/", json=changes)
        except ApiError as exc:
            logger.error("FAQ update %s failed: status=%s", faq_id, exc.status_code)
            raise

    def delete(self, faq_id: str) -> None:
        try:
            self.client.delete(f"/faqs/{faq_id}/")
        except ApiError as exc:
            logger.error("FAQ delete %s failed: status=%s", faq_id, exc.status_code)
            raise
