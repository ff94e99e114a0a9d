"""FAQ list grouped by category (read-only view for signed-in users)."""

from typing import Dict, List

from backend.portal.faqs import FAQ

from ..base import Component


class FAQList(Component):
    def __init__(self, grouped: Dict[str, List[FAQ]]) -> None:
        self.grouped = grouped

    def render(self) -> str:
        if not self.grouped:
            return '<p class="empty-state">No FAQs published yet.</p>'
        sections = []
        for category, faqs in self.grouped.items():
            items = "".join(
                f'<details class="faq-item" id="faq-{self.escape(f.id)}">'
                f"<summary>{self.escape(f.question)}</summary>"
                f"<p>{self.escape(f.answer)}</p></details>"
                for f in faqs
            )
            sections.append(f'<section class="faq-category"><h2>{self.escape(category)}</h2>{items}</section>')
        return "".join(sections)
