"""Public testimonials: feedback entries an admin marked as public."""

from typing import Iterable, List

from backend.portal.feedback import Feedback

from ..base import Component


class StudentTestimonials(Component):
    def __init__(self, feedbacks: Iterable[Feedback], limit: int = 6) -> None:
        self.feedbacks: List[Feedback] = list(feedbacks)[:limit]

    def render(self) -> str:
        if not self.feedbacks:
            return ""
        items = "".join(
            f'<figure class="testimonial">'
            f'<blockquote>{self.escape(f.message)}</blockquote>'
            f'<figcaption>{self.escape(f.student_name)} '
            f'<span class="rating" aria-label="{f.rating} out of 5">{"★" * min(f.rating, 5)}</span></figcaption>'
            "</figure>"
            for f in self.feedbacks
        )
        return f'<section class="testimonials" aria-label="What students say"><h2>What students say</h2>{items}</section>'
