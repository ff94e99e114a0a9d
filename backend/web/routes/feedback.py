"""
Student feedback page. Only students reach it (routing table).
"""
from __future__ import annotations

from typing import Optional
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.portal.api import ApiError
from backend.portal.feedback import FEEDBACK_CATEGORIES, RATINGS, FeedbackService

from ..components import FeedbackForm
from ..pages import api_client, layout_response, read_upload, see_other

feedback_router = APIRouter(tags=["Feedback"])
logger = logging.getLogger("skillmount.web.feedback")


def _render_form(request: Request, *, values=None, error: Optional[str] = None, status_code: int = 200, sent: bool = False):
    form = FeedbackForm(values=values, error=error, sent=sent)
    return layout_response(request, "Feedback", form.render(), status_code=status_code)


@feedback_router.get("/feedback", response_class=HTMLResponse)
async def feedback_page(request: Request, sent: Optional[str] = None):
    return _render_form(request, sent=bool(sent))


@feedback_router.post("/feedback", response_class=HTMLResponse)
async def feedback_submit(request: Request):
    form = await request.form()
    values = {key: str(form.get(key) or "").strip() for key in ("rating", "category", "message")}
    try:
        rating = int(values["rating"])
    except ValueError:
        rating = 0
    if rating not in RATINGS:
        return _render_form(request, values=values, error="Choose a rating from 1 to 5.", status_code=400)
    if not values["message"]:
        return _render_form(request, values=values, error="Tell us a little about your experience.", status_code=400)
    category = values["category"] if values["category"] in FEEDBACK_CATEGORIES else ""
    try:
        FeedbackService(api_client(request)).create(
            rating=rating,
            message=values["message"],
            category=category,
            attachment=await read_upload(form.get("attachment")),
            voice_note=await read_upload(form.get("voice_note")),
        )
    except ApiError as exc:
        error = exc.detail if exc.status_code and exc.detail else "Feedback could not be sent. Please try again."
        return _render_form(request, values=values, error=error, status_code=502)
    logger.info("Feedback submitted: rating=%s", rating)
    return see_other("/feedback?sent=1")
