"""
Admin console routes (super_admin only, enforced by the routing table).

Each tab loads only the data it shows. Mutations follow Post/Redirect/Get;
failures re-render the tab with the error (400 for bad input, 502 when the
API refuses).
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.identity_access.domain import ONBOARDING_ROLES
from backend.portal.accounts import UserService
from backend.portal.api import ApiError
from backend.portal.faqs import FAQService
from backend.portal.feedback import FeedbackService
from backend.portal.inquiries import InquiryService
from backend.portal.settings import SettingsService, SystemSettings, parse_lines
from backend.portal.stats import StatsService
from backend.portal.tickets import TicketService

from ..components import AdminConsole
from ..components.admin import normalize_tab
from ..components.forms.admin_forms import MANAGED_ROLES, SETTINGS_LABELS, USER_STATUSES
from ..pages import api_client, get_auth, layout_response, see_other

admin_router = APIRouter(tags=["Admin"])
logger = logging.getLogger("skillmount.web.admin")


def _render_console(
    request: Request,
    tab: Optional[str],
    *,
    error: Optional[str] = None,
    status_code: int = 200,
    flash=None,
    user_role: Optional[str] = None,
):
    client = api_client(request)
    tab = normalize_tab(tab)
    data = {}
    settings = SettingsService(client).get()
    if tab == "dashboard":
        data["stats"] = StatsService(client).dashboard()
    elif tab == "feedback":
        data["feedbacks"] = FeedbackService(client).list()
    elif tab == "faqs":
        data["faqs"] = FAQService(client).list()
    elif tab == "inquiries":
        data["inquiries"] = InquiryService(client).list()
    elif tab == "tickets":
        try:
            data["tickets"] = TicketService(client).list()
        except ApiError as exc:
            error = error or "Tickets could not be loaded."
            status_code = 502 if status_code == 200 else status_code
        data["staff"] = UserService(client).list_by_role("tutor")
    elif tab == "users":
        role = user_role if user_role in MANAGED_ROLES else "student"
        data["users"] = UserService(client).list_by_role(role)
        data["user_role"] = role
    console = AdminConsole(tab, settings=settings, error=error, **data)
    return layout_response(request, "Admin", console.render(), status_code=status_code, flash=flash)


def _api_error_text(exc: ApiError) -> str:
    if exc.status_code and exc.detail:
        return exc.detail
    return "The request was rejected by the server."


@admin_router.get("/admin", response_class=HTMLResponse)
async def admin_console(
    request: Request, tab: Optional[str] = None, saved: Optional[str] = None, role: Optional[str] = None
):
    return _render_console(request, tab, flash="Changes saved." if saved else None, user_role=role)


# --- FAQs -------------------------------------------------------------------------

async def _faq_fields(request: Request):
    form = await request.form()
    return {key: str(form.get(key) or "").strip() for key in ("question", "answer", "category")}


@admin_router.post("/admin/faqs", response_class=HTMLResponse)
async def faq_create(request: Request):
    fields = await _faq_fields(request)
    if not all(fields.values()):
        return _render_console(request, "faqs", error="Question, answer and category are required.", status_code=400)
    try:
        FAQService(api_client(request)).create(**fields)
    except ApiError as exc:
        return _render_console(request, "faqs", error=_api_error_text(exc), status_code=502)
    return see_other("/admin?tab=faqs&saved=1")


@admin_router.post("/admin/faqs/{faq_id}", response_class=HTMLResponse)
async def faq_update(request: Request, faq_id: str):
    fields = await _faq_fields(request)
    changes = {key: value for key, value in fields.items() if value}
    if not changes:
        return _render_console(request, "faqs", error="Nothing to update.", status_code=400)
    try:
        FAQService(api_client(request)).update(faq_id, **changes)
    except ApiError as exc:
        return _render_console(request, "faqs", error=_api_error_text(exc), status_code=502)
    return see_other("/admin?tab=faqs&saved=1")


@admin_router.post("/admin/faqs/{faq_id}/delete", response_class=HTMLResponse)
async def faq_delete(request: Request, faq_id: str):
    try:
        FAQService(api_client(request)).delete(faq_id)
    except ApiError as exc:
        return _render_console(request, "faqs", error=_api_error_text(exc), status_code=502)
    logger.info("FAQ deleted: id=%s", faq_id)
    return see_other("/admin?tab=faqs&saved=1")


# --- Inquiries --------------------------------------------------------------------

@admin_router.post("/admin/inquiries/{inquiry_id}/read", response_class=HTMLResponse)
async def inquiry_mark_read(request: Request, inquiry_id: str):
    try:
        InquiryService(api_client(request)).mark_as_read(inquiry_id)
    except ApiError as exc:
        return _render_console(request, "inquiries", error=_api_error_text(exc), status_code=502)
    return see_other("/admin?tab=inquiries")


@admin_router.post("/admin/inquiries/{inquiry_id}/delete", response_class=HTMLResponse)
async def inquiry_delete(request: Request, inquiry_id: str):
    try:
        InquiryService(api_client(request)).delete(inquiry_id)
    except ApiError as exc:
        return _render_console(request, "inquiries", error=_api_error_text(exc), status_code=502)
    logger.info("Inquiry deleted: id=%s", inquiry_id)
    return see_other("/admin?tab=inquiries&saved=1")


# --- Settings ---------------------------------------------------------------------

@admin_router.post("/admin/settings", response_class=HTMLResponse)
async def settings_update(request: Request):
    form = await request.form()
    settings = SystemSettings(**{name: parse_lines(str(form.get(name) or "")) for name in SETTINGS_LABELS})
    if not settings.batches:
        return _render_console(request, "settings", error="At least one batch is required.", status_code=400)
    if not SettingsService(api_client(request)).update(settings):
        return _render_console(request, "settings", error="Settings could not be saved.", status_code=502)
    logger.info("System settings updated")
    return see_other("/admin?tab=settings&saved=1")


# --- Users ------------------------------------------------------------------------

def _users_tab(role: Optional[str]) -> str:
    role = role if role in MANAGED_ROLES else "student"
    return "/admin?" + urlencode({"tab": "users", "role": role, "saved": "1"})


@admin_router.post("/admin/users", response_class=HTMLResponse)
async def user_create(request: Request):
    form = await request.form()
    fields = {key: str(form.get(key) or "").strip() for key in ("name", "email", "phone", "batch", "role")}
    role = fields["role"]
    if role not in MANAGED_ROLES:
        return _render_console(request, "users", error="Unknown role.", status_code=400)
    if not fields["name"] or not fields["email"]:
        return _render_console(request, "users", error="Name and email are required.", status_code=400, user_role=role)
    if role != "student":
        fields["batch"] = ""
    try:
        UserService(api_client(request)).create(fields)
    except ApiError as exc:
        return _render_console(request, "users", error=_api_error_text(exc), status_code=502, user_role=role)
    logger.info("User created: role=%s", role)
    return see_other(_users_tab(role))


@admin_router.post("/admin/users/{user_id}", response_class=HTMLResponse)
async def user_update(request: Request, user_id: str, role: Optional[str] = None):
    form = await request.form()
    changes = {key: str(form.get(key) or "").strip() for key in ("name", "phone", "status")}
    changes = {key: value for key, value in changes.items() if value}
    if changes.get("status") and changes["status"] not in USER_STATUSES:
        return _render_console(request, "users", error="Unknown account status.", status_code=400, user_role=role)
    if not changes:
        return _render_console(request, "users", error="Nothing to update.", status_code=400, user_role=role)
    try:
        UserService(api_client(request)).update(user_id, changes)
    except ApiError as exc:
        return _render_console(request, "users", error=_api_error_text(exc), status_code=502, user_role=role)
    return see_other(_users_tab(role))


@admin_router.post("/admin/users/{user_id}/delete", response_class=HTMLResponse)
async def user_delete(request: Request, user_id: str, role: Optional[str] = None):
    auth = get_auth(request)
    if auth.user is not None and str(auth.user.id) == user_id:
        return _render_console(request, "users", error="You cannot delete your own account.", status_code=400, user_role=role)
    try:
        UserService(api_client(request)).delete(user_id)
    except ApiError as exc:
        return _render_console(request, "users", error=_api_error_text(exc), status_code=502, user_role=role)
    logger.info("User deleted: id=%s", user_id)
    return see_other(_users_tab(role))


# --- Feedback ---------------------------------------------------------------------

@admin_router.post("/admin/feedback/{feedback_id}/reply", response_class=HTMLResponse)
async def feedback_reply(request: Request, feedback_id: str):
    form = await request.form()
    reply = str(form.get("reply") or "").strip()
    if not reply:
        return _render_console(request, "feedback", error="Write a reply first.", status_code=400)
    try:
        FeedbackService(api_client(request)).reply(feedback_id, reply)
    except ApiError as exc:
        return _render_console(request, "feedback", error=_api_error_text(exc), status_code=502)
    return see_other("/admin?tab=feedback&saved=1")


@admin_router.post("/admin/feedback/{feedback_id}/visibility", response_class=HTMLResponse)
async def feedback_visibility(request: Request, feedback_id: str):
    form = await request.form()
    public = str(form.get("public") or "").lower()
    if public not in ("true", "false"):
        return _render_console(request, "feedback", error="Unknown visibility.", status_code=400)
    try:
        FeedbackService(api_client(request)).set_public(feedback_id, public == "true")
    except ApiError as exc:
        return _render_console(request, "feedback", error=_api_error_text(exc), status_code=502)
    return see_other("/admin?tab=feedback&saved=1")


@admin_router.post("/admin/feedback/{feedback_id}/delete", response_class=HTMLResponse)
async def feedback_delete(request: Request, feedback_id: str):
    try:
        FeedbackService(api_client(request)).delete(feedback_id)
    except ApiError as exc:
        return _render_console(request, "feedback", error=_api_error_text(exc), status_code=502)
    logger.info("Feedback deleted: id=%s", feedback_id)
    return see_other("/admin?tab=feedback&saved=1")


# --- Impersonation ----------------------------------------------------------------

@admin_router.post("/admin/impersonate/{user_id}", response_class=HTMLResponse)
async def impersonate(request: Request, user_id: str):
    """View the portal as another user; the banner offers the way back."""
    target = UserService(api_client(request)).get(user_id)
    if target is None:
        return _render_console(request, "users", error="User not found.", status_code=404)
    if target.role not in ONBOARDING_ROLES:
        return _render_console(request, "users", error="Only student, tutor or affiliate accounts can be viewed.", status_code=400)
    try:
        get_auth(request).start_impersonation(target)
    except PermissionError:
        return _render_console(request, "users", error="Impersonation requires an administrator.", status_code=403)
    return see_other("/")
