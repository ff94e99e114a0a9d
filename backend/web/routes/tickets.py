"""
Support ticket routes.

Students see and create their own tickets (the API scopes the list by
token). Tutors and super admins work the inbox at /tickets/manage; the role
restrictions for the inbox actions live in the routing table, so handlers
only deal with input validation and API failures.

Failed mutations re-render the page with the API error and status 502.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.identity_access.domain import SUPER_ADMIN
from backend.portal.accounts import UserService
from backend.portal.api import ApiError
from backend.portal.settings import SettingsService
from backend.portal.tickets import (
    SETTABLE_STATUSES,
    TICKET_CATEGORIES,
    TICKET_PRIORITIES,
    TICKET_STATUSES,
    TicketService,
)

from ..components import TicketCreateForm, TicketDetail, TicketReplyForm, TicketTable
from ..pages import api_client, get_auth, layout_response, read_upload, see_other

tickets_router = APIRouter(tags=["Tickets"])
logger = logging.getLogger("skillmount.web.tickets")

STAFF_ROLES = ("tutor", SUPER_ADMIN)
MANAGE_PATH = "/tickets/manage"
# Owners may only close or reopen their own ticket.
OWNER_STATUSES = ("Closed", "Reopened")


def _api_failure_text(exc: ApiError) -> str:
    # Transport failures (status 0) carry only the exception name.
    if exc.status_code and exc.detail:
        return exc.detail
    return "The support service is unavailable. Please try again."


def _is_staff(request: Request) -> bool:
    user = get_auth(request).user
    return bool(user and user.role in STAFF_ROLES)


# --- Student views ----------------------------------------------------------------

def _render_my_tickets(request: Request, *, error: Optional[str] = None, values=None, status_code: int = 200, flash=None):
    try:
        tickets = TicketService(api_client(request)).list()
        list_html = TicketTable(tickets).render()
    except ApiError as exc:
        list_html = f'<p class="form-error" role="alert">{TicketTable.escape(_api_failure_text(exc))}</p>'
        status_code = 502 if status_code == 200 else status_code
    form = TicketCreateForm(TICKET_CATEGORIES, values=values, error=error).render()
    content = f"<h1>My tickets</h1>{form}<section class=\"ticket-list\">{list_html}</section>"
    return layout_response(request, "My tickets", content, status_code=status_code, flash=flash)


@tickets_router.get("/tickets", response_class=HTMLResponse)
async def my_tickets(request: Request, created: Optional[str] = None):
    if _is_staff(request):
        return see_other(MANAGE_PATH)
    flash = f"Ticket #{created} created." if created else None
    return _render_my_tickets(request, flash=flash)


@tickets_router.post("/tickets", response_class=HTMLResponse)
async def create_ticket(request: Request):
    form = await request.form()
    values = {
        "title": str(form.get("title") or "").strip(),
        "description": str(form.get("description") or "").strip(),
        "priority": str(form.get("priority") or "Medium"),
        "category": str(form.get("category") or ""),
    }
    if not values["title"] or not values["description"]:
        return _render_my_tickets(request, error="Subject and description are required.", values=values, status_code=400)
    if values["priority"] not in TICKET_PRIORITIES:
        return _render_my_tickets(request, error="Please choose a valid priority.", values=values, status_code=400)

    try:
        ticket_id = TicketService(api_client(request)).create(
            title=values["title"],
            description=values["description"],
            priority=values["priority"],
            category=values["category"],
            attachment=await read_upload(form.get("attachment")),
            voice_note=await read_upload(form.get("voice_note")),
        )
    except ApiError as exc:
        return _render_my_tickets(request, error=_api_failure_text(exc), values=values, status_code=502)
    logger.info("Ticket created: id=%s", ticket_id)
    return see_other(f"/tickets?created={ticket_id}" if ticket_id else "/tickets")


# --- Staff inbox ------------------------------------------------------------------
# Declared before /tickets/{ticket_id} so "manage" is not taken for an id.

def _render_inbox(request: Request, *, error: Optional[str] = None, status_code: int = 200):
    client = api_client(request)
    status_filter = request.query_params.get("status")
    params = {"status": status_filter} if status_filter in TICKET_STATUSES else None
    user = get_auth(request).user
    try:
        tickets = TicketService(client).list(params)
    except ApiError as exc:
        tickets = []
        error = error or _api_failure_text(exc)
        status_code = 502 if status_code == 200 else status_code
    assignees = UserService(client).list_by_role("tutor")
    table = TicketTable(
        tickets,
        staff=True,
        assignees=assignees,
        can_delete=user.role == SUPER_ADMIN,
        empty_text="The inbox is empty.",
    ).render()
    filters = "".join(
        f'<a href="{MANAGE_PATH}?{urlencode({"status": s})}" class="filter{" active" if s == status_filter else ""}">{s}</a> '
        for s in TICKET_STATUSES
    )
    error_html = f'<div class="form-error" role="alert">{TicketTable.escape(error)}</div>' if error else ""
    content = f"""
        <h1>Ticket inbox</h1>
        <nav class="ticket-filters"><a href="{MANAGE_PATH}" class="filter">All</a> {filters}</nav>
        {error_html}
        {table}"""
    return layout_response(request, "Ticket inbox", content, status_code=status_code)


@tickets_router.get(MANAGE_PATH, response_class=HTMLResponse)
async def ticket_inbox(request: Request):
    return _render_inbox(request)


@tickets_router.post("/tickets/{ticket_id}/status", response_class=HTMLResponse)
async def set_ticket_status(request: Request, ticket_id: str):
    form = await request.form()
    status = str(form.get("status") or "")
    try:
        TicketService(api_client(request)).update_status(ticket_id, status)
    except ValueError:
        return _render_inbox(request, error=f"Status must be one of: {', '.join(SETTABLE_STATUSES)}.", status_code=400)
    except ApiError as exc:
        return _render_inbox(request, error=_api_failure_text(exc), status_code=502)
    logger.info("Ticket status changed: id=%s status=%s", ticket_id, status)
    return see_other(MANAGE_PATH)


@tickets_router.post("/tickets/{ticket_id}/assign", response_class=HTMLResponse)
async def assign_ticket(request: Request, ticket_id: str):
    form = await request.form()
    raw = str(form.get("user_id") or "").strip()
    try:
        user_id = int(raw) if raw else None
    except ValueError:
        return _render_inbox(request, error="Invalid assignee.", status_code=400)
    try:
        TicketService(api_client(request)).assign(ticket_id, user_id)
    except ApiError as exc:
        return _render_inbox(request, error=_api_failure_text(exc), status_code=502)
    logger.info("Ticket assigned: id=%s assignee=%s", ticket_id, user_id)
    return see_other(MANAGE_PATH)


@tickets_router.post("/tickets/{ticket_id}/delete", response_class=HTMLResponse)
async def delete_ticket(request: Request, ticket_id: str):
    try:
        TicketService(api_client(request)).delete(ticket_id)
    except ApiError as exc:
        return _render_inbox(request, error=_api_failure_text(exc), status_code=502)
    logger.info("Ticket deleted: id=%s", ticket_id)
    return see_other(MANAGE_PATH)


# --- Single ticket ----------------------------------------------------------------

def _render_ticket(request: Request, ticket_id: str, *, error: Optional[str] = None, status_code: int = 200):
    client = api_client(request)
    ticket = TicketService(client).get(ticket_id)
    if ticket is None:
        content = '<h1>Ticket not found</h1><p><a href="/tickets">Back to tickets</a></p>'
        return layout_response(request, "Ticket not found", content, status_code=404)
    macros = SettingsService(client).get().macros if _is_staff(request) else []
    reply = TicketReplyForm(ticket.id, macros=macros, error=error).render()
    detail = TicketDetail(ticket, reply_form_html=reply).render()
    return layout_response(request, ticket.title or "Ticket", detail, status_code=status_code)


@tickets_router.get("/tickets/{ticket_id}", response_class=HTMLResponse)
async def ticket_detail(request: Request, ticket_id: str):
    return _render_ticket(request, ticket_id)


@tickets_router.post("/tickets/{ticket_id}/reply", response_class=HTMLResponse)
async def reply_to_ticket(request: Request, ticket_id: str):
    form = await request.form()
    message = str(form.get("message") or "").strip() or str(form.get("macro") or "").strip()
    voice_note = await read_upload(form.get("voice_note"))
    if not message and voice_note is None:
        return _render_ticket(request, ticket_id, error="Write a message or attach a voice note.", status_code=400)
    try:
        TicketService(api_client(request)).reply(ticket_id, message, voice_note=voice_note)
    except ApiError as exc:
        return _render_ticket(request, ticket_id, error=_api_failure_text(exc), status_code=502)
    return see_other(f"/tickets/{ticket_id}")


@tickets_router.post("/tickets/{ticket_id}/close", response_class=HTMLResponse)
async def close_or_reopen_ticket(request: Request, ticket_id: str):
    form = await request.form()
    status = str(form.get("status") or "")
    if status not in OWNER_STATUSES:
        return _render_ticket(request, ticket_id, error="Tickets can only be closed or reopened here.", status_code=400)
    try:
        TicketService(api_client(request)).update_status(ticket_id, status)
    except ApiError as exc:
        return _render_ticket(request, ticket_id, error=_api_failure_text(exc), status_code=502)
    return see_other(f"/tickets/{ticket_id}")
