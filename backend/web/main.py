"""
SkillMount portal web application.

Server-rendered FastAPI app in front of the SkillMount backend API. Sessions
live server-side in `SESSION_STORE`; the browser only holds an opaque cookie.

Request pipeline (outermost first):
    security_headers -> same_origin_writes -> auth_context -> router

`auth_context` builds one AuthContext per request, restores the session and
applies the guard registered for the path in `routing.ROUTE_TABLE` before any
handler runs.
"""
from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pathlib import Path

from backend.identity_access.auth_context import AuthContext
from backend.identity_access.stores import SessionStore
from backend.portal.api import ApiError
from backend.portal.feedback import FeedbackService
from backend.portal.tickets import TicketService

from . import config as _cfg
from .auth_utils import SESSION_COOKIE_NAME
from .components import LoadingPlaceholder, StudentTestimonials
from .components.base import Component
from .pages import NO_STORE, api_client, get_auth, layout_response
from .routes.admin import admin_router
from .routes.auth import auth_router
from .routes.chat import chat_router
from .routes.feedback import feedback_router
from .routes.security import _is_same_origin
from .routes.support import support_router
from .routes.tickets import tickets_router
from .routing import HOME_PATH, LOADING, decide

__all__ = ["app", "SESSION_STORE", "SESSION_COOKIE_NAME"]


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via SKILLMOUNT_ENABLE_DOTENV (default true
      outside pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("SKILLMOUNT_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    from dotenv import load_dotenv

    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("skillmount.identity_access")
SESSION_STORE = SessionStore(ttl_seconds=_cfg.session_ttl_seconds())

app = FastAPI(title="SkillMount Portal", description="Student support portal", version="0.1.0")

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

app.include_router(auth_router)
app.include_router(support_router)
app.include_router(tickets_router)
app.include_router(feedback_router)
app.include_router(chat_router)
app.include_router(admin_router)


# --- Middleware -------------------------------------------------------------------

@app.middleware("http")
async def auth_context(request: Request, call_next):
    """Restore the session and enforce the route guard for this path."""
    sid = request.cookies.get(SESSION_COOKIE_NAME)
    auth = AuthContext(SESSION_STORE, sid).initialize()
    request.state.auth = auth

    decision = decide(auth, request.url.path)
    if decision.kind == LOADING:
        return HTMLResponse(LoadingPlaceholder().render(), headers=NO_STORE)
    if decision.is_redirect:
        return RedirectResponse(url=decision.location, status_code=302, headers=NO_STORE)
    return await call_next(request)


@app.middleware("http")
async def same_origin_writes(request: Request, call_next):
    """Reject cross-origin state changes before they reach a handler."""
    if request.method not in ("GET", "HEAD", "OPTIONS") and not _is_same_origin(request):
        logger.warning("Cross-origin %s rejected: path=%s", request.method, request.url.path)
        return JSONResponse({"error": "csrf_violation"}, status_code=403, headers=NO_STORE)
    return await call_next(request)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if _cfg.app_environment() == "prod":
        # Harden CSP in production: no inline scripts or styles.
        csp = "default-src 'self'; script-src 'self'; style-src 'self'; img-src 'self' data:; media-src 'self' blob:"
    else:
        csp = (
            "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; media-src 'self' blob:"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), camera=()")
    if _cfg.app_environment() == "prod":
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


# --- Pages ------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    auth = get_auth(request)
    if auth.is_authenticated:
        name = Component.escape(auth.user.name)
        content = f"""
        <section class="hero">
            <h1>Welcome back, {name}</h1>
            <p><a class="btn btn-primary" href="/dashboard">Open your dashboard</a></p>
        </section>"""
    else:
        content = """
        <section class="hero">
            <h1>Learn, build and get support with SkillMount</h1>
            <p>Courses, mentoring and a support desk that answers.</p>
            <p><a class="btn btn-primary" href="/login">Sign in</a> <a class="btn btn-secondary" href="/contact">Contact us</a></p>
        </section>"""
    testimonials = StudentTestimonials(FeedbackService(api_client(request)).list_public()).render()
    return layout_response(request, "Home", content + testimonials)


@app.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Personal summary; tutors and admins are sent to their own consoles."""
    auth = get_auth(request)
    user = auth.user
    if user.role == "super_admin":
        return RedirectResponse(url="/admin", status_code=302)
    if user.role == "tutor":
        return RedirectResponse(url="/tickets/manage", status_code=302)

    details = [("Email", user.email), ("Phone", user.whatsapp_number or user.phone)]
    if user.role == "student":
        details += [("Batch", user.batch), ("Mentor", user.mentor), ("Coordinator", user.coordinator)]
    if user.role == "affiliate":
        details += [("Coupon code", user.coupon_code), ("Platform", user.platform)]
    rows = "".join(
        f"<dt>{label}</dt><dd>{Component.escape(value) or '-'}</dd>" for label, value in details
    )

    tickets_html = ""
    if user.role == "student":
        try:
            open_count = sum(1 for t in TicketService(api_client(request)).list() if t.status != "Closed")
            tickets_html = f'<p><a href="/tickets">{open_count} open ticket(s)</a></p>'
        except ApiError:
            tickets_html = '<p class="text-muted">Tickets are unavailable right now.</p>'

    content = f"""
        <h1>Dashboard</h1>
        <dl class="profile-summary">{rows}</dl>
        {tickets_html}"""
    return layout_response(request, "Dashboard", content)


@app.get("/student/dashboard")
@app.get("/tutor/dashboard")
@app.get("/affiliate/dashboard")
async def legacy_dashboard_redirect():
    return RedirectResponse(url=HOME_PATH, status_code=302)
