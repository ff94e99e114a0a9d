"""
Authentication-related routes: sign-in, sign-out, Google callback, password
reset, impersonation exit and onboarding.

Notes:
    - Sessions are created only through `AuthContext.login`, which rotates
      the session id on every fresh sign-in.
    - Bad credentials and API outages are distinguished: 401 vs 502.
    - Never log emails, passwords or tokens.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.portal.accounts import UserService, confirm_password_reset, fetch_me, password_login
from backend.portal.api import ApiClient, ApiError
from backend.portal.settings import SettingsService

from ..auth_utils import clear_session_cookie, set_session_cookie
from ..components.forms import LoginForm, OnboardingForm, ResetPasswordForm
from ..components.forms.onboarding_form import LIST_FIELDS, missing_fields, required_fields
from ..pages import NO_STORE, api_client, get_auth, layout_response, see_other
from ..routing import LOGIN_PATH, is_inapp_path, landing_path

auth_router = APIRouter(tags=["Auth"])  # explicit paths, no prefix
logger = logging.getLogger("skillmount.web.auth")

MIN_PASSWORD_LENGTH = 8


def _login_page(
    request: Request,
    *,
    email: str = "",
    error: Optional[str] = None,
    from_path: Optional[str] = None,
    status_code: int = 200,
):
    form = LoginForm(email=email, error=error, from_path=from_path if is_inapp_path(from_path) else None)
    return layout_response(request, "Sign in", form.render(), status_code=status_code, headers=NO_STORE)


@auth_router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request, error: Optional[str] = None):
    auth = get_auth(request)
    origin = request.query_params.get("from")
    if auth.is_authenticated:
        return see_other(landing_path(auth.user, origin))
    return _login_page(request, error=error, from_path=origin)


@auth_router.post("/login", response_class=HTMLResponse)
async def login_submit(request: Request):
    form = await request.form()
    email = str(form.get("email") or "").strip()
    password = str(form.get("password") or "")
    origin = str(form.get("from") or "") or None
    if not email or not password:
        return _login_page(request, email=email, error="missing_fields", from_path=origin, status_code=400)

    try:
        user, access, refresh = password_login(email, password)
    except ValueError:
        logger.info("Sign-in rejected: invalid credentials")
        return _login_page(request, email=email, error="invalid_credentials", from_path=origin, status_code=401)
    except ApiError as exc:
        logger.warning("Sign-in failed: api status=%s", exc.status_code)
        return _login_page(request, email=email, error="backend_error", from_path=origin, status_code=502)

    auth = get_auth(request)
    auth.login(user, access_token=access, refresh_token=refresh)
    logger.info("Signed in: user=%s role=%s", user.id, user.role)
    response = see_other(landing_path(user, origin))
    set_session_cookie(response, auth.session_id)
    return response


@auth_router.get("/google-callback")
async def google_callback(request: Request):
    """Finish Google sign-in: the API hands us its tokens as query parameters."""
    access = request.query_params.get("access")
    refresh = request.query_params.get("refresh")
    if not access:
        return see_other(f"{LOGIN_PATH}?error=invalid_credentials")
    try:
        user = fetch_me(ApiClient(access))
    except (ApiError, ValueError) as exc:
        logger.warning("Google sign-in failed: %s", exc.__class__.__name__)
        return see_other(f"{LOGIN_PATH}?error=backend_error")

    auth = get_auth(request)
    auth.login(user, access_token=access, refresh_token=refresh)
    logger.info("Signed in via Google: user=%s role=%s", user.id, user.role)
    response = see_other(landing_path(user))
    set_session_cookie(response, auth.session_id)
    return response


@auth_router.api_route("/logout", methods=["GET", "POST"])
async def logout(request: Request):
    auth = get_auth(request)
    if auth.user is not None:
        logger.info("Signed out: user=%s", auth.user.id)
    auth.logout()
    response = see_other(LOGIN_PATH)
    clear_session_cookie(response)
    return response


@auth_router.post("/auth/impersonation/exit")
async def impersonation_exit(request: Request):
    admin = get_auth(request).exit_impersonation()
    return see_other("/admin" if admin is not None else "/")


@auth_router.get("/reset-password/{uid}/{token}", response_class=HTMLResponse)
async def reset_password_form(request: Request, uid: str, token: str):
    return layout_response(request, "Reset password", ResetPasswordForm(uid, token).render(), headers=NO_STORE)


@auth_router.post("/reset-password/{uid}/{token}", response_class=HTMLResponse)
async def reset_password_submit(request: Request, uid: str, token: str):
    form = await request.form()
    password = str(form.get("password") or "")
    confirm = str(form.get("confirm_password") or "")
    error = None
    if len(password) < MIN_PASSWORD_LENGTH:
        error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    elif password != confirm:
        error = "Passwords do not match."
    if error:
        page = ResetPasswordForm(uid, token, error=error).render()
        return layout_response(request, "Reset password", page, status_code=400, headers=NO_STORE)
    try:
        confirm_password_reset(uid, token, password)
    except ApiError as exc:
        logger.info("Password reset rejected: status=%s", exc.status_code)
        page = ResetPasswordForm(uid, token, error="This reset link is invalid or has expired.").render()
        return layout_response(request, "Reset password", page, status_code=400, headers=NO_STORE)
    return layout_response(request, "Reset password", ResetPasswordForm(uid, token, done=True).render())


# --- Onboarding -------------------------------------------------------------------

def _onboarding_values(form, role: str) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name in required_fields(role):
        if name in LIST_FIELDS:
            values[name] = [str(v) for v in form.getlist(name) if str(v).strip()]
        else:
            values[name] = str(form.get(name) or "").strip()
    return values


@auth_router.get("/onboarding", response_class=HTMLResponse)
async def onboarding_form(request: Request):
    auth = get_auth(request)
    settings = SettingsService(api_client(request)).get()
    return layout_response(request, "Complete your profile", OnboardingForm(auth.user, settings).render())


@auth_router.post("/onboarding", response_class=HTMLResponse)
async def onboarding_submit(request: Request):
    auth = get_auth(request)
    user = auth.user
    client = api_client(request)
    form = await request.form()
    values = _onboarding_values(form, user.role)
    missing: List[str] = missing_fields(user.role, values)
    if missing:
        settings = SettingsService(client).get()
        page = OnboardingForm(user, settings, values=values, errors=missing).render()
        return layout_response(request, "Complete your profile", page, status_code=400)

    try:
        updated = UserService(client).complete_profile(user, values)
    except (ApiError, ValueError) as exc:
        logger.error("Profile completion failed: user=%s error=%s", user.id, exc.__class__.__name__)
        settings = SettingsService(client).get()
        page = OnboardingForm(
            user, settings, values=values, error="We could not save your profile. Please try again."
        ).render()
        return layout_response(request, "Complete your profile", page, status_code=502)

    # Same session, refreshed user; impersonation (if any) stays active.
    auth.login(updated)
    logger.info("Profile completed: user=%s", updated.id)
    return see_other(landing_path(updated))
