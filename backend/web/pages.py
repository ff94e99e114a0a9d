"""
Helpers shared by the page routers.

Handlers read the per-request AuthContext (placed on `request.state.auth` by
the auth middleware), build API clients carrying the session's access token
and render complete documents through `layout_response`.
"""
from __future__ import annotations

from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.datastructures import UploadFile

from backend.identity_access.auth_context import AuthContext
from backend.portal.api import ApiClient
from backend.portal.notifications import NotificationService
from backend.portal.tickets import Upload

from .components import Layout, OnboardingGuard

NO_STORE = {"Cache-Control": "private, no-store"}


def get_auth(request: Request) -> AuthContext:
    return request.state.auth


def api_client(request: Request) -> ApiClient:
    """API client acting on behalf of the signed-in user (anonymous otherwise)."""
    return ApiClient(get_auth(request).access_token)


def see_other(location: str) -> RedirectResponse:
    """Post/Redirect/Get after a successful form submission."""
    return RedirectResponse(url=location, status_code=303)


def json_error(error: str, status_code: int, detail: Optional[str] = None) -> JSONResponse:
    body: Dict[str, str] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(body, status_code=status_code, headers=NO_STORE)


def layout_response(
    request: Request,
    title: str,
    content: str,
    *,
    status_code: int = 200,
    flash: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
):
    """Render `content` inside the Layout and return an HTMLResponse.

    Page content is wrapped in the OnboardingGuard: when it blocks, nothing is
    rendered and the browser is sent to onboarding instead. super_admin
    accounts skip the wrapper, matching the PublicRoute exemption.
    Personalised pages are never cached.
    """
    auth = get_auth(request)
    path = request.url.path
    if auth.user is not None and auth.user.is_super_admin:
        body = content
    else:
        guard = OnboardingGuard(auth, path, content)
        if guard.redirect_to:
            return RedirectResponse(url=guard.redirect_to, status_code=302)
        body = guard.render()

    unread = 0
    if auth.is_authenticated and auth.user.is_profile_complete:
        unread = NotificationService(ApiClient(auth.access_token)).unread_count()
    layout = Layout(
        title=title,
        content=body,
        auth=auth,
        current_path=path,
        unread_count=unread,
        flash=flash,
    )
    response = HTMLResponse(content=layout.render(), status_code=status_code)
    if auth.is_authenticated and not (headers and "Cache-Control" in headers):
        response.headers["Cache-Control"] = "private, no-store"
    if headers:
        for key, value in headers.items():
            response.headers[key] = value
    return response


async def read_upload(value) -> Optional[Upload]:
    """Turn a multipart file field into an (filename, bytes, mime) tuple; empty fields are None."""
    if not isinstance(value, UploadFile) or not value.filename:
        return None
    content = await value.read()
    if not content:
        return None
    return value.filename, content, value.content_type or "application/octet-stream"
