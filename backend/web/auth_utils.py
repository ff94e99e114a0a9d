"""
Shared authentication utilities.

Cookie policy lives here so the main app and the auth router set and clear
the session cookie with identical flags.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Response

from .config import app_environment

SESSION_COOKIE_NAME = "skillmount_session"


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags (same in every environment).

    SameSite=Lax keeps the cookie on top-level navigations such as the
    redirect back from the Google sign-in; Strict would drop it there.
    """
    return {"secure": True, "samesite": "lax"}


def set_session_cookie(response: Response, value: str, *, max_age: Optional[int] = None) -> None:
    opts = cookie_opts(app_environment())
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=value,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=max_age,
    )


def clear_session_cookie(response: Response) -> None:
    opts = cookie_opts(app_environment())
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
    )
