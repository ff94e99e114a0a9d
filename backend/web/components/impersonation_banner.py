"""
Impersonation banner.

Reads the impersonation flag and current user from the auth context. Hidden on
the login page and whenever no admin is acting as someone else.
"""

from backend.identity_access.auth_context import AuthContext
from backend.web.routing import LOGIN_PATH

from .base import Component

EXIT_IMPERSONATION_PATH = "/auth/impersonation/exit"


class ImpersonationBanner(Component):
    def __init__(self, auth: AuthContext, current_path: str) -> None:
        self.auth = auth
        self.current_path = current_path

    def render(self) -> str:
        if not self.auth.is_impersonating:
            return ""
        if self.current_path == LOGIN_PATH:
            return ""
        name = (self.auth.user.name if self.auth.user else "") or "Student"
        return f"""
    <div class="impersonation-banner" role="alert">
        <span class="impersonation-text">
            Viewing as <strong>{self.escape(name)}</strong> (Full Access)
        </span>
        <form method="post" action="{EXIT_IMPERSONATION_PATH}" class="impersonation-exit">
            <button type="submit" class="btn btn-secondary btn-sm">Exit to Admin</button>
        </form>
    </div>"""
