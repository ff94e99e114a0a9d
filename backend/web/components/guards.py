"""
Content-level access components.

`OnboardingGuard` wraps page content: while a signed-in user still has an
incomplete profile and the page is not on the onboarding allow-list, it
renders nothing and exposes the redirect target so the handler can send the
browser on. Protected content therefore never flashes before the redirect.
"""

from typing import Optional

from backend.identity_access.auth_context import AuthContext
from backend.web.routing import ONBOARDING_PATH, onboarding_guard_blocks

from .base import Component


class OnboardingGuard(Component):
    def __init__(self, auth: AuthContext, current_path: str, content: str) -> None:
        self.auth = auth
        self.current_path = current_path
        self.content = content

    @property
    def blocks(self) -> bool:
        return onboarding_guard_blocks(self.auth, self.current_path)

    @property
    def redirect_to(self) -> Optional[str]:
        return ONBOARDING_PATH if self.blocks else None

    def render(self) -> str:
        return "" if self.blocks else self.content


class LoadingPlaceholder(Component):
    """Shown while the auth context has not finished restoring the session."""

    def render(self) -> str:
        return (
            '<div class="loading-screen" role="status" aria-live="polite">'
            "Loading..."
            "</div>"
        )
