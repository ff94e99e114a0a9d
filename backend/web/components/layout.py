"""
Layout Component for SkillMount

Main layout wrapper that combines navigation, the impersonation banner and
page content into a complete HTML document.
"""

from typing import Optional

from backend.identity_access.auth_context import AuthContext

from .base import Component
from .impersonation_banner import ImpersonationBanner
from .navigation import Navigation


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        auth: Optional[AuthContext] = None,
        show_nav: bool = True,
        current_path: str = "/",
        unread_count: int = 0,
        flash: Optional[str] = None,
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            auth: Request auth context (optional; anonymous when missing)
            show_nav: Whether to show navigation (default: True)
            current_path: Current URL path for active navigation highlighting
            unread_count: Unread notifications for the nav badge
            flash: Optional one-line status message shown above the content
        """
        self.title = title
        self.content = content
        self.auth = auth
        self.show_nav = show_nav
        self.current_path = current_path
        self.unread_count = unread_count
        self.flash = flash

    def render(self) -> str:
        user = self.auth.user if self.auth else None
        nav_html = Navigation(user, self.current_path, self.unread_count).render() if self.show_nav else ""
        banner_html = ImpersonationBanner(self.auth, self.current_path).render() if self.auth else ""
        flash_html = (
            f'<div class="flash" role="status">{self.escape(self.flash)}</div>' if self.flash else ""
        )

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    {self._render_head()}
</head>
<body>
    <a href="#main-content" class="skip-link">Skip to main content</a>
    {banner_html}
    {nav_html}
    <main id="main-content" class="main-content" role="main">
        {flash_html}
        {self.content}
        <footer class="content-footer" role="contentinfo">
            <p class="text-center text-muted">
                <a href="/contact">Contact</a>
            </p>
        </footer>
    </main>
</body>
</html>"""

    def _render_head(self) -> str:
        return f"""
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="description" content="SkillMount - student portal">
    <title>{self.escape(self.title)} - SkillMount</title>
    <link rel="stylesheet" href="/static/css/portal.css">
    """
