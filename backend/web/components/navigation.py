"""
Navigation Component for SkillMount

Role-based navigation that adapts to the signed-in user
(student/tutor/affiliate/super_admin). Anonymous visitors get the public menu.
"""

from typing import Dict, List, Optional, Tuple

from backend.identity_access.domain import User

from .base import Component

NavItem = Tuple[str, str]  # (href, label)

PUBLIC_MENU: List[NavItem] = [
    ("/", "Home"),
    ("/contact", "Contact"),
    ("/login", "Sign in"),
]

NAV_CONFIG: Dict[str, List[NavItem]] = {
    "student": [
        ("/", "Home"),
        ("/dashboard", "Dashboard"),
        ("/tickets", "My Tickets"),
        ("/chat", "Assistant"),
        ("/feedback", "Feedback"),
        ("/faq", "FAQ"),
        ("/notifications", "Notifications"),
    ],
    "tutor": [
        ("/", "Home"),
        ("/tickets/manage", "Ticket Inbox"),
        ("/chat", "Assistant"),
        ("/faq", "FAQ"),
        ("/notifications", "Notifications"),
    ],
    "affiliate": [
        ("/", "Home"),
        ("/dashboard", "Dashboard"),
        ("/faq", "FAQ"),
        ("/notifications", "Notifications"),
    ],
    "super_admin": [
        ("/", "Home"),
        ("/admin", "Admin"),
        ("/tickets/manage", "Ticket Inbox"),
        ("/faq", "FAQ"),
        ("/notifications", "Notifications"),
    ],
}

# Until onboarding is done the only useful destination is the onboarding form.
ONBOARDING_MENU: List[NavItem] = [("/onboarding", "Complete Profile"), ("/contact", "Contact")]

ROLE_LABELS = {
    "student": "Student",
    "tutor": "Tutor",
    "affiliate": "Affiliate",
    "super_admin": "Administrator",
}


class Navigation(Component):
    """Navigation component with role-based menu items"""

    def __init__(self, user: Optional[User] = None, current_path: str = "/", unread_count: int = 0):
        self.user = user
        self.current_path = current_path
        self.unread_count = unread_count

    def render(self) -> str:
        items = self._get_nav_items()
        active = self._determine_active_href(items)
        links = [self._create_nav_link(href, label, is_active=(href == active)) for href, label in items]
        if self.user:
            links.append(self._render_logout())
        return f"""
    <nav class="site-nav" role="navigation" aria-label="Main navigation">
        <a class="site-brand" href="/">SkillMount</a>
        <div class="nav-items">
            {''.join(links)}
        </div>
        {self._render_user_info()}
    </nav>"""

    def _get_nav_items(self) -> List[NavItem]:
        """Return the role-aware list of entries.

        Unknown roles fall back to the public menu; visibility alone never
        grants access (the routing table decides that).
        """
        if not self.user:
            return PUBLIC_MENU
        if not self.user.is_profile_complete and not self.user.is_super_admin:
            return ONBOARDING_MENU
        return NAV_CONFIG.get(self.user.role, PUBLIC_MENU)

    def _determine_active_href(self, items: List[NavItem]) -> str:
        """Pick the single active href using best prefix match."""
        path = self.current_path or "/"
        best = "/"
        best_len = 0
        for href, _label in items:
            if href == path:
                return href
            if href != "/" and path.startswith(href) and len(href) > best_len:
                best = href
                best_len = len(href)
        return best

    def _create_nav_link(self, href: str, text: str, is_active: bool = False) -> str:
        active_class = " active" if is_active else ""
        aria_attr = ' aria-current="page"' if is_active else ""
        badge = ""
        if href == "/notifications" and self.unread_count > 0:
            badge = f' <span class="nav-badge" aria-label="unread">{self.unread_count}</span>'
        return f"""
            <a href="{href}" class="nav-link{active_class}"{aria_attr}><span class="nav-text">{self.escape(text)}</span>{badge}</a>"""

    def _render_logout(self) -> str:
        return """
            <form method="post" action="/logout" class="nav-logout">
                <button type="submit" class="nav-link nav-link-button">Sign out</button>
            </form>"""

    def _render_user_info(self) -> str:
        if not self.user:
            return ""
        role = ROLE_LABELS.get(self.user.role, "User")
        return f"""
        <div class="user-info-compact">
            <div class="user-name">{self.escape(self.user.name)}</div>
            <div class="user-role">{self.escape(role)}</div>
        </div>"""
