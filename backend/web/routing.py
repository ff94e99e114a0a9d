"""
Routing table and access decisions for the portal.

Why:
    All path rules live here in one table instead of scattered string checks
    in handlers. The middleware looks up the route once per request and asks
    the matching guard for a decision; handlers never re-check auth.

Guards:
    - `protected_route`: must be signed in; forces onboarding for incomplete
      profiles and keeps finished profiles away from /onboarding.
    - `public_route`: anyone may pass, except signed-in users with an
      incomplete profile, who are sent to onboarding. super_admin is exempt
      from that rule (explicit policy, not a workaround).
    - `onboarding_guard_blocks`: softer content-level check used by page
      handlers, driven by ONBOARDING_ALLOWED_PREFIXES.

All decisions are pure functions of (auth state, path).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
from urllib.parse import urlencode
import re

from backend.identity_access.auth_context import AuthContext
from backend.identity_access.domain import ONBOARDING_ROLES, SUPER_ADMIN, User

LOGIN_PATH = "/login"
ONBOARDING_PATH = "/onboarding"
HOME_PATH = "/"

# Paths an incomplete profile may still visit (prefix match).
ONBOARDING_ALLOWED_PREFIXES: Tuple[str, ...] = (
    "/login",
    "/onboarding",
    "/google-callback",
    "/reset-password",
    "/contact",
)

# Access policies
OPEN = "open"  # no guard at all
PUBLIC = "public"  # PublicRoute
PROTECTED = "protected"  # ProtectedRoute

RENDER = "render"
LOADING = "loading"
REDIRECT = "redirect"

# Disallow double slashes and traversal; keep redirects inside the app.
INAPP_PATH_PATTERN = re.compile(r"^(?!.*//)(?!.*\.\.)/[A-Za-z0-9._\-/]*$")
MAX_INAPP_REDIRECT_LEN = 256


@dataclass(frozen=True)
class AccessDecision:
    kind: str
    location: Optional[str] = None
    state: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_redirect(self) -> bool:
        return self.kind == REDIRECT


@dataclass(frozen=True)
class RouteRule:
    pattern: str
    access: str
    roles: Optional[FrozenSet[str]] = None
    regex: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # "/tickets/:id" style placeholders match exactly one segment;
        # a trailing "/*" matches the prefix and anything below it.
        body = self.pattern
        wildcard = body.endswith("/*")
        if wildcard:
            body = body[:-2]
        parts = []
        for segment in body.strip("/").split("/"):
            if not segment:
                continue
            parts.append("[^/]+" if segment.startswith(":") else re.escape(segment))
        expr = "/" + "/".join(parts)
        if wildcard:
            expr = (expr.rstrip("/") or "") + "(?:/.*)?"
        object.__setattr__(self, "regex", re.compile(f"^{expr}/?$" if expr != "/" else "^/$"))

    def matches(self, path: str) -> bool:
        return bool(self.regex.match(path))


def _roles(*names: str) -> FrozenSet[str]:
    return frozenset(names)


ROUTE_TABLE: List[RouteRule] = [
    # Infrastructure and auth flows
    RouteRule("/health", OPEN),
    RouteRule("/static/*", OPEN),
    RouteRule("/favicon.ico", OPEN),
    RouteRule("/login", OPEN),
    RouteRule("/logout", OPEN),
    RouteRule("/auth/*", OPEN),
    RouteRule("/google-callback", OPEN),
    RouteRule("/reset-password/*", OPEN),
    RouteRule("/contact", OPEN),
    # Marketing pages
    RouteRule("/", PUBLIC),
    RouteRule("/student/dashboard", PUBLIC),
    RouteRule("/tutor/dashboard", PUBLIC),
    RouteRule("/affiliate/dashboard", PUBLIC),
    # Signed-in area
    RouteRule("/onboarding", PROTECTED),
    RouteRule("/dashboard", PROTECTED),
    RouteRule("/faq", PROTECTED),
    RouteRule("/feedback", PROTECTED, _roles("student")),
    RouteRule("/chat/*", PROTECTED),
    RouteRule("/notifications/*", PROTECTED),
    RouteRule("/tickets/manage", PROTECTED, _roles("tutor", SUPER_ADMIN)),
    RouteRule("/tickets/:ticket_id/status", PROTECTED, _roles("tutor", SUPER_ADMIN)),
    RouteRule("/tickets/:ticket_id/assign", PROTECTED, _roles("tutor", SUPER_ADMIN)),
    RouteRule("/tickets/:ticket_id/delete", PROTECTED, _roles(SUPER_ADMIN)),
    RouteRule("/tickets/*", PROTECTED),
    RouteRule("/admin/*", PROTECTED, _roles(SUPER_ADMIN)),
]


def match_route(path: str) -> Optional[RouteRule]:
    """Return the first rule matching `path`; the table is ordered specific-first."""
    for rule in ROUTE_TABLE:
        if rule.matches(path):
            return rule
    return None


def is_onboarding_allowed(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in ONBOARDING_ALLOWED_PREFIXES)


def is_inapp_path(value: Optional[str]) -> bool:
    return (
        isinstance(value, str)
        and len(value) <= MAX_INAPP_REDIRECT_LEN
        and bool(INAPP_PATH_PATTERN.match(value))
    )


def login_location(origin: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'from': origin})}"


def _redirect(location: str, **state: Any) -> AccessDecision:
    return AccessDecision(REDIRECT, location=location, state=dict(state))


def protected_route(auth: AuthContext, path: str, roles: Optional[FrozenSet[str]] = None) -> AccessDecision:
    """Decide access to a protected route; rules are evaluated in fixed order."""
    if auth.is_loading:
        return AccessDecision(LOADING)
    user = auth.user
    if not auth.is_authenticated or user is None:
        return _redirect(login_location(path), **{"from": path})
    if not user.is_profile_complete and path != ONBOARDING_PATH:
        return _redirect(ONBOARDING_PATH)
    if user.is_profile_complete and path == ONBOARDING_PATH:
        return _redirect(HOME_PATH)
    if roles is not None and user.role not in roles:
        return _redirect(HOME_PATH)
    return AccessDecision(RENDER)


def public_route(auth: AuthContext, path: str) -> AccessDecision:
    if auth.is_loading:
        return AccessDecision(LOADING)
    user = auth.user
    if auth.is_authenticated and user is not None and not user.is_profile_complete:
        # super_admin accounts may browse public pages without onboarding.
        if user.role != SUPER_ADMIN:
            return _redirect(ONBOARDING_PATH)
    return AccessDecision(RENDER)


def onboarding_guard_blocks(auth: AuthContext, path: str) -> bool:
    """True when page content must be withheld and the user sent to onboarding."""
    user = auth.user
    return bool(
        auth.is_authenticated
        and user is not None
        and not user.is_profile_complete
        and not is_onboarding_allowed(path)
    )


def decide(auth: AuthContext, path: str) -> AccessDecision:
    """Apply the guard registered for `path` in ROUTE_TABLE.

    Unknown paths fall through as OPEN so the framework can answer 404.
    """
    rule = match_route(path)
    if rule is None or rule.access == OPEN:
        return AccessDecision(RENDER)
    if rule.access == PUBLIC:
        return public_route(auth, path)
    return protected_route(auth, path, rule.roles)


def landing_path(user: User, origin: Optional[str] = None) -> str:
    """Where to send a user right after sign-in.

    super_admin always lands on the admin console, incomplete profiles on
    onboarding; a valid in-app `origin` wins over the role default.
    """
    if user.role == SUPER_ADMIN:
        return "/admin"
    if user.role in ONBOARDING_ROLES and not user.is_profile_complete:
        return ONBOARDING_PATH
    if origin and is_inapp_path(origin) and origin != LOGIN_PATH:
        return origin
    if user.role == "tutor":
        return "/tickets/manage"
    return HOME_PATH
