"""
Route guard decisions (pure functions of auth state and path).
"""
import pytest

from backend.identity_access.auth_context import AuthContext
from backend.identity_access.stores import SessionStore
from backend.web.routing import (
    LOADING,
    OPEN,
    PROTECTED,
    PUBLIC,
    RENDER,
    REDIRECT,
    decide,
    is_inapp_path,
    landing_path,
    match_route,
    onboarding_guard_blocks,
    protected_route,
    public_route,
)

from conftest import build_user


def _auth_for(user=None) -> AuthContext:
    store = SessionStore()
    sid = store.create(user).session_id if user else None
    return AuthContext(store, sid).initialize()


def test_loading_context_shows_placeholder_and_never_redirects():
    auth = AuthContext(SessionStore())  # not initialised yet
    assert protected_route(auth, "/tickets").kind == LOADING
    assert public_route(auth, "/").kind == LOADING


def test_unauthenticated_user_is_sent_to_login_with_origin():
    decision = protected_route(_auth_for(), "/tickets")
    assert decision.kind == REDIRECT
    assert decision.location == "/login?from=%2Ftickets"
    assert decision.state == {"from": "/tickets"}


def test_incomplete_student_is_forced_to_onboarding():
    auth = _auth_for(build_user("student", complete=False))
    decision = protected_route(auth, "/dashboard")
    assert decision.is_redirect and decision.location == "/onboarding"


def test_incomplete_user_may_render_onboarding():
    auth = _auth_for(build_user("tutor", complete=False))
    assert protected_route(auth, "/onboarding").kind == RENDER


def test_complete_user_is_kept_away_from_onboarding():
    auth = _auth_for(build_user("student"))
    decision = protected_route(auth, "/onboarding")
    assert decision.is_redirect and decision.location == "/"


def test_role_mismatch_redirects_home():
    auth = _auth_for(build_user("student"))
    decision = protected_route(auth, "/admin", frozenset({"super_admin"}))
    assert decision.is_redirect and decision.location == "/"


def test_onboarding_rules_apply_before_role_rule():
    auth = _auth_for(build_user("student", complete=False))
    decision = protected_route(auth, "/admin", frozenset({"super_admin"}))
    assert decision.location == "/onboarding"


def test_public_route_renders_for_anonymous_and_complete_users():
    assert public_route(_auth_for(), "/").kind == RENDER
    assert public_route(_auth_for(build_user("affiliate")), "/").kind == RENDER


def test_public_route_sends_incomplete_user_to_onboarding():
    decision = public_route(_auth_for(build_user("affiliate", complete=False)), "/")
    assert decision.is_redirect and decision.location == "/onboarding"


def test_public_route_exempts_super_admin_from_onboarding():
    auth = _auth_for(build_user("super_admin", complete=False))
    assert public_route(auth, "/").kind == RENDER


@pytest.mark.parametrize("path", ["/login", "/onboarding", "/google-callback", "/reset-password/a/b", "/contact"])
def test_onboarding_guard_allow_list(path):
    auth = _auth_for(build_user("student", complete=False))
    assert onboarding_guard_blocks(auth, path) is False


def test_onboarding_guard_blocks_other_pages_for_incomplete_users():
    auth = _auth_for(build_user("student", complete=False))
    assert onboarding_guard_blocks(auth, "/faq") is True
    assert onboarding_guard_blocks(_auth_for(build_user("student")), "/faq") is False
    assert onboarding_guard_blocks(_auth_for(), "/faq") is False


def test_onboarding_guard_has_no_role_exemption():
    auth = _auth_for(build_user("super_admin", complete=False))
    assert onboarding_guard_blocks(auth, "/faq") is True


@pytest.mark.parametrize(
    "path,access",
    [
        ("/health", OPEN),
        ("/static/css/portal.css", OPEN),
        ("/contact", OPEN),
        ("/", PUBLIC),
        ("/student/dashboard", PUBLIC),
        ("/tickets", PROTECTED),
        ("/tickets/42", PROTECTED),
        ("/notifications", PROTECTED),
        ("/admin", PROTECTED),
        ("/chat", PROTECTED),
        ("/chat/sessions/s1/pin", PROTECTED),
        ("/feedback", PROTECTED),
    ],
)
def test_route_table_lookup(path, access):
    assert match_route(path).access == access


def test_route_roles_for_staff_actions():
    assert match_route("/tickets/manage").roles == frozenset({"tutor", "super_admin"})
    assert match_route("/tickets/7/status").roles == frozenset({"tutor", "super_admin"})
    assert match_route("/tickets/7/delete").roles == frozenset({"super_admin"})
    assert match_route("/tickets/7/reply").roles is None


def test_feedback_is_student_only_and_chat_open_to_all_roles():
    assert match_route("/feedback").roles == frozenset({"student"})
    assert match_route("/chat/ask").roles is None


def test_unknown_paths_render():
    assert decide(_auth_for(), "/no-such-page").kind == RENDER


def test_decide_tutor_may_use_inbox_but_not_delete():
    auth = _auth_for(build_user("tutor"))
    assert decide(auth, "/tickets/manage").kind == RENDER
    assert decide(auth, "/tickets/3/delete").location == "/"


def test_landing_path_rules():
    assert landing_path(build_user("super_admin", complete=False), "/faq") == "/admin"
    assert landing_path(build_user("student", complete=False), "/faq") == "/onboarding"
    assert landing_path(build_user("student"), "/faq") == "/faq"
    assert landing_path(build_user("tutor")) == "/tickets/manage"
    assert landing_path(build_user("affiliate")) == "/"


@pytest.mark.parametrize("value", ["//evil.example", "https://evil.example/", "/a/../b", "", None, "faq"])
def test_rejects_non_inapp_redirects(value):
    assert is_inapp_path(value) is False
    if value is not None:
        assert landing_path(build_user("student"), value) == "/"
