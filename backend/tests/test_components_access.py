"""
Access-related components: OnboardingGuard, ImpersonationBanner, Navigation.
"""
from backend.identity_access.auth_context import AuthContext
from backend.identity_access.stores import SessionStore
from backend.web.components import ImpersonationBanner, LoadingPlaceholder, Navigation, OnboardingGuard

from conftest import build_user


def _impersonating(target):
    store = SessionStore()
    sid = store.create(build_user("super_admin")).session_id
    store.start_impersonation(sid, target)
    return AuthContext(store, sid).initialize()


def _auth_for(user=None):
    store = SessionStore()
    sid = store.create(user).session_id if user else None
    return AuthContext(store, sid).initialize()


def test_onboarding_guard_withholds_content_while_blocked():
    guard = OnboardingGuard(_auth_for(build_user(complete=False)), "/faq", "<p>secret</p>")
    assert guard.render() == ""
    assert guard.redirect_to == "/onboarding"


def test_onboarding_guard_passes_content_through_otherwise():
    guard = OnboardingGuard(_auth_for(build_user()), "/faq", "<p>faq</p>")
    assert guard.render() == "<p>faq</p>"
    assert guard.redirect_to is None


def test_loading_placeholder_is_a_status_region():
    html = LoadingPlaceholder().render()
    assert 'role="status"' in html and "Loading" in html


def test_banner_hidden_without_impersonation():
    assert ImpersonationBanner(_auth_for(build_user("super_admin")), "/").render() == ""


def test_banner_names_impersonated_user_and_offers_exit():
    html = ImpersonationBanner(_impersonating(build_user("student", name="Asha <K>")), "/dashboard").render()
    assert "Viewing as <strong>Asha &lt;K&gt;</strong> (Full Access)" in html
    assert 'action="/auth/impersonation/exit"' in html
    assert "Exit to Admin" in html


def test_banner_falls_back_to_student_label():
    html = ImpersonationBanner(_impersonating(build_user("student", name="")), "/").render()
    assert "Viewing as <strong>Student</strong>" in html


def test_banner_hidden_on_login_page():
    assert ImpersonationBanner(_impersonating(build_user("student")), "/login").render() == ""


def _labels(html: str):
    return [part.split("</span>")[0] for part in html.split('nav-text">')[1:]]


def test_navigation_public_menu():
    assert _labels(Navigation(None, "/").render()) == ["Home", "Contact", "Sign in"]


def test_navigation_by_role():
    assert "My Tickets" in _labels(Navigation(build_user("student"), "/").render())
    tutor = _labels(Navigation(build_user("tutor"), "/").render())
    assert "Ticket Inbox" in tutor and "Admin" not in tutor
    assert "Admin" in _labels(Navigation(build_user("super_admin"), "/").render())
    student = _labels(Navigation(build_user("student"), "/").render())
    assert "Feedback" in student and "Assistant" in student
    assert "Feedback" not in tutor and "Assistant" in tutor


def test_navigation_for_incomplete_profile_points_to_onboarding():
    assert _labels(Navigation(build_user(complete=False), "/onboarding").render()) == ["Complete Profile", "Contact"]


def test_navigation_marks_best_prefix_active_and_shows_badge():
    html = Navigation(build_user("student"), "/tickets/12", unread_count=3).render()
    assert 'href="/tickets" class="nav-link active" aria-current="page"' in html
    assert 'class="nav-badge" aria-label="unread">3<' in html
