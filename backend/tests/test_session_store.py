"""
In-memory session store: lifecycle, expiry and impersonation.
"""
import pytest

from backend.identity_access import stores
from backend.identity_access.stores import SessionStore

from conftest import build_user


def test_create_and_get_session_user():
    store = SessionStore()
    user = build_user("student")
    rec = store.create(user, access_token="a", refresh_token="r")
    assert rec.session_id
    assert store.get_session(rec.session_id) == user
    assert store.get(rec.session_id).access_token == "a"


def test_session_ids_are_unique():
    store = SessionStore()
    user = build_user()
    assert store.create(user).session_id != store.create(user).session_id


def test_expired_sessions_are_evicted(monkeypatch: pytest.MonkeyPatch):
    store = SessionStore(ttl_seconds=10)
    rec = store.create(build_user())
    monkeypatch.setattr(stores, "_now", lambda: rec.expires_at + 1)
    assert store.get(rec.session_id) is None
    assert store.get_session(rec.session_id) is None


def test_save_session_replaces_user_and_requires_existing_session():
    store = SessionStore()
    rec = store.create(build_user(complete=False))
    store.save_session(rec.session_id, build_user(complete=True))
    assert store.get_session(rec.session_id).is_profile_complete is True
    with pytest.raises(KeyError):
        store.save_session("missing", build_user())


def test_logout_removes_session():
    store = SessionStore()
    rec = store.create(build_user())
    store.logout(rec.session_id)
    assert store.get(rec.session_id) is None


def test_impersonation_round_trip():
    store = SessionStore()
    admin = build_user("super_admin")
    student = build_user("student", name="Asha")
    sid = store.create(admin).session_id

    store.start_impersonation(sid, student)
    assert store.is_impersonating(sid) is True
    assert store.get_session(sid) == student

    assert store.exit_impersonation(sid) == admin
    assert store.is_impersonating(sid) is False
    assert store.get_session(sid) == admin


def test_switching_targets_keeps_original_admin():
    store = SessionStore()
    admin = build_user("super_admin")
    sid = store.create(admin).session_id
    store.start_impersonation(sid, build_user("student", id="s-1"))
    store.start_impersonation(sid, build_user("tutor", id="t-1"))
    assert store.exit_impersonation(sid) == admin


def test_only_super_admin_may_impersonate():
    store = SessionStore()
    sid = store.create(build_user("tutor")).session_id
    with pytest.raises(PermissionError):
        store.start_impersonation(sid, build_user("student"))
    assert store.is_impersonating(sid) is False


def test_exit_without_impersonation_returns_none():
    store = SessionStore()
    sid = store.create(build_user("super_admin")).session_id
    assert store.exit_impersonation(sid) is None
