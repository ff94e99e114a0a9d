"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend, pin a dev configuration before
the app is imported, and replace the remote SkillMount API with an in-process
fake so no test ever opens a network connection.
"""
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
import requests

# Must be set before backend.web.main runs its startup guard.
os.environ["SKILLMOUNT_ENV"] = "dev"
os.environ["SKILLMOUNT_API_URL"] = "http://api.test/api"

from backend.identity_access.domain import User  # noqa: E402
from backend.identity_access.stores import SessionStore  # noqa: E402

API_BASE = "http://api.test/api"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None else json.dumps(payload).encode()

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("empty body")
        return self._payload


class FakeApi:
    """Stands in for `backend.portal.api.http_request`.

    Unregistered endpoints behave like an unreachable server
    (requests.ConnectionError), which is also what reads must survive.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def on(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = FakeResponse(status, payload)

    def on_call(self, method: str, path: str, handler: Callable[..., FakeResponse]) -> None:
        self.routes[(method.upper(), path)] = handler

    def __call__(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        path = url[len(API_BASE):] if url.startswith(API_BASE) else url
        self.calls.append((method.upper(), path, kwargs))
        route = self.routes.get((method.upper(), path))
        if route is None:
            raise requests.ConnectionError("api unreachable in tests")
        return route(**kwargs) if callable(route) else route

    def called(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [kw for m, p, kw in self.calls if m == method.upper() and p == path]


@pytest.fixture(autouse=True)
def _dev_env(monkeypatch: pytest.MonkeyPatch):
    """Every test starts in dev with the fake API base URL and no proxy trust."""
    monkeypatch.setenv("SKILLMOUNT_ENV", "dev")
    monkeypatch.setenv("SKILLMOUNT_API_URL", API_BASE)
    monkeypatch.delenv("SKILLMOUNT_TRUST_PROXY", raising=False)
    monkeypatch.delenv("SESSION_TTL_SECONDS", raising=False)
    yield


@pytest.fixture(autouse=True)
def fake_api(monkeypatch: pytest.MonkeyPatch) -> FakeApi:
    fake = FakeApi()
    monkeypatch.setattr("backend.portal.api.http_request", fake)
    return fake


@pytest.fixture
def session_store(monkeypatch: pytest.MonkeyPatch) -> SessionStore:
    """Fresh in-memory store wired into the app for this test."""
    from backend.web import main

    store = SessionStore()
    monkeypatch.setattr(main, "SESSION_STORE", store)
    return store


def build_user(role: str = "student", *, complete: bool = True, **fields: Any) -> User:
    uid = fields.pop("id", f"{role}-1")
    name = fields.pop("name", f"{role.replace('_', ' ').title()} One")
    email = fields.pop("email", f"{uid}@example.com")
    return User(id=uid, name=name, email=email, role=role, is_profile_complete=complete, **fields)


@pytest.fixture
def make_user() -> Callable[..., User]:
    return build_user


@pytest.fixture
def login_as(session_store: SessionStore):
    """Create a session for a user and return its id (set it as the cookie)."""

    def _login(user: User, *, access_token: Optional[str] = "tok-test") -> str:
        return session_store.create(user, access_token=access_token).session_id

    return _login
