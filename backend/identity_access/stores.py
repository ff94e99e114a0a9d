"""
In-memory session store.

Why: Keep the signed-in identity server-side and opaque to the client. The
cookie carries only a random session id; the user record, API tokens and the
impersonation marker stay here.

Impersonation: a super_admin may act as another user. The original admin
identity is parked in `impersonated_by` so it can be restored later without a
second login.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import secrets
import time

from .domain import User


def _now() -> int:
    return int(time.time())


@dataclass
class SessionRecord:
    session_id: str
    user: User
    impersonated_by: Optional[User] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


class SessionStore:
    def __init__(self, ttl_seconds: int = 8 * 3600):
        self._data: Dict[str, SessionRecord] = {}
        self.ttl_seconds = ttl_seconds

    def create(
        self,
        user: User,
        *,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
    ) -> SessionRecord:
        sid = secrets.token_urlsafe(24)
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        rec = SessionRecord(
            session_id=sid,
            user=user,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=_now() + ttl,
        )
        self._data[sid] = rec
        return rec

    def get(self, session_id: str) -> Optional[SessionRecord]:
        rec = self._data.get(session_id)
        if not rec:
            return None
        if rec.expires_at and rec.expires_at < _now():
            self._data.pop(session_id, None)
            return None
        return rec

    def delete(self, session_id: str) -> None:
        self._data.pop(session_id, None)

    # --- Session user -----------------------------------------------------------

    def get_session(self, session_id: str) -> Optional[User]:
        rec = self.get(session_id)
        return rec.user if rec else None

    def save_session(self, session_id: str, user: User) -> None:
        """Replace the user of an existing session.

        Raises:
            KeyError: when the session does not exist (or has expired).
        """
        rec = self.get(session_id)
        if rec is None:
            raise KeyError(session_id)
        rec.user = user

    def logout(self, session_id: str) -> None:
        self.delete(session_id)

    # --- Impersonation ----------------------------------------------------------

    def start_impersonation(self, session_id: str, target: User) -> SessionRecord:
        """Switch the session to `target`, remembering the acting admin.

        Only the real admin may start impersonation; switching targets while
        already impersonating keeps the original admin as the restore point.
        """
        rec = self.get(session_id)
        if rec is None:
            raise KeyError(session_id)
        admin = rec.impersonated_by or rec.user
        if not admin.is_super_admin:
            raise PermissionError("impersonation_requires_super_admin")
        rec.impersonated_by = admin
        rec.user = target
        return rec

    def is_impersonating(self, session_id: str) -> bool:
        rec = self.get(session_id)
        return bool(rec and rec.impersonated_by is not None)

    def exit_impersonation(self, session_id: str) -> Optional[User]:
        """Restore the original admin; returns it, or None when not impersonating."""
        rec = self.get(session_id)
        if not rec or rec.impersonated_by is None:
            return None
        rec.user = rec.impersonated_by
        rec.impersonated_by = None
        return rec.user
