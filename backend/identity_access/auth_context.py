"""
Per-request authentication context.

Why:
    Route guards and components need the same view of "who is signed in".
    Instead of a module-level singleton, the middleware builds one AuthContext
    per request, initialises it once from the session store and hands it down
    via `request.state.auth`.

Lifecycle:
    INIT  -> `initialize()` restores the session (failures degrade to
             "no session" and are logged)
    READY -> `is_loading` is False; `login`, `logout` and `exit_impersonation`
             are the only mutation entry points and write through to the store.
"""
from __future__ import annotations

from typing import Optional
import logging

from .domain import User
from .stores import SessionStore

logger = logging.getLogger("skillmount.identity_access")

INIT = "init"
READY = "ready"


class AuthContext:
    def __init__(self, store: SessionStore, session_id: Optional[str] = None) -> None:
        self._store = store
        self.session_id = session_id
        self.user: Optional[User] = None
        self.is_impersonating = False
        self.phase = INIT

    @property
    def is_loading(self) -> bool:
        return self.phase == INIT

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def access_token(self) -> Optional[str]:
        if not self.session_id:
            return None
        rec = self._store.get(self.session_id)
        return rec.access_token if rec else None

    def initialize(self) -> "AuthContext":
        """Restore the session once; subsequent calls are no-ops."""
        if self.phase == READY:
            return self
        try:
            if self.session_id:
                self.user = self._store.get_session(self.session_id)
                self.is_impersonating = bool(self.user) and self._store.is_impersonating(self.session_id)
        except Exception as exc:
            logger.warning("Session restore failed: %s", exc.__class__.__name__)
            self.user = None
            self.is_impersonating = False
        finally:
            self.phase = READY
        return self

    def login(
        self,
        user: User,
        *,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> None:
        """Set the signed-in user and persist it.

        A fresh sign-in (API tokens supplied) always rotates the session id,
        exposed on `session_id` for the cookie. Without tokens the current
        session is updated in place (e.g. after onboarding refreshed the
        profile) and a new one is started only when none exists.
        """
        reuse = access_token is None and bool(self.session_id) and self._store.get(self.session_id) is not None
        if reuse:
            self._store.save_session(self.session_id, user)
        else:
            if self.session_id:
                self._store.delete(self.session_id)
            rec = self._store.create(user, access_token=access_token, refresh_token=refresh_token)
            self.session_id = rec.session_id
            self.is_impersonating = False
        self.user = user
        self.phase = READY

    def logout(self) -> None:
        if self.session_id:
            self._store.logout(self.session_id)
        self.user = None
        self.is_impersonating = False
        self.session_id = None
        self.phase = READY

    def exit_impersonation(self) -> Optional[User]:
        if not self.session_id:
            return None
        admin = self._store.exit_impersonation(self.session_id)
        if admin is not None:
            logger.info("Impersonation ended: admin=%s", admin.id)
            self.user = admin
            self.is_impersonating = False
        return admin

    def start_impersonation(self, target: User) -> None:
        """Act as `target` until `exit_impersonation`; the store enforces super_admin."""
        if not self.session_id:
            raise PermissionError("not_authenticated")
        self._store.start_impersonation(self.session_id, target)
        logger.info("Impersonation started: target=%s", target.id)
        self.user = target
        self.is_impersonating = True
