"""
Account adapters: sign-in, profile lookup and onboarding completion.

Design:
- Framework-agnostic, callable from web adapters.
- Sign-in failures caused by bad credentials surface as a simple ValueError so
  the login form can show a generic message; everything else is an ApiError.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from backend.identity_access.domain import User, user_from_dict

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")


def password_login(email: str, password: str, *, client: Optional[ApiClient] = None) -> Tuple[User, str, Optional[str]]:
    """Authenticate with email/password; returns (user, access, refresh)."""
    client = client or ApiClient()
    try:
        body = client.post("/auth/login/", json={"email": email, "password": password})
    except ApiError as exc:
        if exc.status_code in (400, 401, 403, 404):
            raise ValueError("invalid_credentials") from exc
        raise
    if not isinstance(body, dict) or not body.get("access") or not isinstance(body.get("user"), dict):
        raise ApiError(502, "login_response_invalid")
    return user_from_dict(body["user"]), str(body["access"]), body.get("refresh")


def fetch_me(client: ApiClient) -> User:
    body = client.get("/users/me/")
    if not isinstance(body, dict):
        raise ApiError(502, "profile_response_invalid")
    return user_from_dict(body)


def confirm_password_reset(uid: str, token: str, password: str, *, client: Optional[ApiClient] = None) -> None:
    client = client or ApiClient()
    client.post("/auth/password-reset-confirm/", json={"uid": uid, "token": token, "new_password": password})


class UserService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get(self, user_id: str) -> Optional[User]:
        try:
            return user_from_dict(self.client.get(f"/users/{user_id}/") or {})
        except (ApiError, ValueError) as exc:
            logger.warning("Failed to load user %s: %s", user_id, exc.__class__.__name__)
            return None

    def list_by_role(self, role: str) -> List[User]:
        try:
            rows = self.client.get("/users/", params={"role": role}) or []
        except ApiError as exc:
            logger.warning("Failed to list users: %s", exc.__class__.__name__)
            return []
        if isinstance(rows, dict):
            rows = rows.get("results") or []
        users = []
        for row in rows:
            try:
                users.append(user_from_dict(row))
            except ValueError:
                continue
        return users

    def complete_profile(self, user: User, fields: Mapping[str, Any]) -> User:
        """Persist onboarding answers and flip the profile to complete."""
        payload: Dict[str, Any] = {k: v for k, v in fields.items() if v not in (None, "")}
        payload["is_profile_complete"] = True
        body = self.client.patch(f"/users/{user.id}/", json=payload)
        if isinstance(body, dict) and body:
            return user_from_dict(body)
        # Some deployments answer 204; mirror the change locally.
        merged = user.to_dict()
        merged.update(payload)
        return user_from_dict(merged)

    # --- Admin management -----------------------------------------------------------

    def create(self, fields: Mapping[str, Any]) -> Optional[User]:
        """Create an account; returns the new user when the API echoes it back."""
        try:
            body = self.client.post("/users/", json=_user_payload(fields))
        except ApiError as exc:
            logger.error("User create failed: status=%s", exc.status_code)
            raise
        try:
            return user_from_dict(body) if isinstance(body, dict) else None
        except ValueError:
            return None

    def update(self, user_id: str, fields: Mapping[str, Any]) -> None:
        try:
            self.client.patch(f"/users/{user_id}/", json=_user_payload(fields))
        except ApiError as exc:
            logger.error("User %s update failed: status=%s", user_id, exc.status_code)
            raise

    def delete(self, user_id: str) -> None:
        try:
            self.client.delete(f"/users/{user_id}/")
        except ApiError as exc:
            logger.error("User %s delete failed: status=%s", user_id, exc.status_code)
            raise


# Profile fields the API stores flat on the user; `batch` travels as `batch_id`.
_FLAT_FIELDS = (
    "name", "email", "phone", "role", "status", "password", "dob", "address", "pincode",
    "qualification", "mentor", "coordinator", "aim", "skills", "topics", "coupon_code",
    "platform", "whatsapp_number", "domain", "is_profile_complete",
)


def _user_payload(fields: Mapping[str, Any]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {k: fields[k] for k in _FLAT_FIELDS if fields.get(k) not in (None, "")}
    if fields.get("batch"):
        payload["batch_id"] = fields["batch"]
    return payload
