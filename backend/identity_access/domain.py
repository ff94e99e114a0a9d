"""
Identity domain constants and the session user record.

Why:
- Centralize allowed roles to avoid drift between the web layer and the
  remote API adapters.
- Keep a single parser for user payloads; the API answers with snake_case
  while older clients stored camelCase.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"student", "tutor", "affiliate", "super_admin"})

SUPER_ADMIN = "super_admin"
# Roles that must finish onboarding before browsing the portal.
ONBOARDING_ROLES = frozenset({"student", "tutor", "affiliate"})


@dataclass
class User:
    id: str
    name: str
    email: str
    role: str
    is_profile_complete: bool = False
    avatar: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    # Onboarding fields shared by all roles
    dob: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    qualification: Optional[str] = None
    # Student
    batch: Optional[str] = None
    mentor: Optional[str] = None
    coordinator: Optional[str] = None
    aim: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    # Tutor
    topics: List[str] = field(default_factory=list)
    # Affiliate (students may also carry a referral coupon)
    coupon_code: Optional[str] = None
    platform: Optional[str] = None
    whatsapp_number: Optional[str] = None
    domain: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# API field name -> User attribute, for keys that differ.
_ALIASES = {
    "isProfileComplete": "is_profile_complete",
    "whatsappNumber": "whatsapp_number",
    "whatsapp": "whatsapp_number",
    "couponCode": "coupon_code",
    "batch_id": "batch",
}


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(v) for v in value]


def user_from_dict(data: Mapping[str, Any]) -> User:
    """Build a `User` from an API or stored payload.

    Raises:
        ValueError: when `role` is not one of ALLOWED_ROLES or `id` is missing.
    """
    values: Dict[str, Any] = {}
    known = set(User.__dataclass_fields__)
    for key, value in data.items():
        name = _ALIASES.get(key, key)
        if name in known and name not in values:
            values[name] = value

    affiliate = data.get("affiliate_profile")
    if isinstance(affiliate, Mapping):
        values.setdefault("coupon_code", affiliate.get("coupon_code"))
        values.setdefault("platform", affiliate.get("platform"))

    role = str(values.get("role") or "").lower()
    if role not in ALLOWED_ROLES:
        raise ValueError("invalid_role")
    if values.get("id") in (None, ""):
        raise ValueError("missing_id")

    values["role"] = role
    values["id"] = str(values["id"])
    values["name"] = str(values.get("name") or "")
    values["email"] = str(values.get("email") or "")
    values["is_profile_complete"] = bool(values.get("is_profile_complete", False))
    values["skills"] = _as_list(values.get("skills"))
    values["topics"] = _as_list(values.get("topics"))
    return User(**values)


__all__ = ["ALLOWED_ROLES", "SUPER_ADMIN", "ONBOARDING_ROLES", "User", "user_from_dict"]
