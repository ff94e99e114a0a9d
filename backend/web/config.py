"""
Configuration and startup security checks for SkillMount.

Why: A portal that forwards bearer tokens to the remote API must never talk to
it in clear text once deployed. This module provides a single guard that
enforces minimal production safety constraints without burdening local
development.

The function simply reads environment variables and raises `SystemExit` on
fatal misconfiguration.
"""
from __future__ import annotations

from urllib.parse import urlparse
import os

DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_SESSION_TTL = 8 * 3600
LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def app_environment() -> str:
    return (os.getenv("SKILLMOUNT_ENV", "dev") or "dev").strip().lower()


def session_ttl_seconds() -> int:
    """Session lifetime; invalid values fall back to the default outside prod."""
    raw = (os.getenv("SESSION_TTL_SECONDS") or "").strip()
    if not raw:
        return DEFAULT_SESSION_TTL
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_SESSION_TTL
    return value if value > 0 else DEFAULT_SESSION_TTL


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/staging only):
    - SKILLMOUNT_API_URL must be set, use https and not point at a local host.
    - SESSION_TTL_SECONDS, when set, must be a positive integer.
    """
    if not _is_prod_like(app_environment()):
        return  # dev/test remain permissive

    api_url = (os.getenv("SKILLMOUNT_API_URL") or "").strip()
    if not api_url:
        raise SystemExit("Refusing to start: SKILLMOUNT_API_URL must be set in production.")
    parsed = urlparse(api_url)
    if parsed.scheme.lower() != "https":
        raise SystemExit("Refusing to start: SKILLMOUNT_API_URL must use https in production.")
    if (parsed.hostname or "").lower() in LOCAL_HOSTS:
        raise SystemExit("Refusing to start: SKILLMOUNT_API_URL points at a local host in production.")

    raw_ttl = (os.getenv("SESSION_TTL_SECONDS") or "").strip()
    if raw_ttl:
        try:
            ttl = int(raw_ttl)
        except ValueError:
            raise SystemExit("Refusing to start: SESSION_TTL_SECONDS must be an integer.")
        if ttl <= 0:
            raise SystemExit("Refusing to start: SESSION_TTL_SECONDS must be positive.")
