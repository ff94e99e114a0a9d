"""
Shared web security helpers for routes.

Every state-changing form post in the portal goes through `_is_same_origin`,
so the cookie-authenticated session cannot be driven from another site.
"""
from __future__ import annotations

from typing import Tuple
from urllib.parse import urlparse
import os

from fastapi import Request

Origin = Tuple[str, str, int]


def _default_port(scheme: str) -> int:
    return 443 if scheme == "https" else 80


def _parse_origin(url: str) -> Origin:
    p = urlparse(url)
    if not p.scheme or not p.hostname:
        raise ValueError("invalid_origin")
    scheme = p.scheme.lower()
    return scheme, p.hostname.lower(), int(p.port or _default_port(scheme))


def _server_origin(request: Request) -> Origin:
    """Origin the app is served from; X-Forwarded-* only when SKILLMOUNT_TRUST_PROXY=true."""
    trust_proxy = (os.getenv("SKILLMOUNT_TRUST_PROXY", "false") or "").lower() == "true"
    if trust_proxy:
        proto = (request.headers.get("x-forwarded-proto") or request.url.scheme or "http").split(",")[0].strip()
        scheme = (proto or "http").lower()
        host_raw = (request.headers.get("x-forwarded-host") or request.headers.get("host") or "").split(",")[0].strip()
        if ":" in host_raw:
            host, port_str = host_raw.rsplit(":", 1)
            port = int(port_str) if port_str.isdigit() else _default_port(scheme)
        else:
            host = host_raw or (request.url.hostname or "")
            port = _default_port(scheme)
        xf_port = (request.headers.get("x-forwarded-port") or "").split(",")[0].strip()
        if xf_port.isdigit():
            port = int(xf_port)
        return scheme, host.lower(), port

    scheme = (request.url.scheme or "http").lower()
    return scheme, (request.url.hostname or "").lower(), int(request.url.port or _default_port(scheme))


def _is_same_origin(request: Request) -> bool:
    """Verify same-origin using Origin or Referer headers.

    - If Origin is present, require exact scheme/host/port match with server.
    - Else if Referer is present, validate its origin similarly.
    - Else (no headers): allow, so non-browser clients keep working.
    Unparseable headers count as cross-origin.
    """
    server = _server_origin(request)
    claimed = request.headers.get("origin") or request.headers.get("referer")
    if not claimed:
        return True
    try:
        return _parse_origin(claimed) == server
    except ValueError:
        return False
