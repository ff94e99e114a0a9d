"""
Thin client for the SkillMount backend API.

Why: Every portal service talks to the same remote API with the same base URL,
timeout and bearer token handling. Keeping that in one place lets the
services stay a few lines each and gives tests a single seam to patch.

Errors: transport failures and non-2xx answers raise `ApiError`. Callers decide
whether to degrade (reads) or propagate (mutations). There are no retries.

Security: Never log tokens or request bodies.
"""
from __future__ import annotations

from typing import Any, Dict, Optional
import os

# Small indirection to ease monkeypatching in tests
import requests as http


class ApiError(Exception):
    """Remote API call failed (transport error or non-2xx status)."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(f"api_error:{status_code}")
        self.status_code = status_code
        self.detail = detail


def api_base_url() -> str:
    return (os.getenv("SKILLMOUNT_API_URL") or "http://localhost:8000/api").rstrip("/")


def api_timeout() -> float:
    try:
        return float(os.getenv("SKILLMOUNT_API_TIMEOUT", "10"))
    except ValueError:
        return 10.0


def http_request(method: str, url: str, **kwargs: Any):
    return http.request(method, url, **kwargs)


class ApiClient:
    def __init__(self, access_token: Optional[str] = None, *, base_url: Optional[str] = None) -> None:
        self.access_token = access_token
        self.base_url = (base_url or api_base_url()).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            r = http_request(method, url, headers=self._headers(), timeout=api_timeout(), **kwargs)
        except http.RequestException as exc:
            raise ApiError(0, exc.__class__.__name__) from exc
        if r.status_code >= 400:
            raise ApiError(r.status_code, _error_detail(r))
        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as exc:
            raise ApiError(r.status_code, "invalid_json") from exc

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)


def _error_detail(response) -> str:
    """Extract a short, user-presentable error string from an API response."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return ""
