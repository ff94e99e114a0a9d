"""
System settings service.

The admin area edits the option lists used by onboarding and ticket forms
(batches, mentors, topics, ...). Reads always yield usable settings: an
unreachable API or an empty batch list falls back to the defaults below.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, List, Mapping
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")


@dataclass
class SystemSettings:
    batches: List[str] = field(default_factory=list)
    mentors: List[str] = field(default_factory=list)
    coordinators: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    platforms: List[str] = field(default_factory=list)
    macros: List[str] = field(default_factory=list)
    faq_categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return asdict(self)


def default_settings() -> SystemSettings:
    return SystemSettings(
        batches=["Sep 2025", "Aug 2025", "July 2025", "June 2025", "May 2025", "April 2025", "March 2025"],
        mentors=["Dr. Smith", "Prof. Jane Doe"],
        coordinators=["Sarah Wilson", "Mike Ross"],
        topics=["WordPress", "React", "SEO", "Digital Marketing", "UI/UX Design", "E-commerce", "Python"],
        platforms=["YouTube", "Instagram", "LinkedIn", "Facebook", "Twitter"],
        macros=[
            "We are looking into your issue.",
            "Please clear your browser cache and try again.",
            "Can you please provide a screenshot?",
            "This issue has been resolved.",
            "Thank you for your patience.",
        ],
        faq_categories=[
            "WordPress Setup & Hosting",
            "Theme Customization",
            "Plugin Management",
            "SEO & Performance",
            "Course Information",
            "Certification & Placement",
        ],
    )


_ALIASES = {"faqCategories": "faq_categories"}


def settings_from_dict(data: Mapping[str, Any]) -> SystemSettings:
    defaults = default_settings()
    names = {f.name for f in fields(SystemSettings)}
    values: Dict[str, List[str]] = {}
    for key, value in data.items():
        name = _ALIASES.get(key, key)
        if name in names and isinstance(value, list):
            values[name] = [str(v) for v in value]
    result = SystemSettings(**values)
    if not result.batches:
        result.batches = list(defaults.batches)
    return result


def parse_lines(raw: str) -> List[str]:
    """Split a textarea value into a clean list (one entry per line)."""
    return [line.strip() for line in (raw or "").splitlines() if line.strip()]


class SettingsService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get(self) -> SystemSettings:
        try:
            body = self.client.get("/system/settings/")
        except ApiError as exc:
            logger.warning("Failed to load system settings: status=%s", exc.status_code)
            return default_settings()
        if not isinstance(body, Mapping) or not body:
            return default_settings()
        return settings_from_dict(body)

    def update(self, settings: SystemSettings) -> bool:
        try:
            self.client.put("/system/settings/", json=settings.to_dict())
        except ApiError as exc:
            logger.error("System settings update failed: status=%s", exc.status_code)
            return False
        return True
