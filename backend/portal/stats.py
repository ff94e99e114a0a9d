"""Admin dashboard statistics (`/admin/stats/`). One call feeds every widget; failures yield an empty dashboard."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping
import logging

from .api import ApiClient, ApiError

logger = logging.getLogger("skillmount.portal")


@dataclass
class StatCard:
    label: str
    value: str
    change: float = 0.0
    trend: str = "neutral"  # up | down | neutral


@dataclass
class ChartPoint:
    name: str
    value: float


@dataclass
class Activity:
    id: str
    user: str
    action: str
    time: str
    kind: str = "info"


@dataclass
class DashboardStats:
    stats: List[StatCard] = field(default_factory=list)
    growth: List[ChartPoint] = field(default_factory=list)
    batches: List[ChartPoint] = field(default_factory=list)
    activity: List[Activity] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.stats or self.growth or self.batches or self.activity)


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _points(rows: Any) -> List[ChartPoint]:
    if not isinstance(rows, list):
        return []
    return [
        ChartPoint(name=str(r.get("name") or ""), value=_number(r.get("value")))
        for r in rows
        if isinstance(r, Mapping)
    ]


def stats_from_dict(data: Mapping[str, Any]) -> DashboardStats:
    cards = [
        StatCard(
            label=str(s.get("label") or ""),
            value=str(s.get("value") if s.get("value") is not None else ""),
            change=_number(s.get("change")),
            trend=str(s.get("trend") or "neutral"),
        )
        for s in (data.get("stats") or [])
        if isinstance(s, Mapping)
    ]
    activity = [
        Activity(
            id=str(a.get("id", "")),
            user=str(a.get("actor_name") or "System"),
            action=str(a.get("description") or ""),
            # Date part of the ISO timestamp is enough for the feed.
            time=str(a.get("timestamp") or "")[:10],
            kind=str(a.get("action_type") or "info"),
        )
        for a in (data.get("activity") or [])
        if isinstance(a, Mapping)
    ]
    return DashboardStats(
        stats=cards,
        growth=_points(data.get("growth")),
        batches=_points(data.get("batches")),
        activity=activity,
    )


class StatsService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def dashboard(self) -> DashboardStats:
        try:
            body = self.client.get("/admin/stats/")
        except ApiError as exc:
            logger.warning("Failed to load dashboard stats: status=%s", exc.status_code)
            return DashboardStats()
        if not isinstance(body, Mapping):
            return DashboardStats()
        return stats_from_dict(body)
