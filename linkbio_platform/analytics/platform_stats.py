"""
PlatformAnalyticsAggregator module for Linkbio Platform.

Computes cross-user statistics with a full scan of every user aggregate.
Nothing is cached; each call reflects the current stored state. The scan is
linear in users and links, which is a scaling limit rather than a
correctness one.

Resulting shape:

    {
        "total_users": 12, "total_links": 40,
        "total_clicks": 310, "total_views": 1200,
        "avg_links_per_user": 3, "click_through_rate": 26,
        "monthly_growth": 50, "pro_conversion_rate": 17,
    }

A user whose analytics, links or subscription sub-record is missing or
malformed still counts as a user, but contributes zero for that part; the
rest of the scan carries on.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ..config import settings
from ..models import User, utcnow
from ..storage.base import BaseStorage
from .rates import growth, percentage, ratio

log = logging.getLogger(__name__)


@dataclass
class PlatformStats:
    total_users: int = 0
    total_links: int = 0
    total_clicks: int = 0
    total_views: int = 0
    avg_links_per_user: int = 0
    click_through_rate: int = 0
    monthly_growth: int = 0
    pro_conversion_rate: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_users": self.total_users,
            "total_links": self.total_links,
            "total_clicks": self.total_clicks,
            "total_views": self.total_views,
            "avg_links_per_user": self.avg_links_per_user,
            "click_through_rate": self.click_through_rate,
            "monthly_growth": self.monthly_growth,
            "pro_conversion_rate": self.pro_conversion_rate,
        }


def _count(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


class PlatformAnalyticsAggregator:
    def __init__(self, storage: BaseStorage, window_days: Optional[int] = None):
        self.storage = storage
        self.window_days = window_days if window_days is not None else settings.GROWTH_WINDOW_DAYS

    @staticmethod
    def _skip(user: User, part: str) -> int:
        log.warning("Platform stats: malformed %s on user %s, counted as zero", part, getattr(user, "id", "?"))
        return 0

    def _link_count(self, user: User) -> int:
        try:
            return len(user.links)
        except (AttributeError, TypeError):
            return self._skip(user, "links")

    def _counters(self, user: User) -> Dict[str, int]:
        analytics = getattr(user, "analytics", None)
        values = {}
        for name in ("total_clicks", "total_views"):
            value = _count(getattr(analytics, name, None))
            values[name] = value if value is not None else self._skip(user, f"analytics.{name}")
        return values

    @staticmethod
    def _is_pro(user: User) -> bool:
        subscription = getattr(user, "subscription", None)
        return getattr(subscription, "type", None) == "pro"

    @staticmethod
    def _created_at(user: User) -> Optional[datetime]:
        created = getattr(user, "created_at", None)
        if not isinstance(created, datetime):
            return None
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created

    def compute_platform_stats(self, now: Optional[datetime] = None) -> PlatformStats:
        """
        Scan all users and derive platform totals and rates.

        Args:
            now: reference time for the growth windows (defaults to current UTC time).
        """
        now = now or utcnow()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        window = timedelta(days=self.window_days)
        recent_start = now - window
        previous_start = now - 2 * window

        stats = PlatformStats()
        pro_users = recent = previous = 0

        for user in self.storage.iter_users():
            stats.total_users += 1
            stats.total_links += self._link_count(user)
            counters = self._counters(user)
            stats.total_clicks += counters["total_clicks"]
            stats.total_views += counters["total_views"]
            if self._is_pro(user):
                pro_users += 1

            created = self._created_at(user)
            if created is None:
                self._skip(user, "created_at")
            elif created >= recent_start:
                recent += 1
            elif created >= previous_start:
                previous += 1

        stats.avg_links_per_user = ratio(stats.total_links, stats.total_users)
        stats.click_through_rate = percentage(stats.total_clicks, stats.total_views)
        stats.monthly_growth = growth(recent, previous)
        stats.pro_conversion_rate = percentage(pro_users, stats.total_users)
        return stats
