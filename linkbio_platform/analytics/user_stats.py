"""
UserAnalyticsAggregator module for Linkbio Platform.

Derives per-user statistics on demand from the stored aggregate:

    {
        "total_views": 100, "total_clicks": 45,
        "monthly_views": 100, "monthly_clicks": 45,
        "total_links": 3, "active_links": 2,
        "total_link_clicks": 45,
        "click_through_rate": 45,
        "top_links": [{"id": ..., "title": ..., "clicks": 30, "url": ...}, ...],
    }

`total_link_clicks` is recomputed from the links rather than copied from
`total_clicks`; the two only differ when clicked links were deleted, which
makes the pair useful as a consistency check.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import settings
from ..errors import NotFoundError
from ..models import User
from ..storage.base import BaseStorage
from .rates import percentage


@dataclass
class UserStats:
    total_views: int = 0
    total_clicks: int = 0
    monthly_views: int = 0
    monthly_clicks: int = 0
    total_links: int = 0
    active_links: int = 0
    total_link_clicks: int = 0
    click_through_rate: int = 0
    top_links: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_views": self.total_views,
            "total_clicks": self.total_clicks,
            "monthly_views": self.monthly_views,
            "monthly_clicks": self.monthly_clicks,
            "total_links": self.total_links,
            "active_links": self.active_links,
            "total_link_clicks": self.total_link_clicks,
            "click_through_rate": self.click_through_rate,
            "top_links": list(self.top_links),
        }


class UserAnalyticsAggregator:
    def __init__(self, storage: BaseStorage, top_n: Optional[int] = None):
        self.storage = storage
        self.top_n = top_n if top_n is not None else settings.TOP_LINKS

    def _load(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def compute_user_stats(self, user_id: str) -> UserStats:
        user = self._load(user_id)
        links = user.links.ordered()
        counters = user.analytics

        # sorted() is stable, so equal click counts keep display order
        top = sorted(links, key=lambda link: link.clicks, reverse=True)[: self.top_n]

        return UserStats(
            total_views=counters.total_views,
            total_clicks=counters.total_clicks,
            monthly_views=counters.monthly_views,
            monthly_clicks=counters.monthly_clicks,
            total_links=len(links),
            active_links=sum(1 for link in links if link.is_active),
            total_link_clicks=sum(link.clicks for link in links),
            click_through_rate=percentage(counters.total_clicks, counters.total_views),
            top_links=[
                {"id": link.id, "title": link.title, "clicks": link.clicks, "url": link.url}
                for link in top
            ],
        )

    def link_performance(self, user_id: str, link_id: str) -> Dict[str, Any]:
        """Lifetime numbers for one link (no per-period breakdown is stored)."""
        user = self._load(user_id)
        link = user.links.get(link_id)
        if link is None:
            raise NotFoundError("Link not found")
        return {
            "link_id": link.id,
            "title": link.title,
            "total_clicks": link.clicks,
            "is_active": link.is_active,
            "created_at": link.created_at.isoformat(),
            "updated_at": link.updated_at.isoformat(),
        }
