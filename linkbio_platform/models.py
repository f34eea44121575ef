"""
Domain models for Linkbio Platform.

The User is the aggregate root: it owns its links (an OrderedLinks container)
and its analytics rollups. Storage backends load and save whole users;
managers mutate snapshots and hand them back for a version-checked save.

Internal layout of a user aggregate:

    User(
        id="652f...", username="jane", ...,
        links=OrderedLinks({link_id: Link(order=0, clicks=3, ...), ...}),
        analytics=AnalyticsCounters(total_views=10, total_clicks=3, ...),
        subscription=Subscription(type="free"),
        version=4,
    )
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

SUBSCRIPTION_TYPES = ("free", "pro", "enterprise")
THEMES = ("dark", "light", "auto")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class _Unset:
    """Marker for 'field not supplied' in partial updates."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Any = _Unset()


@dataclass
class Link:
    id: str
    title: str
    url: str
    description: Optional[str] = None
    is_active: bool = True
    clicks: int = 0
    order: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "is_active": self.is_active,
            "clicks": self.clicks,
            "order": self.order,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class OrderedLinks:
    """
    Owned, ordered container of one user's links keyed by identifier.

    Lookups by id are O(1). Display order is the `order` field, with
    insertion sequence as the tiebreak so iteration is always deterministic.
    """

    def __init__(self, links: Optional[List[Link]] = None):
        self._links: Dict[str, Link] = {}
        for link in links or []:
            self.append(link)

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, link_id: object) -> bool:
        return link_id in self._links

    def __iter__(self) -> Iterator[Link]:
        return iter(self._links.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedLinks):
            return NotImplemented
        return list(self._links.items()) == list(other._links.items())

    def __repr__(self) -> str:
        return f"OrderedLinks({[link.id for link in self.ordered()]!r})"

    def get(self, link_id: str) -> Optional[Link]:
        return self._links.get(link_id)

    def append(self, link: Link) -> Link:
        if link.id in self._links:
            raise KeyError(f"duplicate link id {link.id!r}")
        self._links[link.id] = link
        return link

    def pop(self, link_id: str) -> Link:
        return self._links.pop(link_id)

    def ids(self) -> List[str]:
        return list(self._links)

    def max_order(self) -> int:
        """Highest order value in use, or -1 for an empty collection."""
        return max((link.order for link in self._links.values()), default=-1)

    def ordered(self) -> List[Link]:
        seq = {link_id: i for i, link_id in enumerate(self._links)}
        return sorted(self._links.values(), key=lambda link: (link.order, seq[link.id]))


@dataclass
class AnalyticsCounters:
    total_views: int = 0
    total_clicks: int = 0
    monthly_views: int = 0
    monthly_clicks: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_views": self.total_views,
            "total_clicks": self.total_clicks,
            "monthly_views": self.monthly_views,
            "monthly_clicks": self.monthly_clicks,
        }


@dataclass
class Subscription:
    type: str = "free"
    expires_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "expires_at": _iso(self.expires_at)}


@dataclass
class User:
    id: str
    username: str
    email: str = ""
    display_name: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    theme: str = "dark"
    is_public: bool = True
    links: OrderedLinks = field(default_factory=OrderedLinks)
    analytics: AnalyticsCounters = field(default_factory=AnalyticsCounters)
    subscription: Subscription = field(default_factory=Subscription)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    version: int = 0

    def to_dict(self, include_links: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "display_name": self.display_name,
            "bio": self.bio,
            "profile_image": self.profile_image,
            "theme": self.theme,
            "is_public": self.is_public,
            "analytics": self.analytics.to_dict(),
            "subscription": self.subscription.to_dict(),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_links:
            data["links"] = [link.to_dict() for link in self.links.ordered()]
        return data


@dataclass
class LinkUpdate:
    """Partial link update; UNSET fields are left unchanged."""

    title: Any = UNSET
    url: Any = UNSET
    description: Any = UNSET
    is_active: Any = UNSET

    def supplied(self) -> Dict[str, Any]:
        return {name: value for name, value in vars(self).items() if value is not UNSET}


@dataclass
class ProfileUpdate:
    """Partial profile update; UNSET fields are left unchanged."""

    username: Any = UNSET
    display_name: Any = UNSET
    bio: Any = UNSET
    profile_image: Any = UNSET
    theme: Any = UNSET
    is_public: Any = UNSET

    def supplied(self) -> Dict[str, Any]:
        return {name: value for name, value in vars(self).items() if value is not UNSET}
