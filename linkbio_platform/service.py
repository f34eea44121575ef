"""
Service facade for Linkbio Platform.

Wires storage, LinkCollection, ClickTracker, ProfileManager and both
aggregators together, and exposes the operations a presentation layer
consumes. Every operation returns an OperationResult: values are plain
dicts/lists ready for serialization, and domain errors become failures
tagged with their ErrorKind. Anything that is not a domain error
propagates.

Example:
    >>> service = LinkbioService(Storage())
    >>> user = service.register_user("jane").value
    >>> service.add_link(user["id"], {"title": "Blog", "url": "https://jane.dev"}).success
    True
"""

import functools
import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from .analytics.click_tracker import ClickTracker
from .analytics.platform_stats import PlatformAnalyticsAggregator
from .analytics.user_stats import UserAnalyticsAggregator
from .errors import LinkbioError, ValidationError
from .manager.link_collection import LinkCollection, UserLocks
from .manager.profile_manager import ProfileManager
from .manager.strategies import BaseIdStrategy, get_strategy_from_config
from .models import LinkUpdate, ProfileUpdate
from .results import OperationResult
from .storage.base import BaseStorage

log = logging.getLogger(__name__)

_LINK_FIELDS = ("title", "url", "description", "is_active")
_PROFILE_FIELDS = ("username", "display_name", "bio", "profile_image", "theme", "is_public")


def _guarded(func: Callable[..., Any]) -> Callable[..., OperationResult]:
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> OperationResult:
        try:
            result = func(*args, **kwargs)
        except LinkbioError as exc:
            log.info("%s failed (%s): %s", func.__name__, exc.kind.value, exc.message)
            return OperationResult.fail(exc)
        if isinstance(result, OperationResult):
            return result
        return OperationResult.ok(result)

    return wrapper


def _partial(payload: Any, allowed: Sequence[str], cls):
    """Build an update struct from a mapping; absent keys stay UNSET."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Update payload must be an object")
    unknown = sorted(set(payload) - set(allowed))
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}")
    return cls(**{name: payload[name] for name in allowed if name in payload})


class LinkbioService:
    def __init__(self, storage: BaseStorage, id_strategy: Optional[BaseIdStrategy] = None):
        self.storage = storage
        id_strategy = id_strategy or get_strategy_from_config()
        locks = UserLocks()
        self.tracker = ClickTracker(storage)
        self.links = LinkCollection(storage, id_strategy=id_strategy, locks=locks)
        self.profiles = ProfileManager(storage, tracker=self.tracker, id_strategy=id_strategy, locks=locks)
        self.user_stats = UserAnalyticsAggregator(storage)
        self.platform_stats = PlatformAnalyticsAggregator(storage)

    # ---------------------------------------------------------------------
    # Links
    # ---------------------------------------------------------------------
    @_guarded
    def list_links(self, user_id: str):
        return [link.to_dict() for link in self.links.list(user_id)]

    @_guarded
    def add_link(self, user_id: str, payload: Mapping[str, Any]):
        if not isinstance(payload, Mapping):
            raise ValidationError("Title and URL are required")
        link = self.links.add(
            user_id, payload.get("title"), payload.get("url"), payload.get("description")
        )
        return link.to_dict()

    @_guarded
    def update_link(self, user_id: str, link_id: str, payload: Mapping[str, Any]):
        fields = _partial(payload, _LINK_FIELDS, LinkUpdate)
        return self.links.update(user_id, link_id, fields).to_dict()

    @_guarded
    def toggle_link(self, user_id: str, link_id: str):
        return self.links.toggle(user_id, link_id).to_dict()

    @_guarded
    def delete_link(self, user_id: str, link_id: str):
        self.links.remove(user_id, link_id)
        return OperationResult.ok(message="Link deleted successfully")

    @_guarded
    def reorder_links(self, user_id: str, link_ids: Sequence[str]):
        return [link.to_dict() for link in self.links.reorder(user_id, link_ids)]

    @_guarded
    def record_click(self, username: str, link_id: str):
        self.tracker.record_click(username, link_id)
        return OperationResult.ok(message="Click tracked successfully")

    # ---------------------------------------------------------------------
    # Analytics
    # ---------------------------------------------------------------------
    @_guarded
    def get_user_stats(self, user_id: str):
        return self.user_stats.compute_user_stats(user_id).to_dict()

    @_guarded
    def get_platform_stats(self, now=None):
        return self.platform_stats.compute_platform_stats(now=now).to_dict()

    @_guarded
    def get_link_performance(self, user_id: str, link_id: str):
        return self.user_stats.link_performance(user_id, link_id)

    @_guarded
    def reset_monthly_counters(self, user_id: Optional[str] = None):
        return {"reset_users": self.tracker.reset_monthly(user_id)}

    # ---------------------------------------------------------------------
    # Profiles
    # ---------------------------------------------------------------------
    @_guarded
    def register_user(
        self,
        username: str,
        email: str = "",
        display_name: Optional[str] = None,
        subscription_type: str = "free",
    ):
        user = self.profiles.register(username, email, display_name, subscription_type)
        return user.to_dict()

    @_guarded
    def check_username(self, username: str):
        return {"available": self.profiles.check_username(username)}

    @_guarded
    def get_profile(self, user_id: str):
        return self.profiles.get_profile(user_id).to_dict()

    @_guarded
    def update_profile(self, user_id: str, payload: Mapping[str, Any]):
        fields = _partial(payload, _PROFILE_FIELDS, ProfileUpdate)
        return self.profiles.update_profile(user_id, fields).to_dict()

    @_guarded
    def get_public_profile(self, username: str):
        return self.profiles.get_public_profile(username)

    @_guarded
    def resolve_user_id(self, username: str):
        return self.profiles.resolve(username).id
