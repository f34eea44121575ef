"""
ClickTracker module for Linkbio Platform.

Responsibilities:
    - Count a click on a user's link and roll it into the user's totals
    - Count a public profile view
    - Zero the monthly rollups when an external scheduler asks for it

Counters are only ever changed through the storage layer's atomic
increments, never by writing back a value read earlier, so concurrent
clicks on the same link cannot lose updates. There is no deduplication,
rate limiting or bot filtering: every call counts.
"""

import logging
from typing import Optional

from ..errors import NotFoundError, ValidationError
from ..models import User
from ..storage.base import BaseStorage

log = logging.getLogger(__name__)


class ClickTracker:
    def __init__(self, storage: BaseStorage):
        self.storage = storage

    def _resolve(self, username: str) -> User:
        if not isinstance(username, str) or not username.strip():
            raise ValidationError("Username is required")
        user = self.storage.find_user_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def record_click(self, username: str, link_id: str) -> None:
        """
        Count one click on `link_id` owned by `username`.

        Increments link.clicks, analytics.total_clicks and
        analytics.monthly_clicks by one, atomically.

        Raises:
            NotFoundError: unknown username, or the user owns no such link.
        """
        user = self._resolve(username)
        if not self.storage.increment_click(user.id, link_id):
            raise NotFoundError("Link not found")
        log.debug("Click recorded for %s/%s", user.username, link_id)

    def record_view(self, username: str) -> None:
        """Count one profile view on total and monthly views."""
        user = self._resolve(username)
        if not self.storage.increment_views(user.id):
            raise NotFoundError("User not found")

    def reset_monthly(self, user_id: Optional[str] = None) -> int:
        """
        Roll over the monthly counters for one user, or every user when
        `user_id` is None. Totals are untouched.

        Returns:
            int: number of users reset.
        """
        count = self.storage.reset_monthly(user_id)
        if user_id is not None and count == 0:
            raise NotFoundError("User not found")
        log.info("Monthly counters reset for %d user(s)", count)
        return count
