"""
Storage module for Linkbio Platform (in-memory implementation).

Responsibilities:
    - Keep User aggregates (profile, ordered links, analytics rollups)
    - Version-checked saves for read-modify-write mutations
    - Atomic click and view increments
    - Username index for case-insensitive public lookups

Design:
    - One re-entrant lock guards every table, so each method is atomic.
    - Reads hand out deep copies; callers mutate snapshots and save them back.
    - `save_user` copies counters from the stored record rather than the
      snapshot, so a click landing between a read and a save is never lost.
    - For production, use DBStorage (PostgreSQL); the contract is identical.
"""

import copy
import logging
import threading
from typing import Dict, Iterator, List, Optional

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User, utcnow
from .base import BaseStorage

log = logging.getLogger(__name__)


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty tables.

        Internal schema:
            self.users = {user_id: User}
            self._usernames = {lowercase username: user_id}
        """
        self.users: Dict[str, User] = {}
        self._usernames: Dict[str, str] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _key(username: str) -> str:
        return (username or "").strip().lower()

    def create_user(self, user: User) -> User:
        key = self._key(user.username)
        with self._lock:
            if user.id in self.users:
                raise ValidationError("User id already exists")
            if key in self._usernames:
                raise ValidationError("Username already taken")
            stored = copy.deepcopy(user)
            stored.username = key
            self.users[stored.id] = stored
            self._usernames[key] = stored.id
            return copy.deepcopy(stored)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self.users.get(user_id)
            return copy.deepcopy(user) if user is not None else None

    def find_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            user_id = self._usernames.get(self._key(username))
            if user_id is None:
                return None
            return copy.deepcopy(self.users[user_id])

    def save_user(self, user: User) -> User:
        with self._lock:
            current = self.users.get(user.id)
            if current is None:
                raise NotFoundError("User not found")
            if current.version != user.version:
                log.warning(
                    "Write conflict on user %s: snapshot v%s, stored v%s",
                    user.id, user.version, current.version,
                )
                raise ConflictError("User was modified concurrently; reload and retry")

            new_key = self._key(user.username)
            owner = self._usernames.get(new_key)
            if owner is not None and owner != user.id:
                raise ValidationError("Username already taken")

            merged = copy.deepcopy(user)
            merged.username = new_key
            for link in merged.links:
                existing = current.links.get(link.id)
                link.clicks = existing.clicks if existing is not None else 0
            merged.analytics = copy.deepcopy(current.analytics)
            merged.version = current.version + 1

            if new_key != current.username:
                self._usernames.pop(current.username, None)
                self._usernames[new_key] = user.id
            self.users[user.id] = merged
            return copy.deepcopy(merged)

    def increment_click(self, user_id: str, link_id: str) -> bool:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return False
            link = user.links.get(link_id)
            if link is None:
                return False
            link.clicks += 1
            user.analytics.total_clicks += 1
            user.analytics.monthly_clicks += 1
            return True

    def increment_views(self, user_id: str) -> bool:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return False
            user.analytics.total_views += 1
            user.analytics.monthly_views += 1
            return True

    def reset_monthly(self, user_id: Optional[str] = None) -> int:
        with self._lock:
            if user_id is not None:
                targets: List[User] = [self.users[user_id]] if user_id in self.users else []
            else:
                targets = list(self.users.values())
            for user in targets:
                user.analytics.monthly_views = 0
                user.analytics.monthly_clicks = 0
                user.updated_at = utcnow()
            return len(targets)

    def iter_users(self) -> Iterator[User]:
        with self._lock:
            snapshot = copy.deepcopy(list(self.users.values()))
        return iter(snapshot)
