"""
LinkCollection module for Linkbio Platform.

Responsibilities:
    - List a user's links in display order
    - Add, edit, toggle and delete links
    - Reorder links from a client-supplied identifier sequence
    - Keep the order field a strict total order after every mutation

Design notes:
    - Every mutation is a read-modify-write of the whole user aggregate:
      load a snapshot, mutate it, hand it back to `storage.save_user`, which
      is version-checked. A per-user lock serializes writers in this process;
      the version check catches writers in other processes (ConflictError,
      never retried here).
    - New links are appended with order = collection size. If deletions left
      that value in use, the next free value above the maximum is taken.
    - Reorder ignores identifiers the user does not own. Named links take
      positions 0..k-1 in the given sequence; links not named keep their
      relative order and follow them.
    - Deletion never renumbers the remaining links.
"""

import logging
import threading
import weakref
from typing import Any, Dict, List, Optional, Sequence

from ..errors import NotFoundError, ValidationError
from ..models import Link, LinkUpdate, User, utcnow
from ..storage.base import BaseStorage
from .strategies import BaseIdStrategy, get_strategy_from_config

log = logging.getLogger(__name__)


class UserLocks:
    """
    Lazily created per-user mutation locks.

    Entries are weakly held: a lock lives only while some caller holds a
    reference to it, so ids that never resolve to a user do not accumulate.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()

    def __call__(self, user_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)


def _required_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


def _optional_text(value: Any, name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    return value.strip()


class LinkCollection:
    """Owns the ordered links of every user, one aggregate at a time."""

    def __init__(
        self,
        storage: BaseStorage,
        id_strategy: Optional[BaseIdStrategy] = None,
        locks: Optional[UserLocks] = None,
    ):
        self.storage = storage
        self.id_strategy = id_strategy or get_strategy_from_config()
        self._locks = locks or UserLocks()

    def _load(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _link(user: User, link_id: str) -> Link:
        link = user.links.get(link_id)
        if link is None:
            raise NotFoundError("Link not found")
        return link

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------
    def list(self, user_id: str) -> List[Link]:
        return self._load(user_id).links.ordered()

    # ---------------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------------
    def add(self, user_id: str, title: Any, url: Any, description: Any = None) -> Link:
        """
        Append a new link to the user's collection.

        Raises:
            ValidationError: if title or url is missing or blank.
            NotFoundError: if the user does not exist.
        """
        if not isinstance(title, str) or not title.strip() or not isinstance(url, str) or not url.strip():
            raise ValidationError("Title and URL are required")
        description = _optional_text(description, "Description")

        with self._locks(user_id):
            user = self._load(user_id)
            now = utcnow()
            link = Link(
                id=self.id_strategy.generate(),
                title=title.strip(),
                url=url.strip(),
                description=description,
                order=max(len(user.links), user.links.max_order() + 1),
                created_at=now,
                updated_at=now,
            )
            user.links.append(link)
            user.updated_at = now
            saved = self.storage.save_user(user)

        log.info("User %s added link %s at order %d", user_id, link.id, link.order)
        return self._link(saved, link.id)

    def update(self, user_id: str, link_id: str, fields: LinkUpdate) -> Link:
        """
        Apply a partial update; fields left UNSET keep their value.

        All supplied fields are validated before any is applied.
        """
        changes: Dict[str, Any] = {}
        for name, value in fields.supplied().items():
            if name == "title":
                changes[name] = _required_text(value, "Title")
            elif name == "url":
                changes[name] = _required_text(value, "URL")
            elif name == "description":
                changes[name] = _optional_text(value, "Description")
            elif name == "is_active":
                if not isinstance(value, bool):
                    raise ValidationError("is_active must be a boolean")
                changes[name] = value

        with self._locks(user_id):
            user = self._load(user_id)
            link = self._link(user, link_id)
            changed = {name: value for name, value in changes.items() if getattr(link, name) != value}
            if not changed:
                return link
            for name, value in changed.items():
                setattr(link, name, value)
            link.updated_at = user.updated_at = utcnow()
            saved = self.storage.save_user(user)

        log.info("User %s updated link %s: %s", user_id, link_id, sorted(changed))
        return self._link(saved, link_id)

    def toggle(self, user_id: str, link_id: str) -> Link:
        """Flip a link between active and inactive."""
        with self._locks(user_id):
            user = self._load(user_id)
            link = self._link(user, link_id)
            link.is_active = not link.is_active
            link.updated_at = user.updated_at = utcnow()
            saved = self.storage.save_user(user)
        return self._link(saved, link_id)

    def remove(self, user_id: str, link_id: str) -> None:
        with self._locks(user_id):
            user = self._load(user_id)
            self._link(user, link_id)
            user.links.pop(link_id)
            user.updated_at = utcnow()
            self.storage.save_user(user)
        log.info("User %s removed link %s", user_id, link_id)

    def reorder(self, user_id: str, link_ids: Sequence[str]) -> List[Link]:
        """
        Rewrite order fields from a client-supplied identifier sequence.

        Unknown (or repeated) identifiers are skipped without error, so a
        client holding a slightly stale list still gets its intended order.

        Returns:
            List[Link]: the user's links in their new display order.

        Raises:
            ValidationError: if `link_ids` is not a list of identifier strings.
        """
        if not isinstance(link_ids, (list, tuple)) or not all(isinstance(i, str) for i in link_ids):
            raise ValidationError("link_ids must be an array")

        with self._locks(user_id):
            user = self._load(user_id)
            named: List[str] = []
            for link_id in link_ids:
                if link_id in user.links and link_id not in named:
                    named.append(link_id)
            ignored = len(link_ids) - len(named)
            rest = [link.id for link in user.links.ordered() if link.id not in named]

            now = utcnow()
            for position, link_id in enumerate(named + rest):
                link = user.links.get(link_id)
                if link.order != position:
                    link.order = position
                    link.updated_at = now
            user.updated_at = now
            saved = self.storage.save_user(user)

        if ignored:
            log.info("User %s reorder skipped %d unknown or repeated id(s)", user_id, ignored)
        return saved.links.ordered()
