"""
Base storage interface for Linkbio Platform.

Purpose:
    Define a small, stable contract for persisting User aggregates (profile,
    ordered links, analytics rollups) that multiple backends (in-memory,
    PostgreSQL) implement without requiring changes to business logic.

Contract highlights:
    - Reads return detached snapshots. Mutating a returned User never changes
      stored state until it is handed back to `save_user`.
    - `save_user` is a compare-and-set on `User.version`. It persists profile
      fields and link structure (membership, title, url, description, active
      flag, order) but never counters: link clicks and analytics rollups are
      only changed through the atomic increment/reset methods.
    - Backends wrap driver failures in PersistenceError.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..models import User


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def create_user(self, user: User) -> User:
        """
        Insert a new user aggregate.

        Raises:
            ValidationError: if the username (or id) is already taken.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_user(self, user_id: str) -> Optional[User]:
        """Return a snapshot of the user, or None if absent."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_user_by_username(self, username: str) -> Optional[User]:
        """Return a snapshot of the user with this username (case-insensitive), or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def save_user(self, user: User) -> User:
        """
        Persist profile fields and link structure if `user.version` is current.

        Returns:
            User: fresh snapshot with the bumped version and current counters.

        Raises:
            NotFoundError: if the user no longer exists.
            ConflictError: if another writer saved since the snapshot was taken.
            ValidationError: if a changed username collides with another user.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_click(self, user_id: str, link_id: str) -> bool:
        """
        Atomically add one click to the link and to the owner's total and monthly clicks.

        Returns:
            bool: False if the user does not own a link with this id.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_views(self, user_id: str) -> bool:
        """Atomically add one profile view to total and monthly views. False if user absent."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def reset_monthly(self, user_id: Optional[str] = None) -> int:
        """Zero monthly views/clicks for one user or all users. Returns users affected."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def iter_users(self) -> Iterator[User]:
        """Yield snapshots of every user (full scan)."""
        raise NotImplementedError

    def username_exists(self, username: str) -> bool:
        return self.find_user_by_username(username) is not None
