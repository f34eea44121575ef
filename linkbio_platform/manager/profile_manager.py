"""
ProfileManager module for Linkbio Platform.

Responsibilities:
    - Register users (the aggregate roots that own links and analytics)
    - Check username availability
    - Read and partially update a user's profile
    - Render the public profile: public users only, active links only,
      one view counted per render

Profile writes share the per-user locks of LinkCollection, so a profile
edit and a link edit on the same user are serialized in this process.
"""

import logging
from typing import Any, Dict, Optional

from ..analytics.click_tracker import ClickTracker
from ..config import settings
from ..errors import NotFoundError, ValidationError
from ..models import SUBSCRIPTION_TYPES, THEMES, ProfileUpdate, Subscription, User, utcnow
from ..storage.base import BaseStorage
from .link_collection import UserLocks
from .strategies import BaseIdStrategy, get_strategy_from_config

log = logging.getLogger(__name__)


def _username(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Username is required")
    name = value.strip().lower()
    if any(ch.isspace() for ch in name):
        raise ValidationError("Username cannot contain whitespace")
    return name


class ProfileManager:
    def __init__(
        self,
        storage: BaseStorage,
        tracker: Optional[ClickTracker] = None,
        id_strategy: Optional[BaseIdStrategy] = None,
        locks: Optional[UserLocks] = None,
    ):
        self.storage = storage
        self.tracker = tracker or ClickTracker(storage)
        self.id_strategy = id_strategy or get_strategy_from_config()
        self._locks = locks or UserLocks()

    def register(
        self,
        username: str,
        email: str = "",
        display_name: Optional[str] = None,
        subscription_type: str = "free",
    ) -> User:
        """
        Create a new user with an empty link collection and zeroed analytics.

        Raises:
            ValidationError: blank/taken username or unknown subscription type.
        """
        name = _username(username)
        if subscription_type not in SUBSCRIPTION_TYPES:
            raise ValidationError(f"Subscription type must be one of {', '.join(SUBSCRIPTION_TYPES)}")
        user = User(
            id=self.id_strategy.generate(),
            username=name,
            email=(email or "").strip().lower(),
            display_name=display_name.strip() if isinstance(display_name, str) else None,
            subscription=Subscription(type=subscription_type),
        )
        created = self.storage.create_user(user)
        log.info("Registered user %s (%s)", created.id, created.username)
        return created

    def check_username(self, username: str) -> bool:
        """True if nobody uses this username yet."""
        return not self.storage.username_exists(_username(username))

    def resolve(self, username: str) -> User:
        """Look a user up by username, case-insensitively."""
        user = self.storage.find_user_by_username(_username(username))
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_profile(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, fields: ProfileUpdate) -> User:
        """Apply a partial profile update; UNSET fields keep their value."""
        changes: Dict[str, Any] = {}
        for name, value in fields.supplied().items():
            if name == "username":
                changes[name] = _username(value)
            elif name == "theme":
                if value not in THEMES:
                    raise ValidationError(f"Theme must be one of {', '.join(THEMES)}")
                changes[name] = value
            elif name == "is_public":
                if not isinstance(value, bool):
                    raise ValidationError("is_public must be a boolean")
                changes[name] = value
            elif value is None:
                changes[name] = None
            elif not isinstance(value, str):
                raise ValidationError(f"{name} must be a string")
            else:
                changes[name] = value.strip()

        bio = changes.get("bio")
        if bio is not None and len(bio) > settings.BIO_MAX_LENGTH:
            raise ValidationError(f"Bio must be at most {settings.BIO_MAX_LENGTH} characters")

        with self._locks(user_id):
            user = self.get_profile(user_id)
            changed = {name: value for name, value in changes.items() if getattr(user, name) != value}
            if not changed:
                return user
            for name, value in changed.items():
                setattr(user, name, value)
            user.updated_at = utcnow()
            return self.storage.save_user(user)

    def get_public_profile(self, username: str) -> Dict[str, Any]:
        """
        Public view of a profile: active links in display order.

        Counts one profile view. Private and unknown users are both NotFound.
        """
        user = self.storage.find_user_by_username(_username(username))
        if user is None or not user.is_public:
            raise NotFoundError("User not found")
        self.tracker.record_view(user.username)
        return {
            "id": user.id,
            "username": user.username,
            "display_name": user.display_name,
            "bio": user.bio,
            "profile_image": user.profile_image,
            "theme": user.theme,
            "links": [link.to_dict() for link in user.links.ordered() if link.is_active],
        }
