"""
Unit tests for ProfileManager.

Covers:
    - registration and username availability
    - partial profile updates and their validation
    - public profile rendering (public only, active links only, view counted)
"""

import pytest

from linkbio_platform.errors import NotFoundError, ValidationError
from linkbio_platform.models import ProfileUpdate


def test_register_normalizes_username(profiles):
    user = profiles.register("  JaneDoe ", "Jane@Example.com")
    assert user.username == "janedoe"
    assert user.email == "jane@example.com"
    assert user.subscription.type == "free"
    assert user.analytics.total_clicks == 0


def test_register_rejects_duplicates_and_bad_tier(profiles, user):
    with pytest.raises(ValidationError, match="Username already taken"):
        profiles.register("JANE")
    with pytest.raises(ValidationError):
        profiles.register("bob", subscription_type="platinum")
    with pytest.raises(ValidationError):
        profiles.register("   ")


def test_check_username(profiles, user):
    assert profiles.check_username("Jane") is False
    assert profiles.check_username("bob") is True
    with pytest.raises(ValidationError):
        profiles.check_username("")


def test_update_profile_partial(profiles, user):
    updated = profiles.update_profile(user.id, ProfileUpdate(bio="Hello", theme="light"))
    assert updated.bio == "Hello"
    assert updated.theme == "light"
    assert updated.display_name == "Jane Doe"


def test_update_profile_rejects_long_bio(profiles, user):
    with pytest.raises(ValidationError, match="Bio"):
        profiles.update_profile(user.id, ProfileUpdate(bio="x" * 501))
    assert profiles.get_profile(user.id).bio is None


def test_update_profile_rejects_bad_theme_and_taken_username(profiles, user):
    profiles.register("bob")
    with pytest.raises(ValidationError):
        profiles.update_profile(user.id, ProfileUpdate(theme="neon"))
    with pytest.raises(ValidationError, match="Username already taken"):
        profiles.update_profile(user.id, ProfileUpdate(username="Bob"))


def test_update_profile_without_changes_keeps_version(profiles, user):
    same = profiles.update_profile(user.id, ProfileUpdate(display_name="Jane Doe"))
    assert same.version == user.version


def test_resolve_and_get_profile_not_found(profiles):
    with pytest.raises(NotFoundError):
        profiles.resolve("nobody")
    with pytest.raises(NotFoundError):
        profiles.get_profile("ghost")


def test_public_profile_shows_active_links_and_counts_view(profiles, collection, storage, user):
    a = collection.add(user.id, "A", "https://a.example")
    b = collection.add(user.id, "B", "https://b.example")
    collection.toggle(user.id, a.id)

    public = profiles.get_public_profile("JANE")
    assert [link["id"] for link in public["links"]] == [b.id]
    assert "email" not in public
    assert storage.get_user(user.id).analytics.total_views == 1


def test_private_profile_is_not_found(profiles, user, storage):
    profiles.update_profile(user.id, ProfileUpdate(is_public=False))
    with pytest.raises(NotFoundError):
        profiles.get_public_profile("jane")
    assert storage.get_user(user.id).analytics.total_views == 0
