"""
Global pytest fixtures for the Linkbio Platform test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory Storage and the managers/aggregators wired to it
    - Provide a registered user to hang links off

Each fixture builds fresh in-memory state, so tests never leak into each other.
"""

import pytest
from fastapi.testclient import TestClient

from auth.config import DEMO_USERS
from main import create_app
from linkbio_platform.analytics.click_tracker import ClickTracker
from linkbio_platform.analytics.platform_stats import PlatformAnalyticsAggregator
from linkbio_platform.analytics.user_stats import UserAnalyticsAggregator
from linkbio_platform.manager.link_collection import LinkCollection
from linkbio_platform.manager.profile_manager import ProfileManager
from linkbio_platform.manager.strategies import SequentialStrategy
from linkbio_platform.service import LinkbioService
from linkbio_platform.storage.storage import Storage


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def ids() -> SequentialStrategy:
    """Deterministic identifiers: id-1, id-2, ..."""
    return SequentialStrategy(prefix="id-")


@pytest.fixture
def tracker(storage) -> ClickTracker:
    return ClickTracker(storage)


@pytest.fixture
def collection(storage, ids) -> LinkCollection:
    return LinkCollection(storage, id_strategy=ids)


@pytest.fixture
def profiles(storage, tracker, ids) -> ProfileManager:
    return ProfileManager(storage, tracker=tracker, id_strategy=ids)


@pytest.fixture
def user_stats(storage) -> UserAnalyticsAggregator:
    return UserAnalyticsAggregator(storage, top_n=5)


@pytest.fixture
def platform_stats(storage) -> PlatformAnalyticsAggregator:
    return PlatformAnalyticsAggregator(storage, window_days=30)


@pytest.fixture
def user(profiles):
    """A registered user named 'jane' with no links."""
    return profiles.register("Jane", "jane@example.com", "Jane Doe")


@pytest.fixture
def service(storage, ids) -> LinkbioService:
    return LinkbioService(storage, id_strategy=ids)


@pytest.fixture
def client() -> TestClient:
    """Fresh TestClient with a new app instance and demo accounts."""
    return TestClient(create_app(storage=Storage()))


@pytest.fixture
def demo_auth():
    """HTTP Basic credentials of the seeded demo account."""
    return ("linkbio_demo", DEMO_USERS["linkbio_demo"])


@pytest.fixture
def admin_auth():
    return ("linkbio_admin", DEMO_USERS["linkbio_admin"])
