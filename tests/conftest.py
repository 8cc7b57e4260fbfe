"""
Test configuration for pytest
"""

import pytest
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

# Test environment variables
os.environ["STORE_BACKEND"] = "memory"
os.environ["SANITY_PROJECT_ID"] = "testproj"
os.environ["SANITY_DATASET"] = "production"
os.environ.pop("POPULAR_TIMES_URL", None)

from cms_sync.core.config import Settings
from cms_sync.core.dependencies import SyncServices, assemble_services
from cms_sync.core.errors import AggregationError, ContentSourceError
from cms_sync.core.images import ImageUrlResolver
from cms_sync.core.store import InMemoryDocumentStore
from cms_sync.models import EntityKind

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock returning a fixed instant until advanced"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeAggregationEngine:
    """Records compute calls; fails for ids listed in `failing`"""

    def __init__(self, result: Optional[List[Any]] = None):
        self.result = result if result is not None else [{"day": 1, "hours": [10, 20]}]
        self.failing: set = set()
        self.fail_all = False
        self.calls: List[Dict[str, Any]] = []

    async def compute(self, location: Dict[str, Any], force: bool = False) -> List[Any]:
        self.calls.append({"location": location, "force": force})
        if self.fail_all or location.get("id") in self.failing:
            raise AggregationError(f"aggregation failed for {location.get('id')}")
        return list(self.result)


class FakeContentSource:
    """Serves a fixed CMS dataset per kind"""

    def __init__(self):
        self.documents: Dict[EntityKind, List[Dict[str, Any]]] = {kind: [] for kind in EntityKind}
        self.failing_kinds: set = set()

    async def fetch_all(self, kind: EntityKind) -> List[Dict[str, Any]]:
        if kind in self.failing_kinds:
            raise ContentSourceError(f"Sanity query failed for {kind.value}")
        return list(self.documents[kind])


@pytest.fixture
def settings() -> Settings:
    """Settings with a small fan-out limit"""
    return Settings(STORE_BACKEND="memory", SYNC_MAX_CONCURRENCY=3)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create a clean document store for each test"""
    return InMemoryDocumentStore()


@pytest.fixture
def aggregation() -> FakeAggregationEngine:
    return FakeAggregationEngine()


@pytest.fixture
def content() -> FakeContentSource:
    return FakeContentSource()


@pytest.fixture
def images() -> ImageUrlResolver:
    return ImageUrlResolver(project_id="testproj", dataset="production")


@pytest.fixture
def services(settings, store, content, images, aggregation, clock) -> SyncServices:
    """Engine components wired to in-memory collaborators"""
    return assemble_services(settings, store, content, images, aggregation, clock=clock)


@pytest.fixture
def location_payload() -> Dict[str, Any]:
    """Location document as posted by the Sanity webhook"""
    return {
        "_id": "L1",
        "_type": "location",
        "_createdAt": "2024-01-10T08:00:00Z",
        "name": "Main Library",
        "description": "Quiet study space",
        "spaceId": "space-1",
        "assetId": "asset-1",
        "image": {
            "_type": "image",
            "asset": {"_ref": "image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg", "_type": "reference"},
        },
        "address": {
            "streetName": "Main Street 1",
            "zipCode": "8000",
            "city": "Zurich",
            "mapsLink": "https://maps.example.com/l1",
            "location": {"lat": 47.37, "lng": 8.54},
        },
    }


@pytest.fixture
def tenant_payload() -> Dict[str, Any]:
    """Tenant document as posted by the Sanity webhook"""
    return {
        "_id": "T1",
        "_type": "tenant",
        "_createdAt": "2023-11-02T09:30:00Z",
        "companyName": "Campus AG",
        "subdomain": {"_type": "slug", "current": "campus"},
        "locations": [{"_ref": "L1", "_type": "reference", "_key": "a"}],
        "branding": {
            "logo": {"asset": {"_ref": "image-Ab12-300x100-png"}},
            "productName": "Campus Finder",
            "primaryColor": {"hex": "#112233"},
            "secondaryColor": {"hex": "#445566"},
            "headerBackgroundColor": {"hex": "#ffffff"},
        },
    }


@pytest.fixture
def translation_payload() -> Dict[str, Any]:
    """Translation document as posted by the Sanity webhook"""
    return {
        "_id": "TR1",
        "_type": "translation",
        "_createdAt": "2024-02-01T00:00:00Z",
        "key": {"_type": "slug", "current": "sidebar.title"},
        "text": {"de": "Standorte", "en": "Locations"},
    }
