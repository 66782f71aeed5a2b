from __future__ import annotations

import pytest

from rvplanner.bucketlist.service import BucketListService
from rvplanner.catalog.loader import CatalogData, CatalogProvider
from rvplanner.config.settings import Settings
from rvplanner.domain.models import CatalogEntry
from rvplanner.storage.collection import UserCollectionStore
from rvplanner.storage.kv import MemoryStore

CURATED = (
    CatalogEntry(
        id="np-yosemite",
        name="Yosemite National Park",
        state="California",
        region="southwest",
        type="national-park",
        latitude=37.8651,
        longitude=-119.5383,
        curated=True,
    ),
    CatalogEntry(
        id="np-zion",
        name="Zion National Park",
        state="Utah",
        region="southwest",
        type="national-park",
        latitude=37.2982,
        longitude=-113.0263,
        curated=True,
    ),
)

DISCOVERABLE = (
    CatalogEntry(
        id="ct-moab",
        name="Moab",
        state="Utah",
        region="southwest",
        type="city",
        latitude=38.5733,
        longitude=-109.5498,
    ),
    CatalogEntry(
        id="sp-custer",
        name="Custer State Park",
        state="South Dakota",
        region="midwest",
        type="state-park",
        latitude=43.7650,
        longitude=-103.4164,
    ),
)


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        self.messages.append((level, message))

    def levels(self) -> list[str]:
        return [level for level, _ in self.messages]


class FailingStore(MemoryStore):
    """Reads work; every write reports failure."""

    def set(self, key, value) -> bool:
        return False


@pytest.fixture
def catalog() -> CatalogProvider:
    return CatalogProvider(CatalogData(curated=CURATED, discoverable=DISCOVERABLE))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def backend() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def service(backend, catalog, notifier) -> BucketListService:
    store = UserCollectionStore(backend)
    store.load_all()
    return BucketListService(store, catalog, settings=Settings(), notifier=notifier)
