"""Test fixtures for photo import module.

The fakes mirror the collaborators a run talks to: a feed client serving
canned feeds, an in-memory photo store and a deduplicating enqueuer.
"""

from collections.abc import AsyncIterator
from datetime import date
from typing import Any

import pytest

from app.core.exceptions import FeedFetchError, PhotoCreateError
from app.features.photo_import.feed_client import ParsedFeed, RawEntry
from app.features.photos.schemas import PhotoRecord

FEED_URL = "http://some/mrss.url/feed.xml"


class FakeFeedClient:
    """Serves canned entries; ``error`` makes every fetch fail."""

    def __init__(self, entries: list[RawEntry] | None = None, error: Exception | None = None):
        self.entries = entries or []
        self.error = error
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> ParsedFeed:
        self.fetched.append(url)
        if self.error is not None:
            raise self.error
        return ParsedFeed(url=url, entries=list(self.entries))


class InMemoryPhotoStore:
    """Dict-backed PhotoStore recording every call."""

    def __init__(self, records: dict[str, PhotoRecord] | None = None):
        self.records: dict[str, PhotoRecord] = dict(records or {})
        self.created: list[str] = []
        self.exists_calls: list[str] = []
        # ids whose create fails as if another run inserted them first
        self.race_ids: set[str] = set()
        # ids whose create fails with a storage error
        self.failing_ids: set[str] = set()

    async def exists(self, photo_id: str) -> bool:
        self.exists_calls.append(photo_id)
        return photo_id in self.records

    async def get(self, photo_id: str) -> PhotoRecord | None:
        return self.records.get(photo_id)

    async def create(self, record: PhotoRecord) -> None:
        if record.id in self.race_ids or record.id in self.records:
            raise PhotoCreateError(record.id, f"Photo '{record.id}' already exists", duplicate=True)
        if record.id in self.failing_ids:
            raise PhotoCreateError(record.id, "Insert failed: OperationalError: down")
        self.records[record.id] = record
        self.created.append(record.id)


class FakeListing:
    def __init__(self, urls: list[str]):
        self.urls = urls

    async def iter_feed_urls(self) -> AsyncIterator[str]:
        for url in self.urls:
            yield url


class FakeEnqueuer:
    """Deduplicates on (task_type, unique_key) like the real queue."""

    def __init__(self):
        self.outstanding: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    async def enqueue(
        self, task_type: str, unique_key: str, params: dict[str, Any] | None = None
    ) -> bool:
        self.calls.append((task_type, unique_key, params))
        key = (task_type, unique_key)
        if key in self.outstanding:
            return False
        self.outstanding.add(key)
        return True


def make_entry(n: int, **overrides: Any) -> RawEntry:
    """Build entry ``n`` in the shape of a typical MRSS item."""
    fields: dict[str, Any] = {
        "entry_id": f"guid{n}",
        "title": f"title{n}",
        "summary": f"summary{n}",
        "published": "2014-10-22 14:24:00Z",
        "thumbnail_url": f"thumbnail_url{n}",
        "url": f"url{n}",
    }
    fields.update(overrides)
    return RawEntry(**fields)


@pytest.fixture
def feed_url() -> str:
    return FEED_URL


@pytest.fixture
def two_entries() -> list[RawEntry]:
    return [make_entry(1), make_entry(2)]


@pytest.fixture
def store() -> InMemoryPhotoStore:
    return InMemoryPhotoStore()


@pytest.fixture
def existing_record() -> PhotoRecord:
    """A previously imported and since curated photo."""
    return PhotoRecord(
        id="already exists",
        source_url=FEED_URL,
        title="already exists",
        taken_at=date(2014, 1, 1),
        popularity=7,
        photo_url="old_url",
        tags=["tag1", "tag2"],
        album="album3",
    )


@pytest.fixture
def failing_feed_client() -> FakeFeedClient:
    return FakeFeedClient(error=FeedFetchError(FEED_URL, message="Feed request failed: ConnectError"))


@pytest.fixture
def entry_factory():
    """Factory building MRSS-shaped entries by number."""
    return make_entry


@pytest.fixture
def feed_client_factory():
    """Factory building a FakeFeedClient over the given entries."""
    return FakeFeedClient


@pytest.fixture
def listing_factory():
    """Factory building a feed source listing over the given URLs."""
    return FakeListing


@pytest.fixture
def enqueuer() -> FakeEnqueuer:
    return FakeEnqueuer()
