"""Test fixtures for feed sources module."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.features.feed_sources.models import FeedSource


class AsyncRows:
    """Async iterable standing in for a streamed scalar result."""

    def __init__(self, rows):
        self._rows = list(rows)

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for row in self._rows:
            yield row


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock async session (``add`` is synchronous)."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def session_maker(mock_session: AsyncMock) -> MagicMock:
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = mock_session
    maker.return_value.__aexit__.return_value = None
    return maker


@pytest.fixture
def async_rows():
    return AsyncRows


@pytest.fixture
def sample_sources() -> list[FeedSource]:
    return [
        FeedSource(url="http://some/mrss.url/feed.xml1", name="one", enabled=True),
        FeedSource(url="http://some/mrss.url/feed.xml2", name=None, enabled=False),
    ]
