"""Test fixtures for photos module."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.features.photos.schemas import PhotoRecord


@pytest.fixture
def sample_record() -> PhotoRecord:
    """Create a freshly mapped photo record."""
    return PhotoRecord(
        id="guid1",
        source_url="http://some/mrss.url/feed.xml",
        title="title1",
        description="summary1",
        taken_at=date(2014, 10, 22),
        photo_url="url1",
        thumbnail_url="thumbnail_url1",
    )


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock async session."""
    return AsyncMock()


@pytest.fixture
def session_maker(mock_session: AsyncMock) -> MagicMock:
    """Session factory whose sessions are all ``mock_session``."""
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = mock_session
    maker.return_value.__aexit__.return_value = None
    return maker
