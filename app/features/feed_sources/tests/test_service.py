"""Tests for feed source service and listing."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.features.feed_sources.schemas import FeedSourceCreate
from app.features.feed_sources.service import (
    FeedSourceListing,
    FeedSourceService,
    SqlFeedSourceListing,
)


class TestSqlFeedSourceListing:
    """Tests for SqlFeedSourceListing."""

    def test_satisfies_protocol(self, session_maker):
        """Test that the SQL listing is a FeedSourceListing."""
        assert isinstance(SqlFeedSourceListing(session_maker), FeedSourceListing)

    @pytest.mark.asyncio
    async def test_yields_streamed_urls(self, session_maker, mock_session, async_rows):
        """Test that every streamed URL is yielded in order."""
        urls = ["http://a/feed.xml", "http://b/feed.xml"]
        mock_session.stream_scalars.return_value = async_rows(urls)

        listed = [url async for url in SqlFeedSourceListing(session_maker).iter_feed_urls()]

        assert listed == urls

    @pytest.mark.asyncio
    async def test_only_enabled_sources(self, session_maker, mock_session, async_rows):
        """Test that disabled sources are filtered in the query."""
        mock_session.stream_scalars.return_value = async_rows([])

        _ = [url async for url in SqlFeedSourceListing(session_maker).iter_feed_urls()]

        stmt = mock_session.stream_scalars.call_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "feed_source.enabled IS true" in sql
        assert "ORDER BY feed_source.url" in sql


class TestFeedSourceService:
    """Tests for FeedSourceService."""

    @pytest.mark.asyncio
    async def test_create_source(self, mock_session):
        """Test that a new source is added and committed."""
        result = await FeedSourceService().create_source(
            mock_session, FeedSourceCreate(url=" http://a/feed.xml ", name="A")
        )

        mock_session.add.assert_called_once()
        mock_session.commit.assert_awaited_once()
        assert result.url == "http://a/feed.xml"
        assert result.name == "A"
        assert result.enabled is True

    @pytest.mark.asyncio
    async def test_create_duplicate_is_conflict(self, mock_session):
        """Test that registering a URL twice raises ConflictError."""
        mock_session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(ConflictError) as exc_info:
            await FeedSourceService().create_source(
                mock_session, FeedSourceCreate(url="http://a/feed.xml")
            )

        assert exc_info.value.status_code == 409
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_sources(self, mock_session, sample_sources):
        """Test that all sources are listed, enabled or not."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = sample_sources
        mock_session.execute.return_value = result

        listing = await FeedSourceService().list_sources(mock_session)

        assert listing.total == 2
        assert [s.enabled for s in listing.sources] == [True, False]


class TestFeedSourceCreate:
    """Tests for FeedSourceCreate validation."""

    def test_rejects_non_http(self):
        """Test that non-http schemes are rejected."""
        with pytest.raises(ValueError, match="http"):
            FeedSourceCreate(url="file:///etc/passwd")
