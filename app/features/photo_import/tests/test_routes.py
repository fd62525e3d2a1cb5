"""Tests for photo import routes (collaborators overridden)."""

import pytest

from app.features.photo_import.routes import get_photo_importer, get_refresh_scheduler
from app.features.photo_import.scheduler import RefreshScheduler
from app.features.photo_import.service import PhotoImporter
from app.main import app


class TestRefreshRoute:
    """Tests for POST /imports/refresh."""

    @pytest.mark.asyncio
    async def test_refresh_returns_counts(self, client, listing_factory, enqueuer):
        """Test that refresh reports enqueued and deduplicated sources."""
        urls = ["http://a/feed.xml", "http://b/feed.xml"]
        scheduler = RefreshScheduler(listing_factory(urls), enqueuer)
        app.dependency_overrides[get_refresh_scheduler] = lambda: scheduler

        first = await client.post("/imports/refresh")
        second = await client.post("/imports/refresh")

        assert first.status_code == 202
        assert first.json() == {"enqueued": 2, "deduplicated": 0}
        assert second.json() == {"enqueued": 0, "deduplicated": 2}


class TestRunRoute:
    """Tests for POST /imports/runs."""

    @pytest.mark.asyncio
    async def test_run_returns_summary(
        self, client, feed_client_factory, entry_factory, store, feed_url
    ):
        """Test that a manual run returns the import summary."""
        entries = [entry_factory(1), entry_factory(2, published="this will break it")]
        importer = PhotoImporter(feed_client_factory(entries), store)
        app.dependency_overrides[get_photo_importer] = lambda: importer

        response = await client.post("/imports/runs", json={"feed_url": feed_url})

        assert response.status_code == 200
        data = response.json()
        assert data["created"] == 1
        assert data["failed"] == 1
        assert data["errors"][0]["entry_id"] == "guid2"
        assert data["errors"][0]["outcome"] == "mapping_failed"

    @pytest.mark.asyncio
    async def test_unreachable_feed_is_not_an_http_error(
        self, client, failing_feed_client, store, feed_url
    ):
        """Test that a fetch failure is reported in the body with 200."""
        importer = PhotoImporter(failing_feed_client, store)
        app.dependency_overrides[get_photo_importer] = lambda: importer

        response = await client.post("/imports/runs", json={"feed_url": feed_url})

        assert response.status_code == 200
        assert response.json()["fetch_failed"] is True

    @pytest.mark.asyncio
    async def test_rejects_non_http_url(self, client):
        """Test that only http(s) feeds are accepted."""
        response = await client.post("/imports/runs", json={"feed_url": "ftp://x/feed.xml"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
