"""Feed sources module: the registry of feeds polled by refresh."""

from app.features.feed_sources.models import FeedSource
from app.features.feed_sources.routes import router
from app.features.feed_sources.schemas import (
    FeedSourceCreate,
    FeedSourceListResponse,
    FeedSourceResponse,
)
from app.features.feed_sources.service import (
    FeedSourceListing,
    FeedSourceService,
    SqlFeedSourceListing,
)

__all__ = [
    "FeedSource",
    "FeedSourceCreate",
    "FeedSourceListResponse",
    "FeedSourceListing",
    "FeedSourceResponse",
    "FeedSourceService",
    "SqlFeedSourceListing",
    "router",
]
