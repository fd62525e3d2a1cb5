"""Feed source registry routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.features.feed_sources.schemas import (
    FeedSourceCreate,
    FeedSourceListResponse,
    FeedSourceResponse,
)
from app.features.feed_sources.service import FeedSourceService

router = APIRouter(prefix="/feed-sources", tags=["feed-sources"])


@router.get("", response_model=FeedSourceListResponse, summary="List registered feeds")
async def list_feed_sources(
    db: AsyncSession = Depends(get_db),
) -> FeedSourceListResponse:
    """List every registered feed source."""
    return await FeedSourceService().list_sources(db)


@router.post(
    "",
    response_model=FeedSourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a feed for periodic import",
)
async def create_feed_source(
    source_create: FeedSourceCreate,
    db: AsyncSession = Depends(get_db),
) -> FeedSourceResponse:
    """Register a feed source; 409 if the URL is already registered."""
    return await FeedSourceService().create_source(db, source_create)
