"""Feed source registry and the listing consumed by refresh."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.features.feed_sources.models import FeedSource
from app.features.feed_sources.schemas import (
    FeedSourceCreate,
    FeedSourceListResponse,
    FeedSourceResponse,
)

logger = get_logger(__name__)


@runtime_checkable
class FeedSourceListing(Protocol):
    """Iterable listing of feed URLs to refresh."""

    def iter_feed_urls(self) -> AsyncIterator[str]:
        """Yield each enabled feed URL once."""
        ...


class SqlFeedSourceListing:
    """FeedSourceListing over the ``feed_source`` table.

    Streams rows so a large registry is never materialised at once.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def iter_feed_urls(self) -> AsyncIterator[str]:
        stmt = (
            select(FeedSource.url)
            .where(FeedSource.enabled.is_(True))
            .order_by(FeedSource.url)
        )
        async with self._session_maker() as session:
            result = await session.stream_scalars(stmt)
            async for url in result:
                yield url


class FeedSourceService:
    """Register and list feed sources."""

    async def create_source(
        self,
        db: AsyncSession,
        source_create: FeedSourceCreate,
    ) -> FeedSourceResponse:
        """Register a new feed source.

        Args:
            db: Database session.
            source_create: Source to register.

        Returns:
            The registered source.

        Raises:
            ConflictError: If the URL is already registered.
        """
        source = FeedSource(
            url=source_create.url,
            name=source_create.name,
            enabled=source_create.enabled,
        )
        db.add(source)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError(
                message=f"Feed source already registered: {source_create.url}",
                details={"url": source_create.url},
            ) from e
        await db.refresh(source)

        logger.info("feed_sources.source_registered", url=source.url)
        return FeedSourceResponse.model_validate(source)

    async def list_sources(self, db: AsyncSession) -> FeedSourceListResponse:
        """List every registered source, enabled or not."""
        result = await db.execute(select(FeedSource).order_by(FeedSource.url))
        sources = result.scalars().all()
        return FeedSourceListResponse(
            sources=[FeedSourceResponse.model_validate(s) for s in sources],
            total=len(sources),
        )
