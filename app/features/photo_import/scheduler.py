"""Refresh scheduler: one deduplicated import job per feed source."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from app.core.logging import get_logger
from app.features.feed_sources.service import FeedSourceListing
from app.features.jobs.models import JobType
from app.features.photo_import.schemas import RefreshResult

logger = get_logger(__name__)

PHOTO_IMPORT_TASK = JobType.PHOTO_IMPORT.value


@runtime_checkable
class TaskEnqueuer(Protocol):
    """Enqueue primitive of the task runtime.

    Implementations must guarantee:

    - Deduplication: while a task with the same (task_type, unique_key) is
      pending or running, ``enqueue`` does nothing and returns False.
    - Retryability: a task whose handler raises is retried with backoff
      until its attempt budget is spent.
    """

    async def enqueue(
        self,
        task_type: str,
        unique_key: str,
        params: dict[str, Any] | None = None,
    ) -> bool:
        """Enqueue a task; return False if an identical one is outstanding."""
        ...


class RefreshScheduler:
    """Fans out one photo import per registered feed source.

    Performs no fetching itself; the listing is consumed exactly once per
    ``refresh`` call.
    """

    def __init__(self, sources: FeedSourceListing, enqueuer: TaskEnqueuer) -> None:
        self._sources = sources
        self._enqueuer = enqueuer

    async def refresh(self) -> RefreshResult:
        """Enqueue an import for every feed source.

        Returns:
            Counts of newly enqueued and deduplicated sources.
        """
        result = RefreshResult()
        async for feed_url in self._sources.iter_feed_urls():
            enqueued = await self._enqueuer.enqueue(
                PHOTO_IMPORT_TASK,
                unique_key=feed_url,
                params={"feed_url": feed_url},
            )
            if enqueued:
                result.enqueued += 1
            else:
                result.deduplicated += 1

        logger.info(
            "photo_import.refresh_completed",
            enqueued=result.enqueued,
            deduplicated=result.deduplicated,
        )
        return result
