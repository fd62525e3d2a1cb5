"""Photo import API routes."""

import time

from fastapi import APIRouter, Depends, status

from app.core.database import get_session_maker
from app.core.logging import get_logger
from app.features.feed_sources.service import SqlFeedSourceListing
from app.features.jobs.service import get_job_queue
from app.features.photo_import.scheduler import RefreshScheduler
from app.features.photo_import.schemas import ImportRunRequest, ImportSummary, RefreshResult
from app.features.photo_import.service import PhotoImporter, build_photo_importer

logger = get_logger(__name__)

router = APIRouter(prefix="/imports", tags=["imports"])


def get_photo_importer() -> PhotoImporter:
    """Dependency returning an importer wired from settings."""
    return build_photo_importer()


def get_refresh_scheduler() -> RefreshScheduler:
    """Dependency returning a scheduler over the feed source registry."""
    return RefreshScheduler(
        sources=SqlFeedSourceListing(get_session_maker()),
        enqueuer=get_job_queue(),
    )


@router.post(
    "/refresh",
    response_model=RefreshResult,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Enqueue an import for every registered feed",
    description="""
Enqueue one `photo_import` job per enabled feed source.

**Deduplication:** a feed that already has a pending or running import is
not enqueued again; it is counted under `deduplicated`. Calling this
endpoint repeatedly before the worker catches up never grows the queue
beyond one job per feed.

Intended to be called periodically (cron or similar).
""",
)
async def refresh_imports(
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
) -> RefreshResult:
    """Fan out imports over all feed sources."""
    return await scheduler.refresh()


@router.post(
    "/runs",
    response_model=ImportSummary,
    status_code=status.HTTP_200_OK,
    summary="Import one feed now",
    description="""
Run an import for a single feed synchronously and return its summary.

**Idempotency:** entries whose id is already stored are skipped untouched,
so running the same feed twice creates nothing the second time.

**Partial Success:** malformed entries are reported in `errors` while the
rest of the feed is imported. A feed that cannot be fetched returns
`fetch_failed: true` rather than an error status.
""",
)
async def run_import(
    request: ImportRunRequest,
    importer: PhotoImporter = Depends(get_photo_importer),
) -> ImportSummary:
    """Import one feed synchronously."""
    start_time = time.perf_counter()
    summary = await importer.run(request.feed_url)

    logger.info(
        "photo_import.manual_run_completed",
        feed_url=request.feed_url,
        fetch_failed=summary.fetch_failed,
        created=summary.created,
        skipped=summary.skipped,
        failed=summary.failed,
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return summary
