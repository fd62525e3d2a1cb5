#!/usr/bin/env python
"""Enqueue a photo import for every registered feed source.

Meant to be run periodically (e.g. from cron). Feeds that already have an
import pending or running are not enqueued again.

Usage:
    uv run python scripts/refresh_feeds.py
    uv run python scripts/refresh_feeds.py --register https://example.org/photos.xml
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from app.core.database import get_engine, get_session_maker
from app.core.exceptions import ConflictError
from app.core.logging import configure_logging
from app.features.feed_sources.schemas import FeedSourceCreate
from app.features.feed_sources.service import FeedSourceService, SqlFeedSourceListing
from app.features.jobs.service import get_job_queue
from app.features.photo_import.scheduler import RefreshScheduler


async def register_sources(urls: list[str]) -> None:
    """Register feed URLs, ignoring ones already registered."""
    service = FeedSourceService()
    for url in urls:
        async with get_session_maker()() as session:
            try:
                await service.create_source(session, FeedSourceCreate(url=url))
                print(f"[OK] Registered {url}")
            except ConflictError:
                print(f"[SKIP] Already registered: {url}")


async def refresh(register: list[str]) -> int:
    """Optionally register sources, then fan out imports."""
    try:
        if register:
            await register_sources(register)

        queue = get_job_queue()
        # Free feeds still held by abandoned running jobs
        recovered = await queue.requeue_stale()
        if recovered:
            print(f"Recovered {recovered} job(s) with an expired lease")

        scheduler = RefreshScheduler(
            sources=SqlFeedSourceListing(get_session_maker()),
            enqueuer=queue,
        )
        result = await scheduler.refresh()
        print(f"Enqueued {result.enqueued} import(s), {result.deduplicated} already outstanding")
        return 0
    finally:
        await get_engine().dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--register",
        action="append",
        default=[],
        metavar="URL",
        help="Register a feed source before refreshing (repeatable)",
    )
    args = parser.parse_args()

    configure_logging()
    sys.exit(asyncio.run(refresh(args.register)))


if __name__ == "__main__":
    main()
