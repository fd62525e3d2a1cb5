#!/usr/bin/env python
"""Run the background job worker.

Claims pending photo import jobs and runs them. Failed jobs are retried
with exponential backoff until their attempt budget is spent.

Usage:
    uv run python scripts/run_worker.py                 # poll forever
    uv run python scripts/run_worker.py --once          # drain due jobs, then exit
    uv run python scripts/run_worker.py --max-jobs 10   # stop after 10 jobs
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from app.core.config import get_settings
from app.core.database import get_engine
from app.core.logging import configure_logging
from app.features.jobs.service import get_job_queue
from app.features.jobs.worker import JobWorker
from app.features.photo_import.service import build_photo_importer
from app.features.photo_import.tasks import photo_import_handlers


async def run_worker(once: bool, max_jobs: int | None) -> int:
    """Run the worker until idle (``once``), ``max_jobs`` or interrupted."""
    settings = get_settings()
    worker = JobWorker(
        queue=get_job_queue(),
        handlers=photo_import_handlers(build_photo_importer(settings)),
        poll_interval_seconds=settings.worker_poll_interval_seconds,
    )
    try:
        processed = await worker.run(max_jobs=max_jobs, stop_when_idle=once)
        print(f"Processed {processed} job(s)")
        return 0
    finally:
        await get_engine().dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--once", action="store_true", help="Exit when no job is due")
    parser.add_argument("--max-jobs", type=int, default=None, help="Stop after this many jobs")
    args = parser.parse_args()

    configure_logging()
    try:
        sys.exit(asyncio.run(run_worker(args.once, args.max_jobs)))
    except KeyboardInterrupt:
        print("\nWorker interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
