"""Job worker: claims due jobs and dispatches them to handlers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from app.core.logging import get_logger, job_log_context
from app.features.jobs.service import JobQueue

logger = get_logger(__name__)

JobHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class JobWorker:
    """Runs jobs from a JobQueue one at a time.

    Only job types with a registered handler are claimed. Any exception a
    handler raises is recorded on the job, which the queue retries or fails
    according to its attempt budget. Cancellation is recorded the same way
    and then re-raised. Jobs whose outcome could not be recorded at all are
    recovered by the lease sweep run on start and between polls.
    """

    def __init__(
        self,
        queue: JobQueue,
        handlers: Mapping[str, JobHandler],
        poll_interval_seconds: float = 5.0,
    ) -> None:
        self._queue = queue
        self._handlers = dict(handlers)
        self._poll_interval_seconds = poll_interval_seconds

    async def run_once(self) -> bool:
        """Claim and execute one job.

        Returns:
            True if a job was executed, False if none was due.
        """
        job = await self._queue.claim_next(job_types=list(self._handlers))
        if job is None:
            return False

        handler = self._handlers[job.job_type.value]
        with job_log_context(job.job_id):
            try:
                result = await handler(job.params)
            except Exception as e:
                logger.error(
                    "jobs.handler_raised",
                    job_type=job.job_type.value,
                    unique_key=job.unique_key,
                    attempt=job.attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                await self._queue.mark_failed(job.job_id, e)
            except BaseException as e:
                # Cancelled or interrupted: record the attempt before unwinding
                logger.warning(
                    "jobs.handler_interrupted",
                    job_type=job.job_type.value,
                    unique_key=job.unique_key,
                    attempt=job.attempts,
                    error_type=type(e).__name__,
                )
                await asyncio.shield(self._queue.mark_failed(job.job_id, e))
                raise
            else:
                await self._queue.mark_completed(job.job_id, result)

        return True

    async def run(self, max_jobs: int | None = None, stop_when_idle: bool = True) -> int:
        """Process jobs until the queue is idle or ``max_jobs`` is reached.

        Args:
            max_jobs: Stop after this many jobs (None for no limit).
            stop_when_idle: Return when no job is due instead of polling.

        Returns:
            Number of jobs executed.
        """
        processed = 0
        await self._queue.requeue_stale()
        while max_jobs is None or processed < max_jobs:
            if await self.run_once():
                processed += 1
                continue
            if stop_when_idle:
                break
            await asyncio.sleep(self._poll_interval_seconds)
            await self._queue.requeue_stale()

        logger.info("jobs.worker_stopped", processed=processed)
        return processed
