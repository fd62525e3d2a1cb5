"""Job queue backed by the ``job`` table.

Implements the task runtime contract the refresh scheduler depends on:

- Deduplication: ``enqueue`` is a no-op while a pending or running job with
  the same (job_type, unique_key) exists. The partial unique index enforces
  this in the database, so concurrent enqueues cannot both win.
- Retryability: a job whose handler raises goes back to pending with an
  exponential backoff until ``max_attempts`` is reached, then fails.
- Leases: a job left running longer than ``lease_seconds`` (worker killed,
  outcome never recorded) is recovered by ``requeue_stale`` as a failed
  attempt, so it can never hold its unique key forever.

CRITICAL: Every state change is logged for auditability.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.database import get_session_maker
from app.core.exceptions import BadRequestError
from app.core.logging import get_logger
from app.features.jobs.models import (
    ACTIVE_STATUS_PREDICATE,
    VALID_JOB_TRANSITIONS,
    Job,
    JobStatus,
    JobType,
)
from app.features.jobs.schemas import JobListResponse, JobResponse

logger = get_logger(__name__)


def retry_delay(attempts: int, backoff_seconds: float) -> timedelta:
    """Delay before the next attempt after ``attempts`` failed ones.

    Doubles per attempt: backoff, 2*backoff, 4*backoff, ...
    """
    return timedelta(seconds=backoff_seconds * 2 ** max(attempts - 1, 0))


class JobQueue:
    """Persistent, deduplicating, retrying job queue."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        max_attempts: int = 5,
        retry_backoff_seconds: float = 30.0,
        lease_seconds: float = 900.0,
    ) -> None:
        self._session_maker = session_maker
        self.max_attempts = max_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.lease_seconds = lease_seconds

    async def enqueue(
        self,
        task_type: str,
        unique_key: str,
        params: dict[str, Any] | None = None,
    ) -> bool:
        """Enqueue a job unless one is already outstanding for the key.

        Args:
            task_type: Job type value (see JobType).
            unique_key: Deduplication key.
            params: Parameters handed to the job handler.

        Returns:
            True if a new job was created, False if deduplicated.

        Raises:
            ValueError: If task_type is not a known JobType.
        """
        job_type = JobType(task_type).value
        job_id = uuid.uuid4().hex

        stmt = (
            pg_insert(Job)
            .values(
                job_id=job_id,
                job_type=job_type,
                unique_key=unique_key,
                status=JobStatus.PENDING.value,
                params=params or {},
                max_attempts=self.max_attempts,
            )
            .on_conflict_do_nothing(
                index_elements=["job_type", "unique_key"],
                index_where=text(ACTIVE_STATUS_PREDICATE),
            )
            .returning(Job.job_id)
        )

        async with self._session_maker() as session:
            result = await session.execute(stmt)
            created_id = result.scalar_one_or_none()
            await session.commit()

        if created_id is None:
            logger.debug(
                "jobs.enqueue_deduplicated",
                job_type=job_type,
                unique_key=unique_key,
            )
            return False

        logger.info(
            "jobs.job_enqueued",
            job_id=created_id,
            job_type=job_type,
            unique_key=unique_key,
        )
        return True

    async def claim_next(self, job_types: list[str] | None = None) -> JobResponse | None:
        """Claim the oldest due pending job and mark it running.

        Uses ``FOR UPDATE SKIP LOCKED`` so concurrent workers never claim
        the same job.

        Args:
            job_types: Restrict to these job types (None for any).

        Returns:
            The claimed job, or None if nothing is due.
        """
        now = datetime.now(UTC)
        stmt = (
            select(Job)
            .where(Job.status == JobStatus.PENDING.value, Job.run_after <= now)
            .order_by(Job.run_after, Job.id)
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        if job_types is not None:
            stmt = stmt.where(Job.job_type.in_(job_types))

        async with self._session_maker() as session:
            result = await session.execute(stmt)
            job = result.scalar_one_or_none()
            if job is None:
                return None

            job.status = JobStatus.RUNNING.value
            job.attempts += 1
            job.started_at = now
            await session.commit()
            await session.refresh(job)

            logger.info(
                "jobs.job_started",
                job_id=job.job_id,
                job_type=job.job_type,
                attempt=job.attempts,
            )
            return self._to_response(job)

    async def mark_completed(self, job_id: str, result: dict[str, Any]) -> None:
        """Record a successful attempt."""
        async with self._session_maker() as session:
            job = await self._get_for_update(session, job_id)
            self._transition(job, JobStatus.COMPLETED)
            job.result = result
            job.error_message = None
            job.error_type = None
            job.completed_at = datetime.now(UTC)
            await session.commit()

        logger.info("jobs.job_completed", job_id=job_id)

    async def mark_failed(self, job_id: str, error: BaseException) -> JobStatus:
        """Record a failed attempt, scheduling a retry if attempts remain.

        Args:
            job_id: Job that failed.
            error: Exception raised by the handler.

        Returns:
            PENDING if a retry was scheduled, FAILED otherwise.
        """
        now = datetime.now(UTC)
        async with self._session_maker() as session:
            job = await self._get_for_update(session, job_id)
            job.error_message = str(error)[:2000]  # Truncate to fit column
            job.error_type = type(error).__name__

            if job.attempts < job.max_attempts:
                self._transition(job, JobStatus.PENDING)
                job.run_after = now + retry_delay(job.attempts, self.retry_backoff_seconds)
                outcome = JobStatus.PENDING
            else:
                self._transition(job, JobStatus.FAILED)
                job.completed_at = now
                outcome = JobStatus.FAILED

            attempts, max_attempts, run_after = job.attempts, job.max_attempts, job.run_after
            await session.commit()

        if outcome is JobStatus.PENDING:
            logger.warning(
                "jobs.job_retry_scheduled",
                job_id=job_id,
                attempt=attempts,
                max_attempts=max_attempts,
                run_after=run_after.isoformat(),
                error=str(error),
                error_type=type(error).__name__,
            )
        else:
            logger.error(
                "jobs.job_failed",
                job_id=job_id,
                attempts=attempts,
                error=str(error),
                error_type=type(error).__name__,
            )
        return outcome

    async def requeue_stale(self) -> int:
        """Recover running jobs whose lease has expired.

        A worker that dies mid-job (or cannot record the outcome) leaves the
        job running, and a running job still blocks its unique key. Each
        expired job counts as a failed attempt: it goes back to pending if
        attempts remain, otherwise it fails.

        Returns:
            Number of jobs recovered.
        """
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.lease_seconds)
        stmt = (
            select(Job)
            .where(Job.status == JobStatus.RUNNING.value, Job.started_at < cutoff)
            .order_by(Job.started_at)
            .with_for_update(skip_locked=True)
        )

        async with self._session_maker() as session:
            result = await session.execute(stmt)
            stale = list(result.scalars().all())
            for job in stale:
                job.error_message = f"Lease of {self.lease_seconds:g}s expired"
                job.error_type = "LeaseExpired"
                if job.attempts < job.max_attempts:
                    self._transition(job, JobStatus.PENDING)
                    job.run_after = now
                else:
                    self._transition(job, JobStatus.FAILED)
                    job.completed_at = now
            recovered = [(job.job_id, job.status, job.attempts) for job in stale]
            await session.commit()

        for job_id, status, attempts in recovered:
            logger.warning(
                "jobs.lease_expired",
                job_id=job_id,
                status=status,
                attempts=attempts,
            )
        return len(recovered)

    async def get_job(self, job_id: str) -> JobResponse | None:
        """Get job by ID, or None if not found."""
        async with self._session_maker() as session:
            result = await session.execute(select(Job).where(Job.job_id == job_id))
            job = result.scalar_one_or_none()
            return None if job is None else self._to_response(job)

    async def list_jobs(
        self,
        page: int = 1,
        page_size: int = 20,
        job_type: JobType | None = None,
        status: JobStatus | None = None,
    ) -> JobListResponse:
        """List jobs with pagination and filtering.

        Args:
            page: Page number (1-indexed).
            page_size: Number of jobs per page.
            job_type: Filter by job type (optional).
            status: Filter by status (optional).

        Returns:
            Paginated list of jobs, newest first.
        """
        stmt = select(Job)
        if job_type is not None:
            stmt = stmt.where(Job.job_type == job_type.value)
        if status is not None:
            stmt = stmt.where(Job.status == status.value)

        async with self._session_maker() as session:
            count_stmt = select(func.count()).select_from(stmt.subquery())
            total = (await session.execute(count_stmt)).scalar_one()

            offset = (page - 1) * page_size
            stmt = stmt.order_by(Job.created_at.desc()).offset(offset).limit(page_size)
            jobs = (await session.execute(stmt)).scalars().all()

            return JobListResponse(
                jobs=[self._to_response(job) for job in jobs],
                total=total,
                page=page,
                page_size=page_size,
            )

    async def cancel_job(self, job_id: str) -> JobResponse | None:
        """Cancel a pending job, freeing its unique key.

        Returns:
            Updated job or None if not found.

        Raises:
            BadRequestError: If the job is not pending.
        """
        async with self._session_maker() as session:
            result = await session.execute(
                select(Job).where(Job.job_id == job_id).with_for_update()
            )
            job = result.scalar_one_or_none()
            if job is None:
                return None

            current_status = JobStatus(job.status)
            if JobStatus.CANCELLED not in VALID_JOB_TRANSITIONS[current_status]:
                raise BadRequestError(
                    message=f"Cannot cancel job in status '{current_status.value}'",
                    details={"job_id": job_id, "status": current_status.value},
                )

            job.status = JobStatus.CANCELLED.value
            job.completed_at = datetime.now(UTC)
            await session.commit()
            await session.refresh(job)

            logger.info("jobs.job_cancelled", job_id=job_id)
            return self._to_response(job)

    async def _get_for_update(self, session: AsyncSession, job_id: str) -> Job:
        result = await session.execute(
            select(Job).where(Job.job_id == job_id).with_for_update()
        )
        return result.scalar_one()

    @staticmethod
    def _transition(job: Job, target: JobStatus) -> None:
        current = JobStatus(job.status)
        if target not in VALID_JOB_TRANSITIONS[current]:
            msg = f"Invalid job transition {current.value} -> {target.value} for {job.job_id}"
            raise ValueError(msg)
        job.status = target.value

    @staticmethod
    def _to_response(job: Job) -> JobResponse:
        return JobResponse.model_validate(job)


def get_job_queue() -> JobQueue:
    """Dependency returning the queue configured from settings."""
    settings = get_settings()
    return JobQueue(
        get_session_maker(),
        max_attempts=settings.jobs_max_attempts,
        retry_backoff_seconds=settings.jobs_retry_backoff_seconds,
        lease_seconds=settings.jobs_lease_seconds,
    )
