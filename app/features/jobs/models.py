"""Job ORM model backing the task runtime.

A job is one unit of background work, e.g. importing one feed. Jobs carry a
``unique_key``; a partial unique index guarantees at most one pending or
running job per (job_type, unique_key), which is how refresh deduplicates.

CRITICAL: Uses PostgreSQL JSONB for params/results and a partial index for
deduplication; the table is PostgreSQL-only.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import TimestampMixin


class JobType(str, Enum):
    """Types of jobs that can be executed.

    - PHOTO_IMPORT: Import the photos of one feed (unique_key = feed URL)
    """

    PHOTO_IMPORT = "photo_import"


class JobStatus(str, Enum):
    """Job lifecycle states.

    State transitions:
    - PENDING -> RUNNING -> COMPLETED | FAILED
    - RUNNING -> PENDING (handler raised, attempts remain)
    - PENDING -> CANCELLED (via DELETE endpoint)
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


# Statuses that count as "outstanding" for deduplication
ACTIVE_JOB_STATUSES: frozenset[JobStatus] = frozenset({JobStatus.PENDING, JobStatus.RUNNING})

# Valid state transitions for job status
VALID_JOB_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    JobStatus.PENDING: {JobStatus.RUNNING, JobStatus.CANCELLED},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.PENDING},
    JobStatus.COMPLETED: set(),  # Terminal state
    JobStatus.FAILED: set(),  # Terminal state
    JobStatus.CANCELLED: set(),  # Terminal state
}

ACTIVE_STATUS_PREDICATE = "status IN ('pending', 'running')"


class Job(TimestampMixin, Base):
    """Background job record.

    Attributes:
        id: Primary key.
        job_id: Unique external identifier (UUID hex, 32 chars).
        job_type: Type of job.
        unique_key: Deduplication key (the feed URL for photo imports).
        status: Current lifecycle state.
        params: Job parameters as JSONB.
        result: Handler result as JSONB (null until completed).
        error_message: Last error if the handler raised.
        error_type: Exception class name of the last error.
        attempts: Number of times the job has been claimed.
        max_attempts: Attempts allowed before the job is marked failed.
        run_after: Earliest time the job may be claimed (retry backoff).
        started_at: When the latest attempt started.
        completed_at: When the job reached a terminal state.
    """

    __tablename__ = "job"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    job_type: Mapped[str] = mapped_column(String(50), index=True)
    unique_key: Mapped[str] = mapped_column(String(2048))
    status: Mapped[str] = mapped_column(String(20), default=JobStatus.PENDING.value, index=True)

    params: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    result: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    error_message: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    error_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    attempts: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    max_attempts: Mapped[int] = mapped_column(Integer, default=5, server_default="5")

    run_after: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    started_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        # At most one outstanding job per key
        Index(
            "uq_job_active_unique_key",
            "job_type",
            "unique_key",
            unique=True,
            postgresql_where=text(ACTIVE_STATUS_PREDICATE),
        ),
        # Claim query: oldest due pending job
        Index("ix_job_status_run_after", "status", "run_after"),
        CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed', 'cancelled')",
            name="ck_job_valid_status",
        ),
        CheckConstraint("attempts >= 0", name="ck_job_attempts_non_negative"),
        CheckConstraint("max_attempts >= 1", name="ck_job_max_attempts_positive"),
    )
