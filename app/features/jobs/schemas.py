"""Pydantic schemas for job endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.features.jobs.models import JobStatus, JobType

# =============================================================================
# Job Response Schemas
# =============================================================================


class JobResponse(BaseModel):
    """Response schema for a single job."""

    model_config = ConfigDict(from_attributes=True)

    job_id: str = Field(..., description="Unique job identifier (32-char hex).")
    job_type: JobType = Field(..., description="Type of job, e.g. 'photo_import'.")
    unique_key: str = Field(
        ...,
        description="Deduplication key. For photo imports this is the feed URL.",
    )
    status: JobStatus = Field(
        ...,
        description="Current job status: 'pending', 'running', 'completed', 'failed', or 'cancelled'.",
    )
    params: dict[str, Any] = Field(..., description="Job parameters as enqueued.")
    result: dict[str, Any] | None = Field(
        None,
        description="Handler result (null until completed). For photo imports, the import summary.",
    )
    error_message: str | None = Field(None, description="Last error raised by the handler.")
    error_type: str | None = Field(None, description="Exception class name of the last error.")
    attempts: int = Field(0, ge=0, description="Number of attempts so far.")
    max_attempts: int = Field(..., ge=1, description="Attempts allowed before giving up.")
    run_after: datetime | None = Field(
        None,
        description="Earliest time the job may run (pushed back after a failed attempt).",
    )
    started_at: datetime | None = Field(None, description="When the latest attempt started.")
    completed_at: datetime | None = Field(None, description="When the job reached a terminal state.")
    created_at: datetime = Field(..., description="When the job was enqueued.")
    updated_at: datetime = Field(..., description="When the job was last updated.")


# =============================================================================
# Job List Response
# =============================================================================


class JobListResponse(BaseModel):
    """Paginated list of jobs."""

    jobs: list[JobResponse] = Field(..., description="Jobs for the current page.")
    total: int = Field(..., ge=0, description="Total number of jobs matching the filters.")
    page: int = Field(..., ge=1, description="Current page number (1-indexed).")
    page_size: int = Field(..., ge=1, description="Number of jobs per page. Maximum is 100.")
