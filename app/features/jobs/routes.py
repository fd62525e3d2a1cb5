"""API routes for monitoring background jobs.

Jobs are created by the refresh scheduler, not through this router; these
endpoints let operators watch imports and cancel pending ones.
"""

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import NotFoundError
from app.features.jobs.models import JobStatus, JobType
from app.features.jobs.schemas import JobListResponse, JobResponse
from app.features.jobs.service import JobQueue, get_job_queue

router = APIRouter(prefix="/jobs", tags=["jobs"])


# =============================================================================
# Job Listing
# =============================================================================


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs",
    description="""
List jobs with pagination and optional filtering, newest first.

**Filtering**:
- `job_type`: e.g. `photo_import`
- `status`: pending, running, completed, failed, cancelled

**Example Use Cases**:
1. Imports waiting for a retry: `GET /jobs?status=pending`
2. Imports that exhausted their attempts: `GET /jobs?status=failed`
""",
)
async def list_jobs(
    queue: JobQueue = Depends(get_job_queue),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Jobs per page (max 100)"),
    job_type: JobType | None = Query(None, description="Filter by job type"),
    status: JobStatus | None = Query(None, description="Filter by status"),
) -> JobListResponse:
    """List jobs with pagination and filtering."""
    return await queue.list_jobs(
        page=page,
        page_size=page_size,
        job_type=job_type,
        status=status,
    )


# =============================================================================
# Single Job Operations
# =============================================================================


@router.get("/{job_id}", response_model=JobResponse, summary="Get job by ID")
async def get_job(
    job_id: str,
    queue: JobQueue = Depends(get_job_queue),
) -> JobResponse:
    """Get job details by ID.

    Raises:
        NotFoundError: If job not found.
    """
    result = await queue.get_job(job_id)
    if result is None:
        raise NotFoundError(
            message=f"Job not found: {job_id}. Use GET /jobs to list available jobs.",
            details={"job_id": job_id},
        )
    return result


@router.delete(
    "/{job_id}",
    response_model=JobResponse,
    summary="Cancel a pending job",
    description="""
Cancel a job that is still in 'pending' status. Cancelling frees the job's
unique key, so the next refresh enqueues a fresh import for the same feed.

**Error Handling**:
- Returns 404 if job_id doesn't exist
- Returns 400 if job is not in pending status
""",
)
async def cancel_job(
    job_id: str,
    queue: JobQueue = Depends(get_job_queue),
) -> JobResponse:
    """Cancel a pending job.

    Raises:
        NotFoundError: If job not found.
        BadRequestError: If the job cannot be cancelled.
    """
    result = await queue.cancel_job(job_id)
    if result is None:
        raise NotFoundError(
            message=f"Job not found: {job_id}. Use GET /jobs to list available jobs.",
            details={"job_id": job_id},
        )
    return result
