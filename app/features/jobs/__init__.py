"""Jobs module: the persistent task runtime.

Provides a deduplicating, retrying job queue, a worker that dispatches jobs
to handlers, and endpoints for monitoring them.
"""

from app.features.jobs.models import Job, JobStatus, JobType
from app.features.jobs.routes import router
from app.features.jobs.schemas import JobListResponse, JobResponse
from app.features.jobs.service import JobQueue, get_job_queue, retry_delay
from app.features.jobs.worker import JobHandler, JobWorker

__all__ = [
    "Job",
    "JobHandler",
    "JobListResponse",
    "JobQueue",
    "JobResponse",
    "JobStatus",
    "JobType",
    "JobWorker",
    "get_job_queue",
    "retry_delay",
    "router",
]
