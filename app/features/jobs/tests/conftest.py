"""Test fixtures for jobs module."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.features.jobs.models import Job, JobStatus, JobType
from app.features.jobs.schemas import JobResponse

FEED_URL = "http://some/mrss.url/feed.xml1"


@pytest.fixture
def mock_session() -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def session_maker(mock_session: AsyncMock) -> MagicMock:
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = mock_session
    maker.return_value.__aexit__.return_value = None
    return maker


@pytest.fixture
def running_job() -> Job:
    """Create a job row on its first attempt."""
    return Job(
        job_id="abc123def4567890123456789012abcd",
        job_type=JobType.PHOTO_IMPORT.value,
        unique_key=FEED_URL,
        status=JobStatus.RUNNING.value,
        params={"feed_url": FEED_URL},
        attempts=1,
        max_attempts=3,
        run_after=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def sample_job_response() -> JobResponse:
    """Create sample job response for a claimed photo import."""
    now = datetime.now(UTC)
    return JobResponse(
        job_id="abc123def4567890123456789012abcd",
        job_type=JobType.PHOTO_IMPORT,
        unique_key=FEED_URL,
        status=JobStatus.RUNNING,
        params={"feed_url": FEED_URL},
        attempts=1,
        max_attempts=5,
        run_after=now,
        started_at=now,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def mock_queue(sample_job_response: JobResponse) -> AsyncMock:
    """Queue that hands out ``sample_job_response`` once."""
    queue = AsyncMock()
    queue.claim_next.side_effect = [sample_job_response, None]
    queue.requeue_stale.return_value = 0
    return queue


@pytest.fixture
def stale_job(running_job: Job) -> Job:
    """A running job whose worker stopped reporting an hour ago."""
    running_job.started_at = datetime.now(UTC) - timedelta(hours=1)
    return running_job
