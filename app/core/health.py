"""Health check endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging import get_logger
from app.features.jobs.models import Job, JobStatus

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["ok", "degraded", "unhealthy"]
    database: Literal["connected", "disconnected"] | None = None
    pending_jobs: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check; never touches the database."""
    return HealthResponse(status="ok")


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    """Readiness check including database connectivity and queue depth.

    Args:
        db: Database session dependency.

    Returns:
        Health status with database state and number of pending jobs.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(
            "health.database_disconnected",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return HealthResponse(status="unhealthy", database="disconnected")

    try:
        result = await db.execute(
            select(func.count()).select_from(Job).where(Job.status == JobStatus.PENDING.value)
        )
        pending = result.scalar_one()
    except SQLAlchemyError as e:
        # Connected but schema missing (e.g. migrations not applied yet)
        logger.warning("health.job_table_unavailable", error=str(e))
        return HealthResponse(status="degraded", database="connected")

    return HealthResponse(status="ok", database="connected", pending_jobs=pending)
