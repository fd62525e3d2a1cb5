"""Custom exceptions and FastAPI exception handlers.

Two families live here:

- Ingestion errors (FeedFetchError, MappingError, PhotoCreateError) which the
  import pipeline absorbs and reports per run or per entry.
- HTTP-facing errors (NotFoundError, ConflictError, ...) rendered as
  RFC 7807 Problem Details when they reach the API boundary.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from app.core.logging import get_logger
from app.core.problem_details import (
    ERROR_TYPES,
    ProblemDetailResponse,
    problem_response,
)

logger = get_logger(__name__)


# =============================================================================
# Exception Classes
# =============================================================================


class PhotoIngestError(Exception):
    """Base exception for PhotoFeedIngest application errors.

    All application-specific exceptions should inherit from this class.
    Each exception type maps to an RFC 7807 problem type URI.
    """

    # Default error type URI (override in subclasses)
    error_type_uri: str = ERROR_TYPES["INTERNAL_ERROR"]

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    @property
    def title(self) -> str:
        """RFC 7807 title - short summary of problem type."""
        return self.code.replace("_", " ").title()


class FeedFetchError(PhotoIngestError):
    """Whole-feed failure: network, timeout, or unparseable feed."""

    error_type_uri: str = ERROR_TYPES["FEED_FETCH_ERROR"]

    def __init__(
        self,
        feed_url: str,
        message: str = "Feed could not be fetched",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="FEED_FETCH_ERROR",
            status_code=502,
            details={"feed_url": feed_url, **(details or {})},
        )
        self.feed_url = feed_url


class MappingError(PhotoIngestError):
    """A single feed entry could not be turned into a photo record.

    Carries the raw entry and the underlying cause so the importer can
    report which entry failed and why.
    """

    error_type_uri: str = ERROR_TYPES["MAPPING_ERROR"]

    def __init__(
        self,
        message: str,
        entry: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        entry_id = getattr(entry, "entry_id", None)
        super().__init__(
            message=message,
            code="MAPPING_ERROR",
            status_code=422,
            details={"entry_id": entry_id},
        )
        self.entry = entry
        self.cause = cause


class PhotoCreateError(PhotoIngestError):
    """The photo store rejected a create.

    ``duplicate`` is True when the id was already present, which happens
    only when two runs race on the same entry id.
    """

    error_type_uri: str = ERROR_TYPES["CREATE_ERROR"]

    def __init__(
        self,
        photo_id: str,
        message: str = "Photo could not be created",
        duplicate: bool = False,
    ) -> None:
        super().__init__(
            message=message,
            code="CREATE_ERROR",
            status_code=409 if duplicate else 500,
            details={"photo_id": photo_id, "duplicate": duplicate},
        )
        self.photo_id = photo_id
        self.duplicate = duplicate


class NotFoundError(PhotoIngestError):
    """Resource not found error.

    Use when a requested resource (photo, feed source, job) does not exist.
    """

    error_type_uri: str = ERROR_TYPES["NOT_FOUND"]

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details=details,
        )


class ConflictError(PhotoIngestError):
    """Resource conflict error.

    Use when an operation conflicts with existing state (e.g., duplicate).
    """

    error_type_uri: str = ERROR_TYPES["CONFLICT"]

    def __init__(
        self,
        message: str = "Resource conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details,
        )


class BadRequestError(PhotoIngestError):
    """Bad request error.

    Use when the request is malformed or not allowed in the current state.
    """

    error_type_uri: str = ERROR_TYPES["BAD_REQUEST"]

    def __init__(
        self,
        message: str = "Bad request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=400,
            details=details,
        )


# =============================================================================
# Exception Handlers (RFC 7807)
# =============================================================================


async def photo_ingest_exception_handler(
    _request: Request,
    exc: PhotoIngestError,
) -> ProblemDetailResponse:
    """Handle PhotoIngestError exceptions with RFC 7807 Problem Details.

    Args:
        _request: FastAPI request object.
        exc: The raised exception.

    Returns:
        RFC 7807 Problem Detail response.
    """
    logger.error(
        "app.error_handled",
        error=exc.message,
        error_type=type(exc).__name__,
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
        exc_info=True,
    )

    return problem_response(
        status=exc.status_code,
        title=exc.title,
        detail=exc.message,
        error_code=exc.code,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> ProblemDetailResponse:
    """Handle Pydantic validation errors with RFC 7807 Problem Details.

    Args:
        request: FastAPI request object.
        exc: Pydantic validation error.

    Returns:
        RFC 7807 Problem Detail response with field-level errors.
    """
    field_errors: list[dict[str, str]] = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = ".".join(str(part) for part in loc if part != "body")
        field_errors.append(
            {
                "field": field_path,
                "message": str(error.get("msg", "Validation failed")),
                "type": str(error.get("type", "unknown")),
            }
        )

    logger.warning(
        "app.validation_error",
        error_count=len(field_errors),
        path=str(request.url.path),
        fields=[e["field"] for e in field_errors],
    )

    return problem_response(
        status=422,
        title="Validation Error",
        detail=f"Request validation failed with {len(field_errors)} error(s). "
        "Check the 'errors' field for details.",
        error_code="VALIDATION_ERROR",
        errors=field_errors,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> ProblemDetailResponse:
    """Handle unexpected exceptions with RFC 7807 Problem Details.

    Args:
        request: FastAPI request object.
        exc: The raised exception.

    Returns:
        RFC 7807 Problem Detail response.
    """
    logger.error(
        "app.unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=str(request.url.path),
        exc_info=True,
    )

    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Please try again later or "
        "contact support with the request_id.",
        error_code="INTERNAL_ERROR",
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(PhotoIngestError, photo_ingest_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
