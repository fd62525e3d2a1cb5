"""Request middleware for correlation and access logging."""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import get_logger, request_id_ctx

logger = get_logger(__name__)

# Health checks are polled every few seconds; keep them out of the access log.
QUIET_PATHS = frozenset({"/health", "/health/ready"})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Inject and propagate request IDs, logging each request's outcome."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            Response with X-Request-ID header.
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        path = str(request.url.path)
        quiet = path in QUIET_PATHS
        start_time = time.perf_counter()

        try:
            response = await call_next(request)

            if not quiet:
                logger.info(
                    "http.request_completed",
                    method=request.method,
                    path=path,
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )

            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_ctx.reset(token)
