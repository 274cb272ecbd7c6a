"""Request ID + access log middleware.

Learn: Every request gets a UUID, either from the incoming
X-Request-ID header (for distributed tracing) or auto-generated.
The ID is bound to structlog's contextvars so every log entry written
while handling the request carries it, and it is returned in the
response header. One "request.completed" line per request records
method, path, status and duration; headers are never logged, so
Bearer tokens stay out of the logs.

An exception that escapes every handler is logged as "request.failed"
before it propagates to the outer error middleware.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log its outcome."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.error(
                "request.failed",
                method=request.method,
                path=request.url.path,
                status=500,
                duration_ms=_elapsed_ms(started),
                error=type(e).__name__,
            )
            raise

        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        response.headers["X-Request-ID"] = request_id
        return response
