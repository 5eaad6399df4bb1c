"""
FastAPI middleware for request logging and request ID tracking.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

# Context variable for request ID (available across async calls)
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get current request ID from context."""
    return request_id_ctx.get()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its status and elapsed time.

    Reuses an incoming X-Request-ID header (so IDs follow a request
    across services) or generates a short one, and echoes it back on
    the response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        token = request_id_ctx.set(req_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{req_id}] {request.method} {request.url.path} failed after {elapsed_ms:.1f}ms: {e}",
                extra={"request_id": req_id, "elapsed_ms": elapsed_ms},
                exc_info=True,
            )
            raise
        finally:
            request_id_ctx.reset(token)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"[{req_id}] {request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f}ms",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params),
                "status_code": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )

        response.headers[REQUEST_ID_HEADER] = req_id
        return response
