"""
Request Context Middleware.

Tags every request with an id and its source, times it, and binds both
to structlog so every log line written while serving it carries them.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from modules.backend.core.logging import VALID_SOURCES, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SOURCE_HEADER = "X-Client-Source"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Adds request context to every request.

    Headers:
    - X-Request-ID: propagated, or generated when absent
    - X-Client-Source: caller identifier (web, client, cli, internal)
    - X-Response-Time: response duration in milliseconds

    Handlers can read ``request.state.request_id`` and ``request.state.source``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        source = request.headers.get(SOURCE_HEADER, "unknown").lower()
        if source not in VALID_SOURCES:
            source = "unknown"

        request.state.request_id = request_id
        request.state.source = source

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            source=source,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                    "error_type": type(exc).__name__,
                },
            )
            raise
        finally:
            structlog.contextvars.clear_contextvars()

        duration_ms = int((time.perf_counter() - started) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.debug(
            "Request completed",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
