"""Request middleware for the store API.

Every request gets a request id (taken from ``X-Request-ID`` or generated)
that is bound to the logging context, forwarded on outbound FakeStore calls
and echoed back with the response time.

Usage:
    from libs.common.middleware import add_observability_middleware

    app = FastAPI()
    add_observability_middleware(app)
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time-Ms"

# Probes and docs are not worth a log line per hit
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind the request id for log correlation and log each request's outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in QUIET_PATHS
        start = time.perf_counter()

        if not quiet:
            logger.info(
                "Request started",
                extra={
                    "extra_fields": {
                        "query": str(request.url.query) or None,
                        "client": request.client.host if request.client else None,
                    }
                },
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with unhandled exception",
                extra={
                    "extra_fields": {"error": str(e), "duration_ms": _elapsed_ms(start)}
                },
            )
            raise
        finally:
            clear_request_context()

        duration_ms = _elapsed_ms(start)
        if not quiet:
            level = logger.warning if response.status_code >= 400 else logger.info
            level(
                "Request completed",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    }
                },
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = str(duration_ms)
        return response


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install the request context middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
