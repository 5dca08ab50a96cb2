"""Domain error types and the application-wide exception handlers.

Each error is an ``HTTPException`` so routers and service functions can raise
them directly and FastAPI renders ``{"detail": message}`` with the right
status code.
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from libs.common.logging import get_logger

logger = get_logger(__name__)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ValidationFailureError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Insufficient privileges"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UpstreamUnavailableError(HTTPException):
    """The external catalog could not be reached or answered garbage."""

    def __init__(self, detail: str = "Upstream service unavailable"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Install the catch-all handler; HTTPException subclasses keep FastAPI's."""
    app.add_exception_handler(Exception, unhandled_exception_handler)
