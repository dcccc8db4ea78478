"""
Exception Handlers.

FastAPI exception handlers that convert application exceptions
to the uniform ``{success: false, error, code}`` envelope. All
exceptions are logged; no exception reaches the transport layer
unhandled.

Usage:
    from modules.backend.core.exception_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from modules.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaError,
    ValidationError,
)
from modules.backend.core.logging import get_logger
from modules.backend.schemas.base import ErrorResponse

logger = get_logger(__name__)

# Map exception types to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    PayloadTooLargeError: 413,
    UnsupportedMediaError: 415,
    StorageError: 500,
}

GENERIC_SERVER_MESSAGE = "An unexpected error occurred"


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state or headers."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def validation_details(errors: list[dict]) -> dict:
    """Flatten pydantic error dicts into the envelope's ``details`` shape."""
    return {
        "validation_errors": [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Validation error"),
                "type": err.get("type", "unknown"),
            }
            for err in errors
        ]
    }


def _error_response(
    status_code: int,
    message: str,
    code: str,
    request_id: str | None,
    details: dict | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        code=code,
        details=details or None,
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def application_error_handler(
    request: Request,
    exc: ApplicationError,
) -> JSONResponse:
    """
    Handle all ApplicationError subclasses.

    Server-side failures (5xx) are logged with their message but the
    client only receives a generic message.
    """
    status_code = EXCEPTION_STATUS_MAP.get(type(exc), 500)
    request_id = _get_request_id(request)

    log_extra = {
        "code": exc.code,
        "message": exc.message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if request_id:
        log_extra["request_id"] = request_id

    if status_code >= 500:
        logger.error("Server error", extra=log_extra)
        message = GENERIC_SERVER_MESSAGE
    else:
        logger.warning("Client error", extra=log_extra)
        message = exc.message

    details = exc.details if isinstance(exc, ValidationError) else None
    return _error_response(status_code, message, exc.code, request_id, details)


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle FastAPI/Pydantic request validation errors.

    Malformed request fields are a client error (400), matching the
    ValidationError mapping.
    """
    request_id = _get_request_id(request)

    errors = exc.errors()
    details = validation_details(errors)

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "request_id": request_id,
        },
    )

    return _error_response(400, "Validation failed", "VAL_REQUEST_INVALID", request_id, details)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, bad method) in the envelope."""
    request_id = _get_request_id(request)
    if exc.status_code == 404:
        message, code = "Endpoint not found", "RES_NOT_FOUND"
    else:
        message, code = str(exc.detail), f"HTTP_{exc.status_code}"
    return _error_response(exc.status_code, message, code, request_id)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Catches all unhandled exceptions and returns a generic error
    response. Details are never exposed to the client.
    """
    request_id = _get_request_id(request)

    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "request_id": request_id,
        },
    )

    return _error_response(500, GENERIC_SERVER_MESSAGE, "SYS_INTERNAL_ERROR", request_id)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.debug("Exception handlers registered")
