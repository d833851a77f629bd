"""
Exception Handlers.

Every failure leaving the notes API, whether raised by a service, by
request parsing, by routing or unexpectedly, is rendered as the same
envelope:

    {"success": false, "data": null, "error": "<message>", "code": "<CODE>",
     "details": {...} | null, "metadata": {"timestamp": ..., "request_id": ...}}
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from modules.backend.core.exceptions import ApplicationError, ValidationError
from modules.backend.core.logging import get_logger
from modules.backend.schemas.base import ErrorResponse, ResponseMetadata

logger = get_logger(__name__)


def _get_request_id(request: Request) -> str | None:
    """Id bound by the middleware, else the raw header (handlers may run outside it)."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _request_fields(request: Request) -> dict[str, Any]:
    return {"path": request.url.path, "method": request.method}


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        code=code,
        details=details,
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """Service errors; status and code come from the exception class."""
    fields = {"code": exc.code, "message": exc.message, "status": exc.status_code}
    fields.update(_request_fields(request))

    if exc.status_code >= 500:
        logger.error("Server error", extra=fields)
    else:
        logger.warning("Client error", extra=fields)

    details = None
    if isinstance(exc, ValidationError) and exc.details:
        details = exc.details
    return _error_response(request, exc.status_code, exc.message, exc.code, details)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", [])),
            "message": err.get("msg", "Validation error"),
            "type": err.get("type", "unknown"),
        }
        for err in exc.errors()
    ]


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings; these never reach a service."""
    errors = _field_errors(exc)
    logger.warning(
        "Request validation failed",
        extra={"error_count": len(errors), **_request_fields(request)},
    )
    return _error_response(
        request,
        422,
        "Request validation failed",
        "VAL_REQUEST_INVALID",
        {"validation_errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown paths and wrong methods."""
    return _error_response(request, exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else: the traceback is logged, the caller gets a generic 500."""
    logger.exception(
        "Unhandled exception",
        extra={"exception_type": type(exc).__name__, **_request_fields(request)},
    )
    return _error_response(request, 500, "An unexpected error occurred", "SYS_INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
