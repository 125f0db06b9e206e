"""Exception handlers that render every failure in one envelope.

Clients of the quiz, program, meals and workouts routers see::

    {"error": {"message": ..., "status_code": ..., "details": {...}, "request_id": ...}}

whatever went wrong. ``details`` and ``request_id`` are omitted when empty.
The request id is the client's ``X-Request-ID`` header echoed back.
"""

from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.exceptions import AppException
from core.logger import get_logger

logger = get_logger("core.error_handlers")

REQUEST_ID_HEADER = "x-request-id"

# location prefixes FastAPI adds to validation errors
_LOCATION_PREFIXES = ("body", "query", "path", "header")


def create_error_response(
    message: str,
    status_code: int = 500,
    details: Optional[dict] = None,
    request_id: Optional[str] = None
) -> JSONResponse:
    """Build the JSON error envelope.

    Args:
        message: Error message shown to the client.
        status_code: HTTP status code.
        details: Optional structured context.
        request_id: Optional id echoed from the request headers.

    Returns:
        JSONResponse carrying ``{"error": {...}}``.
    """
    error: Dict[str, Any] = {"message": message, "status_code": status_code}
    if details:
        error["details"] = details
    if request_id:
        error["request_id"] = request_id
    return JSONResponse(status_code=status_code, content={"error": error})


def _describe(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def _respond(request: Request, message: str, status_code: int, details: Optional[dict] = None) -> JSONResponse:
    return create_error_response(message, status_code, details, request.headers.get(REQUEST_ID_HEADER))


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        errors.append({"field": ".".join(loc), "message": error.get("msg", ""), "type": error.get("type", "")})
    return errors


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an `AppException` with its own status and details."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s failed with %s: %s", _describe(request), exc.status_code, exc.message)
    body = exc.to_dict()
    return _respond(request, body["message"], body["status_code"], body.get("details"))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and query parameters field by field."""
    errors = _field_errors(exc)
    logger.warning("%s rejected: %s", _describe(request), errors)
    return _respond(
        request,
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"validation_errors": errors},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Map database failures without exposing SQL to the client.

    A unique-key clash on the per-day tables (two writes racing for the
    same email, date and meal number) is a 409; anything else is a 500.
    """
    if isinstance(exc, IntegrityError):
        logger.warning("%s hit a key conflict: %s", _describe(request), exc.orig)
        return _respond(
            request,
            "The record was changed by another request, please retry",
            status.HTTP_409_CONFLICT,
            {"type": "conflict"},
        )
    logger.error("Database error on %s", _describe(request), exc_info=exc)
    return _respond(
        request,
        "A database error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"type": "database_error"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s", _describe(request), exc_info=exc)
    return _respond(
        request,
        "An internal server error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"type": "internal_error"},
    )


HANDLERS = (
    (AppException, app_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (SQLAlchemyError, sqlalchemy_exception_handler),
    (Exception, generic_exception_handler),
)


def register_exception_handlers(app) -> None:
    """Install the envelope handlers on a FastAPI app."""
    for exc_class, handler in HANDLERS:
        app.add_exception_handler(exc_class, handler)
    logger.debug("Registered %s exception handlers", len(HANDLERS))
