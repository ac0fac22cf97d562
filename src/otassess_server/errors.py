"""Global exception handlers: map SDK exceptions to HTTP status codes.

Services raise typed exceptions from ``otassess_core.errors`` (all but
``UpstreamError`` are ``ValueError`` subclasses).  Rather than catching
them in every route, we install global handlers that pick the status code.
This keeps route handlers clean and focused on the happy path.

Handlers are registered most-specific first; Starlette walks the
exception's MRO, so a ``NotFoundError`` never reaches the plain
``ValueError`` handler.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from otassess_core.errors import (
    AnswerValidationError,
    ForbiddenError,
    NotFoundError,
    PayloadTooLargeError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

# --- Keyword patterns in plain ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("already exists", 409),
    ("not found", 404),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (ids, SQL, stack frames) stay in the server log; the
# client receives only a generic description.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Resource already exists",
    400: "Invalid request",
}


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """404 for absent rows and rows owned by someone else alike."""
    logger.info("NotFound at %s: %s", request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": f"{exc.entity} not found"})


async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    """403 with the service's message (e.g. remaining retention days)."""
    logger.info("Forbidden at %s: %s", request.url.path, exc)
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def answer_validation_handler(
    request: Request, exc: AnswerValidationError,
) -> JSONResponse:
    """400 with the validation message and the offending field, if any."""
    logger.info("Validation failed at %s: %s", request.url.path, exc)
    content: dict = {"detail": str(exc)}
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=400, content=content)


async def payload_too_large_handler(
    request: Request, exc: PayloadTooLargeError,
) -> JSONResponse:
    logger.info("Upload rejected at %s: %s", request.url.path, exc)
    return JSONResponse(status_code=413, content={"detail": str(exc)})


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """500 carrying the upstream ``details`` so the caller can show them."""
    logger.error("Upstream failure at %s: %s (%s)", request.url.path, exc, exc.details)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "details": exc.details},
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map a plain ``ValueError`` to a contextual HTTP error response.

    Inspects the exception message to decide between 404 (not found),
    409 (conflict / duplicate), or 400 (bad request).  Falls back to 400
    for unrecognised messages.

    The raw exception message is logged server-side but **never** sent
    to the client.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown question bank) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Registration order for ``create_app``
EXCEPTION_HANDLERS = [
    (NotFoundError, not_found_handler),
    (ForbiddenError, forbidden_handler),
    (AnswerValidationError, answer_validation_handler),
    (PayloadTooLargeError, payload_too_large_handler),
    (UpstreamError, upstream_error_handler),
    (ValueError, value_error_handler),
    (KeyError, key_error_handler),
    (Exception, generic_error_handler),
]
