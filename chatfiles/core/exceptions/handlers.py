import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chatfiles.core.exceptions import AppException, UnknownError
from chatfiles.shared.schemas import ErrorResponse, ErrorDetail

logger = logging.getLogger(__name__)

_HTTP_REASONS = {
    400: "bad_request",
    401: "authentication_required",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "file_too_large",
}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions."""
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.reason
        )

    field = exc.details.get("field")
    errors = [ErrorDetail(field=field, message=exc.message)]

    response = ErrorResponse(
        message=exc.message,
        reason=exc.reason,
        errors=errors,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
    )


def _format_validation_errors(errors: list[dict]) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for error in errors:
        loc = error.get("loc", ())
        # Drop top-level "body" for cleaner field paths
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) if loc else None
        details.append(ErrorDetail(field=field, message=error.get("msg", "Invalid value")))
    return details


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors."""
    response = ErrorResponse(
        message="Validation error",
        reason="invalid_request",
        errors=_format_validation_errors(exc.errors()),
    )
    return JSONResponse(
        status_code=400,
        content=response.model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    message = str(exc.detail) if exc.detail else "HTTP error"
    response = ErrorResponse(
        message=message,
        reason=_HTTP_REASONS.get(exc.status_code, "http_error"),
        errors=[ErrorDetail(field=None, message=message)],
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback, return a generic 500 without internal detail."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = UnknownError()
    response = ErrorResponse(
        message=error.message,
        reason=error.reason,
        errors=[ErrorDetail(field=None, message=error.message)],
    )
    return JSONResponse(status_code=error.status_code, content=response.model_dump())
