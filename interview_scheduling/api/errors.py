"""FastAPI exception handlers mapping scheduling errors to JSON responses."""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from structlog import get_logger

from interview_scheduling.core.config import settings
from interview_scheduling.core.errors import DomainError

logger = get_logger()

ERROR_STATUS_MAP = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "PAST_DATE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "DATE_TOO_FAR_IN_FUTURE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "ACTIVE_INTERVIEW_EXISTS": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "EXTERNAL_SERVICE_ERROR": status.HTTP_502_BAD_GATEWAY,
    "DATABASE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "CONFIGURATION_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "DOMAIN_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    """Build the ``{"error": {...}}`` body shared by every handler."""
    error: dict[str, Any] = {
        "code": code,
        "message": message,
        "request_id": getattr(request.state, "request_id", None),
    }
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Translate a scheduling error into its HTTP status.

    These are expected outcomes (conflicts, illegal transitions, missing
    records), so they log at WARNING. The error context is only returned to
    the caller when EXPOSE_ERROR_DETAILS is set.
    """
    http_status = ERROR_STATUS_MAP.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.warning(
        "domain_error_handled",
        error_code=exc.code,
        http_status=http_status,
        message=exc.message,
        context=exc.context,
    )

    details = exc.context if settings.expose_error_details and exc.context else None
    return error_response(request, http_status, exc.code, exc.message, details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(request, exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Validation errors without the non-serializable ``ctx``/``input`` payloads."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Invalid request data",
        jsonable_errors(exc),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected failure: log with traceback, return a generic 500."""
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain, HTTP, request-validation and catch-all handlers."""
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)
