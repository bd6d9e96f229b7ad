"""Scheduling error hierarchy and the service_boundary decorator."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

import aiohttp
import asyncpg
from structlog import get_logger

logger = get_logger()

P = ParamSpec("P")
T = TypeVar("T")


class DomainError(Exception):
    """Base class for scheduling failures that map to a stable error code."""

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Interview, configuration or stage record does not exist."""

    code = "NOT_FOUND"


class ValidationError(DomainError):
    """Request data rejected before touching storage."""

    code = "VALIDATION_ERROR"


class PastDateError(ValidationError):
    """Requested interview time is not strictly in the future."""

    code = "PAST_DATE"


class DateTooFarInFutureError(ValidationError):
    """Requested interview time is beyond the scheduling horizon."""

    code = "DATE_TOO_FAR_IN_FUTURE"


class ConfigurationError(DomainError):
    """Stage scheduling disabled or misconfigured."""

    code = "CONFIGURATION_ERROR"


class InvalidTransitionError(DomainError):
    """Lifecycle operation not legal from the interview's current status."""

    code = "INVALID_TRANSITION"

    def __init__(
        self,
        current_status: str,
        operation: str,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        ctx.update({"current_status": current_status, "operation": operation})
        super().__init__(
            f"Cannot {operation.replace('_', ' ')} interview with status {current_status}",
            ctx,
        )
        self.current_status = current_status
        self.operation = operation


class ConflictError(DomainError):
    """Requested slot collides with an existing active interview."""

    code = "CONFLICT"


class ActiveInterviewExistsError(ConflictError):
    """An active interview already exists for the application and stage."""

    code = "ACTIVE_INTERVIEW_EXISTS"


class ExternalServiceError(DomainError):
    """External service (calendar, notifications) failed."""

    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        service: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        if service:
            ctx["service"] = service
        super().__init__(message, ctx)


class DatabaseError(DomainError):
    """Storage layer failure surfaced through service_boundary."""

    code = "DATABASE_ERROR"


def service_boundary(
    func: Callable[P, Awaitable[T]],
) -> Callable[P, Awaitable[T]]:
    """
    Re-raise driver and HTTP client failures from a scheduling operation as DomainErrors.

    asyncpg errors become DatabaseError, aiohttp errors become
    ExternalServiceError, and anything else unexpected becomes a plain
    DomainError. DomainErrors raised inside pass through untouched.
    """
    name = func.__name__

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except DomainError:
            raise
        except asyncpg.PostgresError as e:
            logger.error("scheduling_database_error", function=name, error=str(e))
            raise DatabaseError(str(e), context={"function": name}) from e
        except aiohttp.ClientError as e:
            logger.error("scheduling_upstream_error", function=name, error=str(e))
            raise ExternalServiceError(str(e), context={"function": name}) from e
        except Exception as e:
            logger.exception("scheduling_unexpected_error", function=name)
            raise DomainError(str(e), context={"function": name, "type": type(e).__name__}) from e

    return wrapper
