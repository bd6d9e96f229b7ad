"""Request/response logging middleware."""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from structlog import get_logger

logger = get_logger()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request on arrival and once more with its outcome and duration."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        route = {"method": request.method, "path": request.url.path}
        started = time.perf_counter()

        logger.info(
            "request_started",
            **route,
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("request_failed", **route, error=str(e), duration_ms=_elapsed_ms(started))
            raise

        logger.info(
            "request_completed",
            **route,
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        return response
