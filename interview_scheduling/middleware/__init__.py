"""Middleware stack for the scheduling API: request IDs, access logs and CORS."""

from interview_scheduling.middleware.cors import setup_cors
from interview_scheduling.middleware.logging import LoggingMiddleware
from interview_scheduling.middleware.request_id import RequestIDMiddleware

__all__ = ["LoggingMiddleware", "RequestIDMiddleware", "setup_cors"]
