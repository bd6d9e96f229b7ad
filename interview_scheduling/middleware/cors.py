"""Cross-origin access for the recruiting frontends that call the scheduling API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_scheduling.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """Allow the recruiting frontends listed in FRONTEND_URL."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_urls,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
