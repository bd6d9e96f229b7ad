"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException

from interview_scheduling.api.errors import setup_exception_handlers
from interview_scheduling.api.interviews import router as interviews_router
from interview_scheduling.core.database import db
from interview_scheduling.core.logging import logger, setup_logging
from interview_scheduling.middleware import LoggingMiddleware, RequestIDMiddleware, setup_cors


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database pool for the lifetime of the app."""
    logger.info("application_starting")
    await db.connect()
    logger.info("application_ready")

    yield

    logger.info("application_shutting_down")
    await db.disconnect()
    logger.info("application_stopped")


app = FastAPI(
    title="Interview Scheduling",
    description="Automatic interview slot allocation and lifecycle management",
    version="1.0.0",
    lifespan=lifespan,
)

# Starlette runs the last added middleware first
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
setup_cors(app)
setup_exception_handlers(app)

app.include_router(interviews_router)


def _pool_stats() -> dict[str, int]:
    if db.pool is None:
        raise RuntimeError("Database pool not initialized")
    size = db.pool.get_size()
    idle = db.pool.get_idle_size()
    return {"size": size, "free": idle, "in_use": size - idle}


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """Report database reachability and connection pool usage; 503 when unreachable."""
    try:
        await db.fetchval("SELECT 1")
        pool = _pool_stats()
    except Exception as e:
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail="Database unavailable") from e

    return {"status": "healthy", "database": "connected", "pool": pool}


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "Interview Scheduling Engine"}
