"""appforge API - FastAPI with SQLAlchemy.

Run: uvicorn appforge.api.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import time
import uuid

from fastapi import FastAPI, Request, status
import structlog

from .. import __version__
from ..logging_config import get_logger, setup_logging
from . import routers
from .database import engine, init_models

CORRELATION_HEADER = "X-Correlation-ID"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()
    await init_models()
    yield
    await engine.dispose()


app = FastAPI(
    title="appforge",
    description="Builds and deploys chat-described apps as isolated tenant services",
    version=__version__,
    lifespan=lifespan,
)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


@app.middleware("http")
async def correlation_middleware(request: Request, call_next):
    """Bind a correlation id to every event logged while serving the request."""
    correlation_id = request.headers.get(CORRELATION_HEADER) or f"req_{uuid.uuid4().hex[:8]}"
    started = time.perf_counter()

    with structlog.contextvars.bound_contextvars(
        correlation_id=correlation_id, method=request.method, path=request.url.path
    ):
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "http_request_exception",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
                exc_info=True,
            )
            raise

        failed = response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        log = logger.error if failed else logger.info
        log(
            "http_request_failed" if failed else "http_request",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )

    response.headers[CORRELATION_HEADER] = correlation_id
    return response


app.include_router(routers.health.router)
app.include_router(routers.projects.router, prefix="/api")
app.include_router(routers.conversation.router, prefix="/api")
