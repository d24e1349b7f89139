"""
FastAPI application entrypoint for the Paycor sync service.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from paycor_sync.api.routes import router
from paycor_sync.core.config import get_settings
from paycor_sync.core.logging import configure_logging
from paycor_sync.database import create_schema, wait_for_database
from paycor_sync.dependencies import get_engine

logger = logging.getLogger(__name__)

PORT = 8080


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Check database connectivity before serving and release the pool after."""
    settings = get_settings()
    engine = get_engine()
    await wait_for_database(engine, retry_delay=settings.database.ping_retry_delay)
    if settings.database.create_schema:
        await create_schema(engine)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Paycor Sync",
        version="0.1.0",
        description="Logs in to Paycor, fetches the user record and stores it.",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


def run() -> None:
    """Console entry point: serve the app on the fixed port."""
    try:
        app = create_app()
    except ValidationError as exc:
        configure_logging()
        logger.critical(
            "Required environment variables not set (PAYCOR_CLIENT_ID, "
            "PAYCOR_CLIENT_SECRET, PAYCOR_REDIRECT_URL, POSTGRES_DSN):\n%s",
            exc,
        )
        sys.exit(1)

    logger.info("Server listening on port %s", PORT)
    uvicorn.run(app, host="0.0.0.0", port=PORT, log_config=None)


__all__ = ["PORT", "create_app", "lifespan", "run"]
