"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sleep_tracker import __version__
from sleep_tracker.api import (
    health_router,
    insights_router,
    sleep_sessions_router,
    users_router,
)
from sleep_tracker.api.errors import register_error_handlers
from sleep_tracker.config import get_settings
from sleep_tracker.seed import run_seed

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def run_migrations() -> None:
    """Run alembic migrations on startup."""
    if settings.is_testing:
        logger.info("Skipping migrations in test mode")
        return

    try:
        alembic_cfg = Config("alembic.ini")
        alembic_cfg.attributes["configure_logger"] = False
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    run_migrations()
    if settings.seed:
        run_seed()
    yield


app = FastAPI(
    title="Sleep Tracker API",
    description="Sleep session tracking with chronotype, metrics and narrative insights",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(sleep_sessions_router)
app.include_router(insights_router)


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Sleep Tracker API",
        "version": __version__,
        "docs": "/docs",
    }
