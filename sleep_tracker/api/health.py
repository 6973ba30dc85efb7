"""Liveness and database readiness probes."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sleep_tracker import __version__
from sleep_tracker.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "healthy", "version": __version__}


@router.get("/health/db")
def db_health_check(response: Response, db: Session = Depends(get_db)) -> dict[str, str]:
    """Report whether the sleep session store answers queries; 503 when it does not."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "unhealthy", "database": "unreachable"}
    return {
        "status": "healthy",
        "database": "connected",
        "dialect": db.get_bind().dialect.name,
    }
