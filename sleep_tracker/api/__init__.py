"""API routers."""

from sleep_tracker.api.health import router as health_router
from sleep_tracker.api.insights import router as insights_router
from sleep_tracker.api.sleep_sessions import router as sleep_sessions_router
from sleep_tracker.api.users import router as users_router

__all__ = [
    "health_router",
    "insights_router",
    "sleep_sessions_router",
    "users_router",
]
