"""SQLAlchemy ORM models."""

from sleep_tracker.models.sleep_session import SleepSession, SleepType
from sleep_tracker.models.user import User

__all__ = [
    "SleepSession",
    "SleepType",
    "User",
]
