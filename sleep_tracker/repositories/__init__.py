"""Data access layer."""

from sleep_tracker.repositories.sleep_sessions import (
    ConstraintViolationError,
    DuplicateClientRequestError,
    OverlapViolationError,
    SleepSessionRepository,
)
from sleep_tracker.repositories.users import UserRepository

__all__ = [
    "ConstraintViolationError",
    "DuplicateClientRequestError",
    "OverlapViolationError",
    "SleepSessionRepository",
    "UserRepository",
]
