"""Pydantic schemas for request/response validation."""

from sleep_tracker.schemas.insights import (
    ChronotypeResult,
    InsightsResponse,
    MetricsResponse,
    WindowMetrics,
)
from sleep_tracker.schemas.problem import FieldError, Problem
from sleep_tracker.schemas.sleep_session import (
    SleepSession,
    SleepSessionCreate,
    SleepSessionList,
    SleepSessionUpdate,
)
from sleep_tracker.schemas.user import User, UserCreate

__all__ = [
    "ChronotypeResult",
    "FieldError",
    "InsightsResponse",
    "MetricsResponse",
    "Problem",
    "SleepSession",
    "SleepSessionCreate",
    "SleepSessionList",
    "SleepSessionUpdate",
    "User",
    "UserCreate",
    "WindowMetrics",
]
