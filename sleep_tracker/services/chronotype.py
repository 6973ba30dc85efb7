"""Chronotype classification from recent sleep sessions."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from sleep_tracker.config import AppConfig, get_app_config
from sleep_tracker.errors import NotFoundError
from sleep_tracker.repositories.sleep_sessions import SleepSessionRepository
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.schemas.insights import Chronotype, ChronotypeResult
from sleep_tracker.services.time_normalizer import TimeNormalizer, elapsed, get_time_normalizer

logger = logging.getLogger(__name__)

# Mid-sleep thresholds in minutes after local midnight
EARLY_BIRD_THRESHOLD = 150  # before 02:30
INTERMEDIATE_THRESHOLD = 270  # before 04:30


def median(values: list[int]) -> int:
    """Integer median; the mean of the middle pair is truncated for even counts."""
    if not values:
        return 0
    ordered = sorted(values)
    n = len(ordered)
    if n % 2 == 0:
        return (ordered[n // 2 - 1] + ordered[n // 2]) // 2
    return ordered[n // 2]


def minutes_to_time_string(minutes: int) -> str:
    minutes = minutes % 1440
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def classify(mid_minutes: int) -> Chronotype:
    if mid_minutes < EARLY_BIRD_THRESHOLD:
        return Chronotype.EARLY_BIRD
    if mid_minutes < INTERMEDIATE_THRESHOLD:
        return Chronotype.INTERMEDIATE
    return Chronotype.NIGHT_OWL


class ChronotypeService:
    """Computes a user's chronotype from the median local mid-sleep time."""

    def __init__(
        self,
        db: Session,
        normalizer: TimeNormalizer | None = None,
        app_config: AppConfig | None = None,
    ) -> None:
        self.db = db
        self.normalizer = normalizer or get_time_normalizer()
        self.analytics = (app_config or get_app_config()).analytics
        self.sessions = SleepSessionRepository(db)
        self.users = UserRepository(db)

    def compute(
        self,
        user_id: uuid.UUID,
        window_days: int | None = None,
        min_sleeps: int | None = None,
        now: datetime | None = None,
    ) -> ChronotypeResult:
        if not self.users.exists(user_id):
            raise NotFoundError("User not found")

        window_days = window_days or self.analytics["chronotype_window_days"]
        min_sleeps = min_sleeps or self.analytics["chronotype_min_sleeps"]
        min_duration = timedelta(minutes=self.analytics["min_duration_minutes"])

        now = now or datetime.now(timezone.utc)
        window_start = now - timedelta(days=window_days)
        sessions = self.sessions.list_by_end_range(user_id, window_start, now)

        mid_minutes: list[int] = []
        for session in sessions:
            duration = elapsed(session.start_at, session.end_at)
            if duration < min_duration:
                continue
            half = timedelta(minutes=int(duration.total_seconds() / 60 / 2))
            mid_local = self.normalizer.to_local(session.start_at + half, session.local_timezone)
            mid_minutes.append(mid_local.hour * 60 + mid_local.minute)

        logger.debug(
            f"Chronotype for user {user_id}: {len(mid_minutes)} of {len(sessions)} sessions usable"
        )

        if len(mid_minutes) < min_sleeps:
            return ChronotypeResult(
                chronotype=Chronotype.UNKNOWN,
                window_days=window_days,
                sleeps_used=len(mid_minutes),
            )

        mid = median(mid_minutes)
        return ChronotypeResult(
            chronotype=classify(mid),
            mid_sleep_local_time=minutes_to_time_string(mid),
            mid_sleep_minutes_after_midnight=mid,
            window_days=window_days,
            sleeps_used=len(mid_minutes),
        )
