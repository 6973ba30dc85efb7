"""Rolling sleep metrics over a time window."""

import logging
import math
import statistics
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from sleep_tracker.config import AppConfig, get_app_config
from sleep_tracker.errors import NotFoundError
from sleep_tracker.models.sleep_session import SleepSession
from sleep_tracker.repositories.sleep_sessions import SleepSessionRepository
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.schemas.insights import (
    DailyOverallMetrics,
    DerivedScores,
    DescriptiveStats,
    MetricsResponse,
    MetricsWindow,
    PerSleepMetrics,
    WindowMetrics,
)
from sleep_tracker.services.time_normalizer import TimeNormalizer, elapsed, get_time_normalizer

logger = logging.getLogger(__name__)


def round_half_up(value: float, places: int = 2) -> float:
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def compute_stats(values: list[float]) -> DescriptiveStats:
    """Mean, sample standard deviation, min and max, rounded to 2 places."""
    if not values:
        return DescriptiveStats()
    std = statistics.stdev(values) if len(values) > 1 else 0.0
    return DescriptiveStats(
        avg=round_half_up(statistics.fmean(values)),
        std=round_half_up(std),
        min=round_half_up(min(values)),
        max=round_half_up(max(values)),
    )


@dataclass
class SleepData:
    duration_hours: float
    bedtime_minutes: int
    quality: int
    local_date: str  # local date of end_at, the day the sleep belongs to


class MetricsService:
    """Per-sleep, per-day and derived score metrics for a user."""

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

    @property
    def target_hours(self) -> float:
        return float(self.analytics["target_hours"])

    @property
    def min_duration_hours(self) -> float:
        return self.analytics["min_duration_minutes"] / 60.0

    def compute(
        self, user_id: uuid.UUID, window_days: int | None = None, now: datetime | None = None
    ) -> MetricsResponse:
        if not self.users.exists(user_id):
            raise NotFoundError("User not found")

        window_days = window_days or self.analytics["metrics_window_days"]
        now = now or datetime.now(timezone.utc)
        window = self.compute_window(user_id, now - timedelta(days=window_days), now)
        return MetricsResponse(
            window=MetricsWindow(from_=window.from_, to=window.to),
            per_sleep=window.per_sleep,
            daily_overall=window.daily_overall,
            scores=window.scores,
        )

    def compute_window(
        self, user_id: uuid.UUID, window_from: datetime, window_to: datetime
    ) -> WindowMetrics:
        """Metrics for sessions ending within ``[window_from, window_to]``."""
        sessions = self.sessions.list_by_end_range(user_id, window_from, window_to)
        data = [self._extract(session) for session in sessions]

        per_sleep = self._per_sleep(data)
        daily_overall = self._daily_overall(data)
        logger.debug(
            f"Metrics for user {user_id} {window_from.isoformat()}..{window_to.isoformat()}: "
            f"{len(sessions)} sessions"
        )
        return WindowMetrics(
            from_=window_from,
            to=window_to,
            per_sleep=per_sleep,
            daily_overall=daily_overall,
            scores=self._scores(per_sleep, daily_overall),
        )

    def empty_window(self, window_from: datetime, window_to: datetime) -> WindowMetrics:
        return WindowMetrics(
            from_=window_from,
            to=window_to,
            daily_overall=DailyOverallMetrics(target_hours=self.target_hours),
        )

    def _extract(self, session: SleepSession) -> SleepData:
        start_local = self.normalizer.to_local(session.start_at, session.local_timezone)
        end_local = self.normalizer.to_local(session.end_at, session.local_timezone)
        return SleepData(
            duration_hours=elapsed(session.start_at, session.end_at).total_seconds() / 3600.0,
            bedtime_minutes=start_local.hour * 60 + start_local.minute,
            quality=session.quality,
            local_date=end_local.date().isoformat(),
        )

    def _per_sleep(self, data: list[SleepData]) -> PerSleepMetrics:
        usable = [d for d in data if d.duration_hours >= self.min_duration_hours]
        if not usable:
            return PerSleepMetrics()
        return PerSleepMetrics(
            duration=compute_stats([d.duration_hours for d in usable]),
            quality=compute_stats([float(d.quality) for d in usable]),
            bedtime=compute_stats([float(d.bedtime_minutes) for d in usable]),
            sleep_count=len(usable),
        )

    def _daily_overall(self, data: list[SleepData]) -> DailyOverallMetrics:
        # Naps count here, short or not
        totals: dict[str, float] = defaultdict(float)
        for d in data:
            totals[d.local_date] += d.duration_hours

        result = DailyOverallMetrics(target_hours=self.target_hours)
        if not totals:
            return result

        values = list(totals.values())
        meeting = sum(1 for total in values if total >= self.target_hours)
        result.days_count = len(values)
        result.total_daily_hours = compute_stats(values)
        result.days_meeting_target = meeting
        result.daily_sufficiency_score = round_half_up(meeting / len(values) * 100, 1)
        return result

    def _scores(self, per_sleep: PerSleepMetrics, daily: DailyOverallMetrics) -> DerivedScores:
        scores = DerivedScores()
        if per_sleep.sleep_count > 0:
            # Bedtime std of 0..120 minutes maps to 100..0
            bedtime_std = min(per_sleep.bedtime.std, 120.0)
            scores.consistency_score = max(round_half_up((1 - bedtime_std / 120) * 100, 1), 0.0)

            # Average duration of 5..9 hours maps to 0..100
            avg = per_sleep.duration.avg
            if avg < 5:
                scores.sufficiency_score = 0.0
            elif avg >= 9:
                scores.sufficiency_score = 100.0
            else:
                scores.sufficiency_score = round_half_up((avg - 5) / 4 * 100, 1)

        scores.overall_sleep_score = round_half_up(
            scores.consistency_score * 0.4
            + scores.sufficiency_score * 0.3
            + daily.daily_sufficiency_score * 0.3,
            1,
        )
        return scores
