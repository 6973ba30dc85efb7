"""Narrative sleep insights built from chronotype and window metrics."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from sleep_tracker.config import AppConfig, get_app_config
from sleep_tracker.errors import NotFoundError
from sleep_tracker.repositories.sleep_sessions import SleepSessionRepository
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.schemas.insights import (
    InsightsContext,
    InsightsMetrics,
    InsightsResponse,
    WindowMetrics,
)
from sleep_tracker.services.chronotype import ChronotypeService
from sleep_tracker.services.llm import LLMService
from sleep_tracker.services.metrics import MetricsService

logger = logging.getLogger(__name__)

LAST_NIGHT_LOOKBACK_DAYS = 7


class InsightsService:
    """Gathers history, recent and last-night metrics and asks the LLM to explain them."""

    def __init__(self, db: Session, llm: LLMService, app_config: AppConfig | None = None) -> None:
        self.db = db
        self.llm = llm
        self.app_config = app_config or get_app_config()
        self.analytics = self.app_config.analytics
        self.chronotype = ChronotypeService(db, app_config=self.app_config)
        self.metrics = MetricsService(db, app_config=self.app_config)
        self.sessions = SleepSessionRepository(db)
        self.users = UserRepository(db)

    def build_context(self, user_id: uuid.UUID, now: datetime | None = None) -> InsightsContext:
        if not self.users.exists(user_id):
            raise NotFoundError("User not found")

        now = now or datetime.now(timezone.utc)
        history_days = self.analytics["history_window_days"]
        recent_days = self.analytics["recent_window_days"]

        return InsightsContext(
            chronotype=self.chronotype.compute(user_id, window_days=history_days, now=now),
            history=self.metrics.compute_window(user_id, now - timedelta(days=history_days), now),
            recent=self.metrics.compute_window(user_id, now - timedelta(days=recent_days), now),
            last_night=self.last_night(user_id, now),
        )

    def last_night(self, user_id: uuid.UUID, now: datetime) -> WindowMetrics:
        """Metrics for the most recent UTC day, within the last week, that has a session ending on it."""
        today = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        for days_back in range(LAST_NIGHT_LOOKBACK_DAYS):
            day_start = today - timedelta(days=days_back)
            day_end = day_start + timedelta(days=1)
            if self.sessions.list_by_end_range(user_id, day_start, day_end):
                return self.metrics.compute_window(user_id, day_start, day_end)
        return self.metrics.empty_window(today, today + timedelta(days=1))

    async def generate(self, user_id: uuid.UUID, now: datetime | None = None) -> InsightsResponse:
        context = self.build_context(user_id, now=now)
        logger.info(f"Generating sleep insights for user {user_id}")
        output = await self.llm.generate_insights(context)
        return InsightsResponse(
            chronotype=context.chronotype,
            metrics=InsightsMetrics(
                history=context.history,
                recent=context.recent,
                last_night=context.last_night,
            ),
            insights=output,
        )
