"""No-overlap policy for a user's sleep sessions.

Intervals are half-open: sessions that merely touch at an endpoint do not
overlap. The policy ignores session type, so CORE and NAP sessions all
exclude each other.
"""

import uuid
from datetime import datetime

from sleep_tracker.models.sleep_session import SleepSession
from sleep_tracker.repositories.sleep_sessions import SleepSessionRepository


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """``[a_start, a_end)`` and ``[b_start, b_end)`` intersect."""
    return a_start < b_end and a_end > b_start


def sessions_overlap(a: SleepSession, b: SleepSession) -> bool:
    return a.user_id == b.user_id and intervals_overlap(a.start_at, a.end_at, b.start_at, b.end_at)


class OverlapOracle:
    """Decides whether a candidate interval may be admitted for a user."""

    def __init__(self, sessions: SleepSessionRepository) -> None:
        self.sessions = sessions

    def has_overlap(
        self,
        user_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        exclude_session_id: uuid.UUID | None = None,
    ) -> bool:
        return self.sessions.exists_overlap(user_id, start_at, end_at, exclude_id=exclude_session_id)
