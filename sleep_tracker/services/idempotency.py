"""Per-user idempotency keys for session creation."""

import uuid

from sleep_tracker.models.sleep_session import SleepSession
from sleep_tracker.repositories.sleep_sessions import SleepSessionRepository


class IdempotencyResolver:
    """Finds the session a ``(user_id, client_request_id)`` pair already produced."""

    def __init__(self, sessions: SleepSessionRepository) -> None:
        self.sessions = sessions

    def resolve(self, user_id: uuid.UUID, client_request_id: str | None) -> SleepSession | None:
        if not client_request_id:
            return None
        return self.sessions.find_by_client_request_id(user_id, client_request_id)
