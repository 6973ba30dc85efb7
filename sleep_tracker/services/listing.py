"""Newest-first listing of a user's sleep sessions."""

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from sleep_tracker.errors import InvalidInputError, NotFoundError
from sleep_tracker.models.sleep_session import SleepSession
from sleep_tracker.pagination import Cursor, decode_cursor, normalize_limit
from sleep_tracker.repositories.sleep_sessions import SleepSessionRepository
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.services.time_normalizer import to_utc


@dataclass
class SessionFilter:
    start_from: datetime | None = None
    start_to: datetime | None = None
    limit: int | None = None
    cursor: str | None = None


@dataclass
class SessionPage:
    sessions: list[SleepSession]
    has_more: bool
    next_cursor: str | None


def list_sessions(db: Session, user_id: uuid.UUID, filters: SessionFilter) -> SessionPage:
    """Return one page of sessions ordered by ``start_at DESC, id DESC``.

    Raises ``NotFoundError`` for an unknown user, ``InvalidInputError`` when
    ``from`` is after ``to`` and ``CursorDecodeError`` for a malformed cursor.
    """
    if not UserRepository(db).exists(user_id):
        raise NotFoundError("User not found")

    start_from = to_utc(filters.start_from) if filters.start_from else None
    start_to = to_utc(filters.start_to) if filters.start_to else None
    if start_from and start_to and start_from > start_to:
        raise InvalidInputError("from must be earlier than or equal to to", field="from")

    cursor = decode_cursor(filters.cursor)
    limit = normalize_limit(filters.limit)

    # One extra row tells us whether another page exists
    rows = SleepSessionRepository(db).list_by_owner(
        user_id, start_from=start_from, start_to=start_to, cursor=cursor, limit=limit + 1
    )
    has_more = len(rows) > limit
    rows = rows[:limit]

    next_cursor = None
    if has_more and rows:
        last = rows[-1]
        next_cursor = Cursor(id=last.id, start_at=last.start_at).encode()

    return SessionPage(sessions=rows, has_more=has_more, next_cursor=next_cursor)
