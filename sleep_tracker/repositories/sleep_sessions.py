"""Persistence port for sleep sessions.

Writes run inside a SAVEPOINT so that a constraint violation raised by the
database at flush time leaves the surrounding transaction usable. Violations
are translated into the typed errors below; anything else propagates.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sleep_tracker.models.sleep_session import (
    CLIENT_REQUEST_INDEX,
    OVERLAP_CONSTRAINT,
    SleepSession,
)
from sleep_tracker.pagination import Cursor

logger = logging.getLogger(__name__)


class ConstraintViolationError(Exception):
    """A write was refused by a database constraint."""

    constraint: str = ""

    def __init__(self, original: IntegrityError) -> None:
        self.original = original
        super().__init__(f"{self.constraint} violated")


class OverlapViolationError(ConstraintViolationError):
    constraint = OVERLAP_CONSTRAINT


class DuplicateClientRequestError(ConstraintViolationError):
    constraint = CLIENT_REQUEST_INDEX


def _translate_integrity_error(exc: IntegrityError) -> ConstraintViolationError | None:
    message = str(exc.orig)
    if OVERLAP_CONSTRAINT in message:
        return OverlapViolationError(exc)
    # sqlite reports the columns, postgres reports the index name
    if CLIENT_REQUEST_INDEX in message or "client_request_id" in message:
        return DuplicateClientRequestError(exc)
    return None


class SleepSessionRepository:
    """Data access for sleep sessions."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, session: SleepSession) -> SleepSession:
        try:
            with self.db.begin_nested():
                self.db.add(session)
        except IntegrityError as e:
            violation = _translate_integrity_error(e)
            if violation is None:
                raise
            logger.warning(f"Insert rejected by {violation.constraint} for user {session.user_id}")
            raise violation from e
        return session

    def update(self, session: SleepSession, values: dict[str, Any]) -> SleepSession:
        try:
            with self.db.begin_nested():
                for field, value in values.items():
                    setattr(session, field, value)
        except IntegrityError as e:
            violation = _translate_integrity_error(e)
            if violation is None:
                raise
            logger.warning(f"Update of session {session.id} rejected by {violation.constraint}")
            raise violation from e
        return session

    def get_by_id(self, session_id: uuid.UUID) -> SleepSession | None:
        return self.db.get(SleepSession, session_id)

    def find_by_client_request_id(
        self, user_id: uuid.UUID, client_request_id: str
    ) -> SleepSession | None:
        return self.db.scalars(
            select(SleepSession).where(
                SleepSession.user_id == user_id,
                SleepSession.client_request_id == client_request_id,
            )
        ).first()

    def exists_overlap(
        self,
        user_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        """True if any session of ``user_id`` intersects ``[start_at, end_at)``."""
        conditions = [
            SleepSession.user_id == user_id,
            SleepSession.start_at < end_at,
            SleepSession.end_at > start_at,
        ]
        if exclude_id is not None:
            conditions.append(SleepSession.id != exclude_id)
        return bool(self.db.scalar(select(exists().where(*conditions))))

    def list_by_owner(
        self,
        user_id: uuid.UUID,
        start_from: datetime | None = None,
        start_to: datetime | None = None,
        cursor: Cursor | None = None,
        limit: int = 20,
    ) -> list[SleepSession]:
        """Newest-first page of sessions; returns up to ``limit`` rows."""
        query = select(SleepSession).where(SleepSession.user_id == user_id)

        if start_from is not None:
            query = query.where(SleepSession.start_at >= start_from)
        if start_to is not None:
            query = query.where(SleepSession.start_at <= start_to)

        if cursor is not None:
            query = query.where(
                or_(
                    SleepSession.start_at < cursor.start_at,
                    and_(
                        SleepSession.start_at == cursor.start_at,
                        SleepSession.id < cursor.id,
                    ),
                )
            )

        query = query.order_by(SleepSession.start_at.desc(), SleepSession.id.desc()).limit(limit)
        return list(self.db.scalars(query).all())

    def list_by_end_range(
        self, user_id: uuid.UUID, end_from: datetime, end_to: datetime
    ) -> list[SleepSession]:
        """Sessions whose ``end_at`` falls within ``[end_from, end_to]``, oldest first."""
        return list(
            self.db.scalars(
                select(SleepSession)
                .where(
                    SleepSession.user_id == user_id,
                    SleepSession.end_at >= end_from,
                    SleepSession.end_at <= end_to,
                )
                .order_by(SleepSession.start_at.asc())
            ).all()
        )
