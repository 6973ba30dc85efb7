"""Admission of new and edited sleep sessions.

Every create or update passes through :class:`SessionAdmissionEngine`, which
normalises timestamps, resolves idempotency keys, enforces the no-overlap
rule and persists the result. Outcomes are returned as tagged values so the
caller cannot lose the "already existed" signal:

    Created(session) | AlreadyExisted(session) | Rejected(error)   # create
    Updated(session) | Rejected(error)                             # update

Overlap is checked twice. The pre-check reads existing rows; the database
constraint is the final arbiter for requests that race past the pre-check,
and its violation is reported exactly like a failed pre-check. The engine
commits once, at the very end, so an aborted request leaves nothing behind.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy.orm import Session

from sleep_tracker.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    SleepTrackerError,
)
from sleep_tracker.models.sleep_session import SleepSession, SleepType
from sleep_tracker.repositories.sleep_sessions import (
    DuplicateClientRequestError,
    OverlapViolationError,
    SleepSessionRepository,
)
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.schemas.sleep_session import SleepSessionCreate, SleepSessionUpdate
from sleep_tracker.services.idempotency import IdempotencyResolver
from sleep_tracker.services.overlap import OverlapOracle
from sleep_tracker.services.time_normalizer import TimeNormalizer, get_time_normalizer, to_utc

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = "Overlapping sleep period detected"


@dataclass(frozen=True)
class Created:
    session: SleepSession


@dataclass(frozen=True)
class AlreadyExisted:
    session: SleepSession


@dataclass(frozen=True)
class Updated:
    session: SleepSession


@dataclass(frozen=True)
class Rejected:
    error: SleepTrackerError


CreateOutcome = Union[Created, AlreadyExisted, Rejected]
UpdateOutcome = Union[Updated, Rejected]


def validate_session_fields(
    start_at: datetime, end_at: datetime, quality: int, sleep_type: SleepType | str
) -> InvalidInputError | None:
    """Return the first business-rule violation, if any."""
    if not end_at > start_at:
        return InvalidInputError("end_at must be after start_at", field="end_at")
    if not 1 <= quality <= 10:
        return InvalidInputError("quality must be between 1 and 10", field="quality")
    try:
        SleepType(sleep_type)
    except ValueError:
        return InvalidInputError("type must be one of: CORE, NAP", field="type")
    return None


class SessionAdmissionEngine:
    """Decides and applies the outcome of sleep session writes for one DB session."""

    def __init__(self, db: Session, normalizer: TimeNormalizer | None = None) -> None:
        self.db = db
        self.normalizer = normalizer or get_time_normalizer()
        self.users = UserRepository(db)
        self.sessions = SleepSessionRepository(db)
        self.idempotency = IdempotencyResolver(self.sessions)
        self.overlap = OverlapOracle(self.sessions)

    def create(self, user_id: uuid.UUID, request: SleepSessionCreate) -> CreateOutcome:
        # Users always carry a zone, so None means the user does not exist
        owner_zone = self.users.get_default_timezone(user_id)
        if owner_zone is None:
            return Rejected(NotFoundError("User not found"))

        times = self.normalizer.normalize(
            request.start_at, request.end_at, request.local_timezone, owner_zone
        )
        client_request_id = request.client_request_id or None

        existing = self.idempotency.resolve(user_id, client_request_id)
        if existing is not None:
            logger.info(f"Replayed client request {client_request_id!r} for user {user_id}")
            return AlreadyExisted(existing)

        error = validate_session_fields(times.start_at, times.end_at, request.quality, request.type)
        if error is not None:
            return Rejected(error)

        if self.overlap.has_overlap(user_id, times.start_at, times.end_at):
            logger.info(f"Rejected overlapping session for user {user_id}")
            return Rejected(ConflictError(OVERLAP_MESSAGE))

        session = SleepSession(
            user_id=user_id,
            start_at=times.start_at,
            end_at=times.end_at,
            quality=request.quality,
            type=SleepType(request.type).value,
            local_timezone=times.local_timezone,
            client_request_id=client_request_id,
        )

        try:
            self.sessions.create(session)
        except OverlapViolationError:
            return Rejected(ConflictError(OVERLAP_MESSAGE))
        except DuplicateClientRequestError:
            # Lost a race on the same key: the winner's row is the answer
            existing = self.idempotency.resolve(user_id, client_request_id)
            if existing is None:
                raise
            logger.info(f"Concurrent replay of {client_request_id!r} resolved for user {user_id}")
            return AlreadyExisted(existing)

        self.db.commit()
        logger.info(f"Created sleep session {session.id} for user {user_id}")
        return Created(session)

    def update(
        self, user_id: uuid.UUID, session_id: uuid.UUID, changes: SleepSessionUpdate
    ) -> UpdateOutcome:
        if not self.users.exists(user_id):
            return Rejected(NotFoundError("User not found"))

        session = self.sessions.get_by_id(session_id)
        # Someone else's session is reported exactly like a missing one
        if session is None or session.user_id != user_id:
            return Rejected(NotFoundError("Sleep session not found"))

        fields = changes.model_dump(exclude_unset=True)
        start_at = session.start_at
        end_at = session.end_at
        quality = session.quality
        sleep_type = session.type
        local_timezone = session.local_timezone

        if fields.get("start_at") is not None:
            start_at = to_utc(fields["start_at"])
        if fields.get("end_at") is not None:
            end_at = to_utc(fields["end_at"])
        if fields.get("quality") is not None:
            quality = fields["quality"]
        if fields.get("type") is not None:
            sleep_type = SleepType(fields["type"]).value
        if fields.get("local_timezone"):
            local_timezone = fields["local_timezone"]

        error = validate_session_fields(start_at, end_at, quality, sleep_type)
        if error is not None:
            return Rejected(error)

        if self.overlap.has_overlap(user_id, start_at, end_at, exclude_session_id=session.id):
            logger.info(f"Rejected overlapping update of session {session.id}")
            return Rejected(ConflictError(OVERLAP_MESSAGE))

        try:
            self.sessions.update(
                session,
                {
                    "start_at": start_at,
                    "end_at": end_at,
                    "quality": quality,
                    "type": sleep_type,
                    "local_timezone": local_timezone,
                },
            )
        except OverlapViolationError:
            return Rejected(ConflictError(OVERLAP_MESSAGE))

        self.db.commit()
        logger.info(f"Updated sleep session {session.id} for user {user_id}")
        return Updated(session)
