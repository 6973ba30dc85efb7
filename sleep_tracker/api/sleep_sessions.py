"""Sleep session API endpoints."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from sleep_tracker.database import get_db
from sleep_tracker.schemas.sleep_session import (
    Pagination,
    SleepSession,
    SleepSessionCreate,
    SleepSessionList,
    SleepSessionUpdate,
)
from sleep_tracker.services.admission import AlreadyExisted, Rejected, SessionAdmissionEngine
from sleep_tracker.services.listing import SessionFilter, list_sessions


router = APIRouter(prefix="/api/v1/users/{user_id}/sleep-sessions", tags=["sleep-sessions"])


@router.post("/", response_model=SleepSession, status_code=201)
def create_sleep_session(
    user_id: uuid.UUID,
    payload: SleepSessionCreate,
    response: Response,
    db: Session = Depends(get_db),
) -> SleepSession:
    """Record a sleep session.

    Returns 201 for a new session. Replaying a ``client_request_id`` the user
    has already used returns the stored session with 200 instead.
    """
    outcome = SessionAdmissionEngine(db).create(user_id, payload)
    if isinstance(outcome, Rejected):
        raise outcome.error
    if isinstance(outcome, AlreadyExisted):
        response.status_code = 200
    return SleepSession.from_model(outcome.session)


@router.put("/{session_id}", response_model=SleepSession)
def update_sleep_session(
    user_id: uuid.UUID,
    session_id: uuid.UUID,
    payload: SleepSessionUpdate,
    db: Session = Depends(get_db),
) -> SleepSession:
    """Partially update a sleep session; omitted fields keep their values."""
    outcome = SessionAdmissionEngine(db).update(user_id, session_id, payload)
    if isinstance(outcome, Rejected):
        raise outcome.error
    return SleepSession.from_model(outcome.session)


@router.get("/", response_model=SleepSessionList)
def list_sleep_sessions(
    user_id: uuid.UUID,
    start_from: datetime | None = Query(default=None, alias="from"),
    start_to: datetime | None = Query(default=None, alias="to"),
    limit: int | None = Query(default=None, ge=1),
    cursor: str | None = None,
    db: Session = Depends(get_db),
) -> SleepSessionList:
    """List sleep sessions newest first, filtered on ``start_at``."""
    page = list_sessions(
        db,
        user_id,
        SessionFilter(start_from=start_from, start_to=start_to, limit=limit, cursor=cursor),
    )
    return SleepSessionList(
        data=[SleepSession.from_model(session) for session in page.sessions],
        pagination=Pagination(next_cursor=page.next_cursor, has_more=page.has_more),
    )
