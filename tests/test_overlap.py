"""Tests for the half-open overlap predicate and the overlap oracle."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from sleep_tracker.models import SleepSession
from sleep_tracker.repositories import SleepSessionRepository
from sleep_tracker.services.overlap import OverlapOracle, intervals_overlap, sessions_overlap

BASE = datetime(2024, 1, 15, 22, 0, tzinfo=timezone.utc)


def hours(n: float) -> datetime:
    return BASE + timedelta(hours=n)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((0, 8), (1, 2), True),  # contained
        ((0, 8), (-1, 1), True),  # straddles start
        ((0, 8), (7, 9), True),  # straddles end
        ((0, 8), (0, 8), True),  # identical
        ((0, 8), (8, 10), False),  # touching end
        ((0, 8), (-2, 0), False),  # touching start
        ((0, 8), (9, 10), False),  # disjoint
    ],
)
def test_intervals_overlap_is_half_open_and_symmetric(a, b, expected):
    """Overlap is [a, b) intersection, and order of arguments never matters."""
    a_start, a_end = hours(a[0]), hours(a[1])
    b_start, b_end = hours(b[0]), hours(b[1])
    assert intervals_overlap(a_start, a_end, b_start, b_end) is expected
    assert intervals_overlap(b_start, b_end, a_start, a_end) is expected


def test_sessions_of_different_users_never_overlap():
    """Sessions belonging to different users do not conflict."""
    a = SleepSession(user_id=uuid.uuid4(), start_at=hours(0), end_at=hours(8))
    b = SleepSession(user_id=uuid.uuid4(), start_at=hours(1), end_at=hours(2))
    same_owner = SleepSession(user_id=a.user_id, start_at=hours(1), end_at=hours(2))

    assert not sessions_overlap(a, b)
    assert sessions_overlap(a, same_owner)
    assert sessions_overlap(same_owner, a)


def test_oracle_checks_stored_sessions(db_session, make_user):
    """The oracle finds stored intersections and honours the exclusion id."""
    owner = make_user()
    stored = SleepSession(
        user_id=owner.id, start_at=hours(0), end_at=hours(8), quality=7, type="CORE"
    )
    db_session.add(stored)
    db_session.commit()

    oracle = OverlapOracle(SleepSessionRepository(db_session))
    assert oracle.has_overlap(owner.id, hours(-1), hours(1))
    assert not oracle.has_overlap(owner.id, hours(8), hours(9))
    assert not oracle.has_overlap(owner.id, hours(-1), hours(0))
    assert not oracle.has_overlap(owner.id, hours(1), hours(2), exclude_session_id=stored.id)
    assert not oracle.has_overlap(uuid.uuid4(), hours(1), hours(2))
