"""Tests for demo data seeding."""

from datetime import date

from sqlalchemy import func, select

from sleep_tracker.models import SleepSession, User
from sleep_tracker.seed import DEMO_TIMEZONE, DEMO_USER_ID, SEEDED_NIGHTS, seed_demo_data


def count_sessions(db) -> int:
    return db.scalar(select(func.count()).select_from(SleepSession))


def test_seed_creates_demo_user_and_nights(db_session):
    created = seed_demo_data(db_session, today=date(2024, 2, 1))

    user = db_session.get(User, DEMO_USER_ID)
    assert user is not None
    assert user.timezone == DEMO_TIMEZONE

    cores = db_session.scalar(
        select(func.count()).select_from(SleepSession).where(SleepSession.type == "CORE")
    )
    assert cores == SEEDED_NIGHTS
    assert created == count_sessions(db_session)
    assert all(s.local_timezone == DEMO_TIMEZONE for s in db_session.scalars(select(SleepSession)))


def test_seed_is_idempotent(db_session):
    """Seeding twice, even a day later, only adds the newly covered night."""
    first = seed_demo_data(db_session, today=date(2024, 2, 1))
    again = seed_demo_data(db_session, today=date(2024, 2, 1))
    next_day = seed_demo_data(db_session, today=date(2024, 2, 2))

    assert first > 0
    assert again == 0
    assert 1 <= next_day <= 2
    assert count_sessions(db_session) == first + next_day
