"""Demo data for local development.

Enabled with ``SEED=true``. Creates one demo user and about a month of
nightly CORE sleep plus occasional afternoon NAPs. Every session goes through
the admission engine with a date-based ``client_request_id``, so running the
seeder again (even on a later day) only adds the missing nights.
"""

import logging
import random
import uuid
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from sleep_tracker.database import SessionLocal
from sleep_tracker.models.sleep_session import SleepType
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.schemas.sleep_session import SleepSessionCreate
from sleep_tracker.services.admission import Created, Rejected, SessionAdmissionEngine

logger = logging.getLogger(__name__)

DEMO_USER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
DEMO_TIMEZONE = "Europe/Amsterdam"
SEEDED_NIGHTS = 30


def _night_requests(day: date, rng: random.Random) -> list[SleepSessionCreate]:
    bedtime = datetime.combine(day, time(22 + rng.randrange(2), rng.randrange(60)), timezone.utc)
    requests = [
        SleepSessionCreate(
            start_at=bedtime,
            end_at=bedtime + timedelta(hours=6 + rng.randrange(3)),
            quality=5 + rng.randrange(6),
            type=SleepType.CORE,
            client_request_id=f"seed-core-{day.isoformat()}",
        )
    ]
    if rng.random() < 0.5:
        nap_start = datetime.combine(
            day, time(13 + rng.randrange(3), rng.randrange(60)), timezone.utc
        )
        requests.append(
            SleepSessionCreate(
                start_at=nap_start,
                end_at=nap_start + timedelta(minutes=20 + rng.randrange(40)),
                quality=4 + rng.randrange(7),
                type=SleepType.NAP,
                client_request_id=f"seed-nap-{day.isoformat()}",
            )
        )
    return requests


def seed_demo_data(db: Session, today: date | None = None) -> int:
    """Seed the demo user; returns the number of sessions created."""
    users = UserRepository(db)
    if not users.exists(DEMO_USER_ID):
        users.create(timezone=DEMO_TIMEZONE, user_id=DEMO_USER_ID)
        db.commit()

    today = today or datetime.now(timezone.utc).date()
    engine = SessionAdmissionEngine(db)
    created = 0
    for days_back in range(1, SEEDED_NIGHTS + 1):
        day = today - timedelta(days=days_back)
        # Same day, same numbers: replays match what was stored before
        rng = random.Random(day.toordinal())
        for request in _night_requests(day, rng):
            outcome = engine.create(DEMO_USER_ID, request)
            if isinstance(outcome, Created):
                created += 1
            elif isinstance(outcome, Rejected):
                logger.warning(f"Skipped seed session {request.client_request_id}: {outcome.error}")

    logger.info(f"Seeded {created} sleep sessions for demo user {DEMO_USER_ID}")
    return created


def run_seed() -> None:
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
