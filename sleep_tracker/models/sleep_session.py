"""Sleep session model."""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum

from sqlalchemy import (
    DDL,
    CheckConstraint,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sleep_tracker.database import Base
from sleep_tracker.models.types import UTCDateTime

# Constraint names are matched when translating IntegrityError, keep them stable.
OVERLAP_CONSTRAINT = "ex_sleep_sessions_no_overlap"
CLIENT_REQUEST_INDEX = "uq_sleep_sessions_user_client_request_id"


class SleepType(str, Enum):
    """Category of a sleep session."""

    CORE = "CORE"
    NAP = "NAP"


class SleepSession(Base):
    """A recorded sleep interval, stored as UTC instants."""

    __tablename__ = "sleep_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    start_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    quality: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    # Presentation only; never consulted for overlap or duration
    local_timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    client_request_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="sleep_sessions")  # noqa: F821

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_sleep_sessions_end_after_start"),
        CheckConstraint("quality BETWEEN 1 AND 10", name="ck_sleep_sessions_quality_range"),
        CheckConstraint("type IN ('CORE', 'NAP')", name="ck_sleep_sessions_type"),
        Index(
            CLIENT_REQUEST_INDEX,
            "user_id",
            "client_request_id",
            unique=True,
        ),
    )

    @property
    def duration(self) -> timedelta:
        return self.end_at - self.start_at

    def __repr__(self) -> str:
        return (
            f"<SleepSession(id={self.id}, type='{self.type}', "
            f"start_at={self.start_at.isoformat()}, end_at={self.end_at.isoformat()})>"
        )


Index("idx_sleep_sessions_user_start", SleepSession.user_id, SleepSession.start_at.desc())


# Commit-time enforcement of the no-overlap rule. Mirrors the alembic migration so
# that metadata.create_all (tests, local sqlite) gets the same guarantee.
event.listen(
    SleepSession.__table__,
    "after_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    SleepSession.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE sleep_sessions ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist (user_id WITH =, tstzrange(start_at, end_at, '[)') WITH &&)"
    ).execute_if(dialect="postgresql"),
)
event.listen(
    SleepSession.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER trg_sleep_sessions_no_overlap_insert "
        "BEFORE INSERT ON sleep_sessions FOR EACH ROW "
        "WHEN EXISTS (SELECT 1 FROM sleep_sessions s WHERE s.user_id = NEW.user_id "
        "AND s.start_at < NEW.end_at AND s.end_at > NEW.start_at) "
        f"BEGIN SELECT RAISE(ABORT, '{OVERLAP_CONSTRAINT}'); END"
    ).execute_if(dialect="sqlite"),
)
event.listen(
    SleepSession.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER trg_sleep_sessions_no_overlap_update "
        "BEFORE UPDATE OF start_at, end_at, user_id ON sleep_sessions FOR EACH ROW "
        "WHEN EXISTS (SELECT 1 FROM sleep_sessions s WHERE s.user_id = NEW.user_id "
        "AND s.id != NEW.id AND s.start_at < NEW.end_at AND s.end_at > NEW.start_at) "
        f"BEGIN SELECT RAISE(ABORT, '{OVERLAP_CONSTRAINT}'); END"
    ).execute_if(dialect="sqlite"),
)
