"""Sleep session schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sleep_tracker.models.sleep_session import SleepSession as SleepSessionModel
from sleep_tracker.models.sleep_session import SleepType
from sleep_tracker.services.time_normalizer import TimeNormalizer, get_time_normalizer


def _check_zone(value: str | None) -> str | None:
    # Empty string is allowed through; on update it means "leave unchanged"
    if value and not get_time_normalizer().is_known_zone(value):
        raise ValueError("must be a valid IANA timezone")
    return value


class SleepSessionCreate(BaseModel):
    """Schema for recording a sleep session."""

    start_at: datetime
    end_at: datetime
    quality: int = Field(ge=1, le=10)
    type: SleepType
    client_request_id: str | None = Field(default=None, max_length=255)
    local_timezone: str | None = None

    @field_validator("local_timezone")
    @classmethod
    def local_timezone_must_resolve(cls, value: str | None) -> str | None:
        return _check_zone(value)


class SleepSessionUpdate(BaseModel):
    """Schema for a partial update; omitted fields keep their stored values."""

    start_at: datetime | None = None
    end_at: datetime | None = None
    quality: int | None = Field(default=None, ge=1, le=10)
    type: SleepType | None = None
    local_timezone: str | None = None

    @field_validator("local_timezone")
    @classmethod
    def local_timezone_must_resolve(cls, value: str | None) -> str | None:
        return _check_zone(value)


class SleepSession(BaseModel):
    """Schema for sleep session output, with UTC and local renderings."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    start_at: datetime
    end_at: datetime
    quality: int
    type: SleepType
    client_request_id: str | None = None
    created_at: datetime
    local_timezone: str
    local_start_at: datetime
    local_end_at: datetime

    @classmethod
    def from_model(
        cls, session: SleepSessionModel, normalizer: TimeNormalizer | None = None
    ) -> "SleepSession":
        normalizer = normalizer or get_time_normalizer()
        return cls(
            id=session.id,
            user_id=session.user_id,
            start_at=session.start_at,
            end_at=session.end_at,
            quality=session.quality,
            type=SleepType(session.type),
            client_request_id=session.client_request_id,
            created_at=session.created_at,
            local_timezone=session.local_timezone,
            local_start_at=normalizer.to_local(session.start_at, session.local_timezone),
            local_end_at=normalizer.to_local(session.end_at, session.local_timezone),
        )


class Pagination(BaseModel):
    """Cursor-based pagination info."""

    next_cursor: str | None = None
    has_more: bool


class SleepSessionList(BaseModel):
    """Paginated list of sleep sessions."""

    data: list[SleepSession]
    pagination: Pagination
