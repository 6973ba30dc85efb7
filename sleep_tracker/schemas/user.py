"""User schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from sleep_tracker.services.time_normalizer import get_time_normalizer


class UserCreate(BaseModel):
    """Schema for creating a user."""

    timezone: str

    @field_validator("timezone")
    @classmethod
    def timezone_must_resolve(cls, value: str) -> str:
        if not get_time_normalizer().is_known_zone(value):
            raise ValueError("must be a valid IANA timezone")
        return value


class User(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    timezone: str
    created_at: datetime
