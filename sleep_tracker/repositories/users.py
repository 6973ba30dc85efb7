"""User directory backed by SQLAlchemy."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from sleep_tracker.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Read/write access to users."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, timezone: str, user_id: uuid.UUID | None = None) -> User:
        user = User(id=user_id, timezone=timezone) if user_id else User(timezone=timezone)
        self.db.add(user)
        self.db.flush()
        logger.info(f"Created user {user.id} with timezone {timezone}")
        return user

    def get_by_id(self, user_id: uuid.UUID) -> User | None:
        return self.db.get(User, user_id)

    def exists(self, user_id: uuid.UUID) -> bool:
        return self.db.scalar(select(User.id).where(User.id == user_id)) is not None

    def get_default_timezone(self, user_id: uuid.UUID) -> str | None:
        return self.db.scalar(select(User.timezone).where(User.id == user_id))

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()
