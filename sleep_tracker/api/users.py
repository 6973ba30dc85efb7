"""User API endpoints."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sleep_tracker.database import get_db
from sleep_tracker.errors import NotFoundError
from sleep_tracker.models.user import User as UserModel
from sleep_tracker.repositories.users import UserRepository
from sleep_tracker.schemas.user import User, UserCreate

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/", response_model=User, status_code=201)
def create_user(user: UserCreate, db: Session = Depends(get_db)) -> UserModel:
    """Create a new user."""
    db_user = UserRepository(db).create(timezone=user.timezone)
    db.commit()
    return db_user


@router.get("/{user_id}", response_model=User)
def get_user(user_id: uuid.UUID, db: Session = Depends(get_db)) -> UserModel:
    """Get a user by ID."""
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: uuid.UUID, db: Session = Depends(get_db)) -> None:
    """Delete a user and, through the foreign key cascade, their sleep sessions."""
    users = UserRepository(db)
    user = users.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")

    users.delete(user)
    db.commit()
