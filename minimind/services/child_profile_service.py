"""Child profile CRUD, always scoped to the owning user."""

import uuid
from typing import Any, Optional

from sqlalchemy.orm import Session

from minimind.db.models.child_profile import ChildProfile


def list_child_profiles(db: Session, user_id: uuid.UUID) -> list[ChildProfile]:
    """All profiles for the user, oldest first."""
    return (
        db.query(ChildProfile)
        .filter(ChildProfile.user_id == user_id)
        .order_by(ChildProfile.created_at.asc())
        .all()
    )


def get_child_profile(db: Session, child_id: uuid.UUID, user_id: uuid.UUID) -> Optional[ChildProfile]:
    return (
        db.query(ChildProfile)
        .filter(ChildProfile.id == child_id, ChildProfile.user_id == user_id)
        .first()
    )


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("Name is required")
    return name


def create_child_profile(
    db: Session,
    user_id: uuid.UUID,
    name: str,
    age: Optional[int] = None,
    favorites: Optional[dict[str, Any]] = None,
) -> ChildProfile:
    child = ChildProfile(
        id=uuid.uuid4(),
        user_id=user_id,
        name=_clean_name(name),
        age=age,
        favorites=favorites or {},
    )
    db.add(child)
    db.commit()
    db.refresh(child)
    return child


def update_child_profile(
    db: Session,
    child: ChildProfile,
    name: str,
    age: Optional[int] = None,
    favorites: Optional[dict[str, Any]] = None,
) -> ChildProfile:
    """Full replace of the editable fields."""
    child.name = _clean_name(name)
    child.age = age
    child.favorites = favorites or {}
    db.commit()
    db.refresh(child)
    return child


def delete_child_profile(db: Session, child_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    deleted = (
        db.query(ChildProfile)
        .filter(ChildProfile.id == child_id, ChildProfile.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return bool(deleted)
