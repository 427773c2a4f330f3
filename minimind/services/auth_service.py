"""Auth: register, login, token refresh."""

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from minimind.core.plans import Plan
from minimind.core.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from minimind.db.models.profile import Profile
from minimind.db.models.user import User


def _issue_tokens(user: User) -> tuple[str, str]:
    return create_access_token(str(user.id)), create_refresh_token(str(user.id))


def get_profile(db: Session, user_id: uuid.UUID) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def register(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
) -> tuple[User, Profile, str, str]:
    """Create user and free-plan profile. Return (user, profile, access, refresh)."""
    email = email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ValueError("Email already registered")
    user = User(
        id=uuid.uuid4(),
        email=email,
        password_hash=hash_password(password),
        name=name or email.split("@")[0],
    )
    db.add(user)
    profile = Profile(user_id=user.id, email=email, plan=Plan.FREE.value)
    db.add(profile)
    db.commit()
    db.refresh(user)
    db.refresh(profile)
    access, refresh = _issue_tokens(user)
    return user, profile, access, refresh


def login(db: Session, email: str, password: str) -> tuple[User, Optional[Profile], str, str]:
    """Authenticate user; return (user, profile, access, refresh)."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not user.password_hash or not verify_password(password, user.password_hash):
        raise ValueError("Invalid email or password")
    access, refresh = _issue_tokens(user)
    return user, get_profile(db, user.id), access, refresh


def refresh_tokens(db: Session, refresh_token: str) -> tuple[User, str, str]:
    """Validate refresh token and return (user, new_access_token, new_refresh_token)."""
    payload = decode_token(refresh_token, expected_type=REFRESH)
    if not payload or not payload.get("sub"):
        raise ValueError("Invalid refresh token")
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise ValueError("Invalid refresh token")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ValueError("User not found")
    access, refresh = _issue_tokens(user)
    return user, access, refresh
