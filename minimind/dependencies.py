"""FastAPI dependency injection: db session, current user, plan, anonymous limiter."""

import logging
import uuid
from collections.abc import Generator
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from minimind.core.plans import Plan
from minimind.core.security import ACCESS, decode_token
from minimind.db.base import SessionLocal
from minimind.db.models.user import User
from minimind.services.entitlement_service import resolve_plan
from minimind.services.rate_limiter import FixedWindowLimiter

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Provide a DB session; close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_optional(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)] = None,
) -> Optional[User]:
    """Return current user from JWT if present; None on any failure (fails closed)."""
    if not credentials:
        return None
    payload = decode_token(credentials.credentials, expected_type=ACCESS)
    if not payload or not payload.get("sub"):
        return None
    try:
        user_id = uuid.UUID(payload["sub"])
        return db.query(User).filter(User.id == user_id).first()
    except (ValueError, SQLAlchemyError) as e:
        logger.warning("Could not resolve user from token: %s", e)
        return None


def get_current_user(
    user: Annotated[Optional[User], Depends(get_current_user_optional)],
) -> User:
    """Require authenticated user; raise 401 if missing."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_plan(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
) -> Plan:
    return resolve_plan(db, user.id)


def get_anonymous_limiter(request: Request) -> FixedWindowLimiter:
    return request.app.state.anonymous_limiter


DbSession = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentUserOptional = Annotated[Optional[User], Depends(get_current_user_optional)]
CurrentPlan = Annotated[Plan, Depends(get_current_plan)]
AnonymousLimiter = Annotated[FixedWindowLimiter, Depends(get_anonymous_limiter)]
