"""Saved stories and learning sessions (Save & Replay)."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from minimind.core.plans import Plan, limits_for
from minimind.db.models.chat_session import ChatSession
from minimind.db.models.story import Story

logger = logging.getLogger(__name__)


def save_story(
    db: Session,
    user_id: uuid.UUID,
    title: str,
    content: str,
    mode: str,
    child_id: Optional[uuid.UUID] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> Optional[Story]:
    """Persist a generated story. A failed save is logged and does not fail the request."""
    story = Story(
        id=uuid.uuid4(),
        user_id=user_id,
        child_id=child_id,
        title=title,
        mode=mode,
        content=content,
        metadata_=metadata or {},
    )
    try:
        db.add(story)
        db.commit()
    except SQLAlchemyError as e:
        logger.error("Failed to save %s story for user %s: %s", mode, user_id, e)
        db.rollback()
        return None
    return story


def save_chat_session(
    db: Session,
    user_id: uuid.UUID,
    mode: str,
    messages: list[dict[str, Any]],
    child_id: Optional[uuid.UUID] = None,
    token_usage: int = 0,
) -> Optional[ChatSession]:
    session = ChatSession(
        id=uuid.uuid4(),
        user_id=user_id,
        child_id=child_id,
        mode=mode,
        messages=messages,
        token_usage=token_usage,
    )
    try:
        db.add(session)
        db.commit()
    except SQLAlchemyError as e:
        logger.error("Failed to save %s session for user %s: %s", mode, user_id, e)
        db.rollback()
        return None
    return session


def list_stories(db: Session, user_id: uuid.UUID, plan: Plan) -> list[Story]:
    """Stories within the plan's history window, newest first."""
    query = (
        db.query(Story)
        .options(joinedload(Story.child))
        .filter(Story.user_id == user_id)
    )
    history_days = limits_for(plan).save_history_days
    if history_days > 0:
        cutoff = datetime.now(timezone.utc) - timedelta(days=history_days)
        query = query.filter(Story.created_at >= cutoff)
    return query.order_by(Story.created_at.desc()).all()


def get_story(db: Session, story_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Story]:
    return (
        db.query(Story)
        .options(joinedload(Story.child))
        .filter(Story.id == story_id, Story.user_id == user_id)
        .first()
    )


def delete_story(db: Session, story_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    deleted = (
        db.query(Story)
        .filter(Story.id == story_id, Story.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return bool(deleted)
