"""Saved question/answer exchange (learning mode)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from minimind.db.base import Base, JSONType


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        "userId",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    child_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        "childId",
        Uuid,
        ForeignKey("child_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    mode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    messages: Mapped[List[Any]] = mapped_column(JSONType, default=list, nullable=False)
    token_usage: Mapped[int] = mapped_column("tokenUsage", Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
