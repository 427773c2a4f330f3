"""Saved story schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel

from minimind.schemas.child_profile import ChildSummary


class StoryResponse(BaseModel):
    id: UUID
    childId: Optional[UUID] = None
    title: Optional[str] = None
    mode: Optional[str] = None
    content: Optional[str] = None
    metadata: dict[str, Any]
    createdAt: datetime
    child: Optional[ChildSummary] = None
