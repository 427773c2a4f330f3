"""Child profile schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ChildProfileBody(BaseModel):
    name: str = Field(max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=18)
    favorites: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class ChildProfileResponse(BaseModel):
    id: UUID
    name: str
    age: Optional[int] = None
    favorites: dict[str, Any]
    createdAt: datetime


class ChildSummary(BaseModel):
    id: UUID
    name: str
    age: Optional[int] = None
