"""Request bodies for the generation endpoints.

Response bodies are the result models in minimind.services.response_parser.
"""

from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


PromptText = Annotated[str, Field(max_length=2000), AfterValidator(_require_text)]


class ExplainRequest(BaseModel):
    topic: PromptText


class StoryRequest(BaseModel):
    prompt: PromptText
    childId: Optional[UUID] = None
    personalized: bool = False


class BedtimeRequest(BaseModel):
    prompt: PromptText
    childId: Optional[UUID] = None
    includePoem: bool = False


class LearningRequest(BaseModel):
    question: PromptText
    age: int = Field(default=6, ge=1, le=18)
    subject: Optional[str] = None
