"""Generation pipeline: prompt -> model -> recovery parse -> optional save -> usage count.

Callers run the plan and quota checks first; these functions assume the request is
already authorized. Provider failures propagate as GenerationError.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from minimind.core.plans import Plan
from minimind.db.models.child_profile import ChildProfile
from minimind.db.models.user import User
from minimind.services import llm_service, prompts
from minimind.services.child_profile_service import get_child_profile
from minimind.services.entitlement_service import has_feature, increment_usage
from minimind.services.response_parser import (
    BedtimeResult,
    ExplainResult,
    GenerationKind,
    LearningResult,
    StoryResult,
    parse_generation,
)
from minimind.services.story_service import save_chat_session, save_story

logger = logging.getLogger(__name__)


def _load_child(db: Session, user: User, child_id: Optional[uuid.UUID]) -> Optional[ChildProfile]:
    if child_id is None:
        return None
    child = get_child_profile(db, child_id, user.id)
    if child is None:
        logger.info("Child profile %s not found for user %s; generating without it", child_id, user.id)
    return child


def explain(db: Session, user: Optional[User], topic: str) -> ExplainResult:
    raw = llm_service.generate_text(prompts.explain_prompt(topic), prompts.EXPLAIN_TEMPERATURE)
    result = parse_generation(raw, GenerationKind.EXPLAIN)
    if user is not None:
        increment_usage(db, user.id)
    return result


def tell_story(
    db: Session,
    user: User,
    plan: Plan,
    prompt: str,
    child_id: Optional[uuid.UUID] = None,
    personalized: bool = False,
) -> StoryResult:
    child = _load_child(db, user, child_id)
    raw = llm_service.generate_text(
        prompts.story_prompt(prompt, child if personalized else None),
        prompts.STORY_TEMPERATURE,
    )
    result = parse_generation(raw, GenerationKind.STORY)
    if has_feature(plan, "save_and_replay"):
        save_story(
            db,
            user_id=user.id,
            child_id=child.id if child else None,
            title=result.title,
            mode="story",
            content=result.content,
            metadata={"prompt": prompt, "personalized": personalized, "moral": result.moral},
        )
    increment_usage(db, user.id)
    return result


def tell_bedtime_story(
    db: Session,
    user: User,
    plan: Plan,
    prompt: str,
    child_id: Optional[uuid.UUID] = None,
    include_poem: bool = False,
) -> BedtimeResult:
    child = _load_child(db, user, child_id)
    raw = llm_service.generate_text(
        prompts.bedtime_prompt(prompt, child, include_poem=include_poem),
        prompts.BEDTIME_TEMPERATURE,
    )
    result = parse_generation(raw, GenerationKind.BEDTIME)
    if has_feature(plan, "save_and_replay"):
        save_story(
            db,
            user_id=user.id,
            child_id=child.id if child else None,
            title=result.title,
            mode="bedtime",
            content=result.content,
            metadata={
                "prompt": prompt,
                "includePoem": include_poem,
                "poem": result.poem,
                "sleepyMessage": result.sleepyMessage,
            },
        )
    increment_usage(db, user.id)
    return result


def answer_learning_question(
    db: Session,
    user: User,
    plan: Plan,
    question: str,
    age: int = 6,
    subject: Optional[str] = None,
) -> LearningResult:
    raw = llm_service.generate_text(
        prompts.learning_prompt(question, age=age, subject=subject),
        prompts.LEARNING_TEMPERATURE,
    )
    result = parse_generation(raw, GenerationKind.LEARNING)
    if has_feature(plan, "save_and_replay"):
        save_chat_session(
            db,
            user_id=user.id,
            mode="learning",
            messages=[
                {"role": "user", "content": question},
                {"role": "assistant", "content": result.model_dump()},
            ],
        )
    increment_usage(db, user.id)
    return result
