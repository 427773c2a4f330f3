"""Generation endpoints: explain, story, bedtime, learning.

Authorization and plan/quota checks run before the model is called.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from minimind.core.exceptions import limit_reached_exception, upgrade_required_exception
from minimind.dependencies import AnonymousLimiter, CurrentUser, CurrentUserOptional, DbSession
from minimind.schemas.generation import BedtimeRequest, ExplainRequest, LearningRequest, StoryRequest
from minimind.services import generation_service
from minimind.services.entitlement_service import can_chat, has_feature, resolve_plan
from minimind.services.llm_service import GenerationError
from minimind.services.rate_limiter import ANONYMOUS_LIMIT_MESSAGE, client_address
from minimind.services.response_parser import BedtimeResult, ExplainResult, LearningResult, StoryResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


def _require_quota(db, user):
    decision = can_chat(db, user.id)
    if not decision.allowed:
        raise limit_reached_exception(decision.plan.value, decision.reason)
    return decision.plan


def _generation_failed(e: GenerationError) -> HTTPException:
    logger.error("Generation failed: %s", e)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Something went wrong",
    )


@router.post("/explain", response_model=ExplainResult)
def explain(
    body: ExplainRequest,
    request: Request,
    db: DbSession,
    user: CurrentUserOptional,
    limiter: AnonymousLimiter,
):
    """Explain a topic for kid and parent. Open to anonymous callers, rate limited per address."""
    if user is not None:
        _require_quota(db, user)
    elif not limiter.allow(client_address(request)):
        raise limit_reached_exception(None, ANONYMOUS_LIMIT_MESSAGE)
    try:
        return generation_service.explain(db, user, body.topic)
    except GenerationError as e:
        raise _generation_failed(e)


@router.post("/story", response_model=StoryResult)
def story(
    body: StoryRequest,
    db: DbSession,
    user: CurrentUser,
):
    plan = _require_quota(db, user)
    if body.personalized and not has_feature(plan, "story_personalization"):
        raise upgrade_required_exception(
            plan.value, "Story personalization is only available with MiniMind Plus"
        )
    try:
        return generation_service.tell_story(
            db,
            user,
            plan,
            body.prompt,
            child_id=body.childId,
            personalized=body.personalized,
        )
    except GenerationError as e:
        raise _generation_failed(e)


@router.post("/bedtime", response_model=BedtimeResult)
def bedtime(
    body: BedtimeRequest,
    db: DbSession,
    user: CurrentUser,
):
    plan = resolve_plan(db, user.id)
    if not has_feature(plan, "bedtime_mode"):
        raise upgrade_required_exception(plan.value, "Bedtime mode is only available with MiniMind Plus")
    _require_quota(db, user)
    try:
        return generation_service.tell_bedtime_story(
            db,
            user,
            plan,
            body.prompt,
            child_id=body.childId,
            include_poem=body.includePoem,
        )
    except GenerationError as e:
        raise _generation_failed(e)


@router.post("/learning", response_model=LearningResult)
def learning(
    body: LearningRequest,
    db: DbSession,
    user: CurrentUser,
):
    plan = resolve_plan(db, user.id)
    if not has_feature(plan, "learning_mode"):
        raise upgrade_required_exception(plan.value, "Learning mode is only available with MiniMind Plus")
    _require_quota(db, user)
    try:
        return generation_service.answer_learning_question(
            db,
            user,
            plan,
            body.question,
            age=body.age,
            subject=body.subject,
        )
    except GenerationError as e:
        raise _generation_failed(e)
