"""Saved stories (Save & Replay)."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from minimind.core.exceptions import upgrade_required_exception
from minimind.core.plans import Plan
from minimind.dependencies import CurrentPlan, CurrentUser, DbSession
from minimind.schemas.child_profile import ChildSummary
from minimind.schemas.story import StoryResponse
from minimind.services.entitlement_service import has_feature
from minimind.services.story_service import delete_story, get_story, list_stories

router = APIRouter(prefix="/stories", tags=["stories"])

SAVE_AND_REPLAY_MESSAGE = "Save & Replay is only available with MiniMind Plus"


def _require_save_and_replay(plan: Plan) -> None:
    if not has_feature(plan, "save_and_replay"):
        raise upgrade_required_exception(plan.value, SAVE_AND_REPLAY_MESSAGE)


def _story_response(story) -> StoryResponse:
    child = story.child
    return StoryResponse(
        id=story.id,
        childId=story.child_id,
        title=story.title,
        mode=story.mode,
        content=story.content,
        metadata=story.metadata_ or {},
        createdAt=story.created_at,
        child=ChildSummary(id=child.id, name=child.name, age=child.age) if child else None,
    )


@router.get("")
def stories_list(
    db: DbSession,
    user: CurrentUser,
    plan: CurrentPlan,
):
    """User's saved stories, newest first."""
    _require_save_and_replay(plan)
    return {"stories": [_story_response(s) for s in list_stories(db, user.id, plan)]}


@router.get("/{id}")
def stories_get(
    id: UUID,
    db: DbSession,
    user: CurrentUser,
    plan: CurrentPlan,
):
    _require_save_and_replay(plan)
    story = get_story(db, id, user.id)
    if not story:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Story not found")
    return {"story": _story_response(story)}


@router.delete("/{id}")
def stories_delete(
    id: UUID,
    db: DbSession,
    user: CurrentUser,
    plan: CurrentPlan,
):
    _require_save_and_replay(plan)
    if not delete_story(db, id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Story not found")
    return {"success": True}
