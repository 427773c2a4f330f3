"""Child profile endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from minimind.core.exceptions import upgrade_required_exception
from minimind.dependencies import CurrentUser, DbSession
from minimind.schemas.child_profile import ChildProfileBody, ChildProfileResponse
from minimind.services.child_profile_service import (
    create_child_profile,
    delete_child_profile,
    get_child_profile,
    list_child_profiles,
    update_child_profile,
)
from minimind.services.entitlement_service import can_create_child_profile

router = APIRouter(prefix="/child-profiles", tags=["child-profiles"])


def _child_response(child) -> ChildProfileResponse:
    return ChildProfileResponse(
        id=child.id,
        name=child.name,
        age=child.age,
        favorites=child.favorites or {},
        createdAt=child.created_at,
    )


@router.get("")
def child_profiles_list(
    db: DbSession,
    user: CurrentUser,
):
    return {"profiles": [_child_response(c) for c in list_child_profiles(db, user.id)]}


@router.post("")
def child_profiles_create(
    body: ChildProfileBody,
    db: DbSession,
    user: CurrentUser,
):
    decision = can_create_child_profile(db, user.id)
    if not decision.allowed:
        raise upgrade_required_exception(decision.plan.value, decision.reason)
    child = create_child_profile(
        db,
        user_id=user.id,
        name=body.name,
        age=body.age,
        favorites=body.favorites,
    )
    return {"profile": _child_response(child)}


@router.put("/{id}")
def child_profiles_update(
    id: UUID,
    body: ChildProfileBody,
    db: DbSession,
    user: CurrentUser,
):
    child = get_child_profile(db, id, user.id)
    if not child:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    child = update_child_profile(db, child, name=body.name, age=body.age, favorites=body.favorites)
    return {"profile": _child_response(child)}


@router.delete("/{id}")
def child_profiles_delete(
    id: UUID,
    db: DbSession,
    user: CurrentUser,
):
    if not delete_child_profile(db, id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return {"success": True}
