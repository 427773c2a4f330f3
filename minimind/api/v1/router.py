"""API v1 router: include all route modules, GET /me, PATCH /me."""

from fastapi import APIRouter

from minimind.api.v1 import (
    auth,
    billing,
    child_profiles,
    generate,
    health,
    stories,
    usage,
)
from minimind.api.v1.auth import profile_response
from minimind.core.plans import PLAN_DISPLAY_NAMES, features_for
from minimind.dependencies import CurrentPlan, CurrentUser, DbSession
from minimind.schemas.auth import MeUpdateRequest, UserResponse
from minimind.services.auth_service import get_profile

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(generate.router)
api_router.include_router(child_profiles.router)
api_router.include_router(stories.router)
api_router.include_router(usage.router)
api_router.include_router(billing.router)
api_router.include_router(health.router)


@api_router.get("/me")
def me(db: DbSession, user: CurrentUser, plan: CurrentPlan):
    """Return current user, billing profile and the features the effective plan unlocks."""
    return {
        "user": UserResponse.model_validate(user),
        "profile": profile_response(get_profile(db, user.id)),
        "plan": plan.value,
        "planName": PLAN_DISPLAY_NAMES[plan],
        "features": features_for(plan),
    }


@api_router.patch("/me", response_model=dict)
def update_me(
    body: MeUpdateRequest,
    db: DbSession,
    user: CurrentUser,
):
    """Update current user profile (e.g. name)."""
    if body.name is not None:
        user.name = body.name
        db.commit()
        db.refresh(user)
    return {"user": UserResponse.model_validate(user)}
