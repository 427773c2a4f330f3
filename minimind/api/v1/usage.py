"""Daily usage for the current user."""

from fastapi import APIRouter

from minimind.dependencies import CurrentUser, DbSession
from minimind.schemas.usage import UsageResponse
from minimind.services.entitlement_service import usage_summary

router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("", response_model=UsageResponse)
def usage(
    db: DbSession,
    user: CurrentUser,
):
    return usage_summary(db, user.id)
