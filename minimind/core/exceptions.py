"""Custom HTTP exceptions and error codes for upgrade flow and usage limits."""

from typing import Optional
from fastapi import HTTPException

UPGRADE_REQUIRED = "UPGRADE_REQUIRED"
LIMIT_REACHED = "LIMIT_REACHED"


def upgrade_required_exception(
    current_plan: Optional[str],
    message: Optional[str] = None,
    required_plan: str = "plus",
) -> HTTPException:
    """403 with body for the frontend 'Upgrade to MiniMind Plus' modal."""
    return HTTPException(
        status_code=403,
        detail={
            "code": UPGRADE_REQUIRED,
            "error": message or "This feature is only available with MiniMind Plus",
            "upgradeRequired": True,
            "requiredPlan": required_plan,
            "currentPlan": current_plan,
        },
    )


def limit_reached_exception(
    current_plan: Optional[str],
    message: Optional[str] = None,
) -> HTTPException:
    """429 with body for quota exhaustion or anonymous rate limiting."""
    return HTTPException(
        status_code=429,
        detail={
            "code": LIMIT_REACHED,
            "error": message or "Usage limit reached.",
            "limitReached": True,
            "currentPlan": current_plan,
        },
    )
