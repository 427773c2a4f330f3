"""Plan resolution, feature gating and daily usage quotas.

Read failures degrade to the most restrictive plan (free) or zero usage rather than
failing the request; write failures on the usage counter are logged and swallowed.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from minimind.core.plans import FEATURE_FLAGS, Plan, features_for, limits_for
from minimind.db.models.child_profile import ChildProfile
from minimind.db.models.profile import Profile
from minimind.db.models.subscription import Subscription
from minimind.db.models.usage_counter import UsageCounter

logger = logging.getLogger(__name__)

FREE_CHAT_LIMIT_MESSAGE = "Daily limit reached. Upgrade to MiniMind Plus for unlimited chats!"
PLUS_CHAT_LIMIT_MESSAGE = "Daily fair-use limit reached. Please try again tomorrow."
FREE_CHILD_LIMIT_MESSAGE = "Upgrade to MiniMind Plus to create up to 5 child profiles!"
PLUS_CHILD_LIMIT_MESSAGE = "Maximum child profiles reached for your plan."


@dataclass(frozen=True)
class EntitlementDecision:
    allowed: bool
    plan: Plan
    reason: Optional[str] = None


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def resolve_plan(db: Session, user_id: uuid.UUID) -> Plan:
    """Active plus subscription wins, then the profile's plan, then free. Never raises."""
    try:
        subscription = (
            db.query(Subscription)
            .filter(Subscription.user_id == user_id, Subscription.status == "active")
            .first()
        )
        if subscription and subscription.plan == Plan.PLUS.value:
            return Plan.PLUS
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        if profile and profile.plan in (Plan.FREE.value, Plan.PLUS.value):
            return Plan(profile.plan)
    except SQLAlchemyError as e:
        logger.warning("Plan lookup failed for user %s, treating as free: %s", user_id, e)
        db.rollback()
    return Plan.FREE


def has_feature(plan: Plan, feature: str) -> bool:
    try:
        flags = FEATURE_FLAGS[feature]
    except KeyError:
        raise ValueError(f"Unknown feature: {feature}") from None
    return flags[Plan(plan)]


def daily_usage(db: Session, user_id: uuid.UUID, day: Optional[str] = None) -> int:
    day = day or today_utc()
    try:
        count = (
            db.query(UsageCounter.chat_count)
            .filter(UsageCounter.user_id == user_id, UsageCounter.date == day)
            .scalar()
        )
    except SQLAlchemyError as e:
        logger.warning("Usage lookup failed for user %s: %s", user_id, e)
        db.rollback()
        return 0
    return count or 0


def can_chat(db: Session, user_id: uuid.UUID) -> EntitlementDecision:
    plan = resolve_plan(db, user_id)
    usage = daily_usage(db, user_id)
    if usage >= limits_for(plan).daily_chats:
        reason = FREE_CHAT_LIMIT_MESSAGE if plan == Plan.FREE else PLUS_CHAT_LIMIT_MESSAGE
        return EntitlementDecision(allowed=False, plan=plan, reason=reason)
    return EntitlementDecision(allowed=True, plan=plan)


def _bump(db: Session, user_id: uuid.UUID, day: str) -> int:
    result = db.execute(
        update(UsageCounter)
        .where(UsageCounter.user_id == user_id, UsageCounter.date == day)
        .values(chat_count=UsageCounter.chat_count + 1)
    )
    return result.rowcount


def increment_usage(db: Session, user_id: uuid.UUID, day: Optional[str] = None) -> None:
    """
    Add one generation to the user's counter for the day.
    Uses an in-database increment; a concurrent first insert for the same day falls back
    to the update path. Failures only undercount, so they are logged and swallowed.
    """
    day = day or today_utc()
    try:
        try:
            if not _bump(db, user_id, day):
                db.add(UsageCounter(id=uuid.uuid4(), user_id=user_id, date=day, chat_count=1))
            db.commit()
        except IntegrityError:
            db.rollback()
            _bump(db, user_id, day)
            db.commit()
    except SQLAlchemyError as e:
        logger.error("Failed to increment usage for user %s: %s", user_id, e)
        db.rollback()


def child_profile_count(db: Session, user_id: uuid.UUID) -> int:
    return (
        db.query(func.count(ChildProfile.id))
        .filter(ChildProfile.user_id == user_id)
        .scalar()
        or 0
    )


def can_create_child_profile(db: Session, user_id: uuid.UUID) -> EntitlementDecision:
    plan = resolve_plan(db, user_id)
    if child_profile_count(db, user_id) >= limits_for(plan).max_child_profiles:
        reason = FREE_CHILD_LIMIT_MESSAGE if plan == Plan.FREE else PLUS_CHILD_LIMIT_MESSAGE
        return EntitlementDecision(allowed=False, plan=plan, reason=reason)
    return EntitlementDecision(allowed=True, plan=plan)


def usage_summary(db: Session, user_id: uuid.UUID) -> dict:
    """Plan, today's usage and remaining quota for the usage widget."""
    plan = resolve_plan(db, user_id)
    usage = daily_usage(db, user_id)
    limit = limits_for(plan).daily_chats
    return {
        "plan": plan.value,
        "dailyUsage": usage,
        "dailyLimit": limit,
        "remaining": max(0, limit - usage),
        "canChat": usage < limit,
        "features": features_for(plan),
    }
