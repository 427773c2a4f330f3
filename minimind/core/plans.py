"""Plan tiers, per-plan limits and feature flags.

Static configuration, built once at import. Nothing here touches the database.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Plan(str, Enum):
    FREE = "free"
    PLUS = "plus"


@dataclass(frozen=True)
class PlanLimits:
    daily_chats: int
    max_child_profiles: int
    save_history_days: int


PLAN_LIMITS: Mapping[Plan, PlanLimits] = MappingProxyType(
    {
        Plan.FREE: PlanLimits(daily_chats=5, max_child_profiles=1, save_history_days=0),
        # 200/day is shown as "unlimited" in the UI; it is a fair-use cap.
        Plan.PLUS: PlanLimits(daily_chats=200, max_child_profiles=5, save_history_days=365),
    }
)

FEATURE_FLAGS: Mapping[str, Mapping[Plan, bool]] = MappingProxyType(
    {
        "bedtime_mode": MappingProxyType({Plan.FREE: False, Plan.PLUS: True}),
        "learning_mode": MappingProxyType({Plan.FREE: False, Plan.PLUS: True}),
        "save_and_replay": MappingProxyType({Plan.FREE: False, Plan.PLUS: True}),
        "parent_dashboard": MappingProxyType({Plan.FREE: False, Plan.PLUS: True}),
        "story_personalization": MappingProxyType({Plan.FREE: False, Plan.PLUS: True}),
    }
)

PLAN_DISPLAY_NAMES: Mapping[Plan, str] = MappingProxyType(
    {Plan.FREE: "MiniMind Free", Plan.PLUS: "MiniMind Plus"}
)


def limits_for(plan: Plan) -> PlanLimits:
    return PLAN_LIMITS[Plan(plan)]


def features_for(plan: Plan) -> dict:
    """Feature name -> enabled, for UI payloads."""
    plan = Plan(plan)
    return {name: flags[plan] for name, flags in FEATURE_FLAGS.items()}
