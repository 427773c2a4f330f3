"""SQLAlchemy models - import all for Alembic and relationships."""

from minimind.db.base import Base
from minimind.db.models.user import User
from minimind.db.models.profile import Profile
from minimind.db.models.subscription import Subscription
from minimind.db.models.usage_counter import UsageCounter
from minimind.db.models.child_profile import ChildProfile
from minimind.db.models.story import Story
from minimind.db.models.chat_session import ChatSession

__all__ = [
    "Base",
    "User",
    "Profile",
    "Subscription",
    "UsageCounter",
    "ChildProfile",
    "Story",
    "ChatSession",
]
