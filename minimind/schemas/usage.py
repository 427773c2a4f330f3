"""Usage widget schema."""

from pydantic import BaseModel


class UsageResponse(BaseModel):
    plan: str
    dailyUsage: int
    dailyLimit: int
    remaining: int
    canChat: bool
    features: dict[str, bool]
