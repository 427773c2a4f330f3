"""Billing request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    couponCode: Optional[str] = None


class CheckoutResponse(BaseModel):
    sessionId: str
    url: Optional[str] = None


class SyncSubscriptionResponse(BaseModel):
    success: bool
    message: str
    plan: Optional[str] = None
