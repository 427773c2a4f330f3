"""Stripe checkout, subscription sync and webhooks."""

import json
import logging
from typing import Optional

import stripe
from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from stripe import Webhook

from minimind.config import get_settings
from minimind.dependencies import CurrentUser, DbSession
from minimind.schemas.billing import CheckoutRequest, CheckoutResponse, SyncSubscriptionResponse
from minimind.services.billing_service import (
    InvalidCouponError,
    ProfileNotFoundError,
    create_checkout_session,
    handle_event,
    sync_subscription,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])
webhook_router = APIRouter(prefix="/webhooks", tags=["billing"])


def _require_stripe() -> None:
    if not get_settings().stripe_secret_key:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Stripe not configured")


@router.post("/checkout-session", response_model=CheckoutResponse)
def checkout_session(
    db: DbSession,
    user: CurrentUser,
    body: Optional[CheckoutRequest] = None,
):
    """Start a MiniMind Plus subscription checkout. Optional couponCode is checked against Stripe."""
    _require_stripe()
    try:
        return create_checkout_session(db, user, coupon_code=body.couponCode if body else None)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidCouponError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/sync-subscription", response_model=SyncSubscriptionResponse)
def sync(
    db: DbSession,
    user: CurrentUser,
):
    """Reconcile local plan with Stripe when a webhook was missed."""
    _require_stripe()
    try:
        return sync_subscription(db, user)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@webhook_router.post("/stripe")
async def stripe_webhook(
    request: Request,
    db: DbSession,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
):
    """Handle Stripe webhooks: checkout, subscription updated/deleted, invoice succeeded/failed."""
    settings = get_settings()
    if not settings.stripe_configured:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Stripe not configured")
    payload = await request.body()
    try:
        Webhook.construct_event(payload, stripe_signature or "", settings.stripe_webhook_secret)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        logger.warning("Webhook signature verification failed")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")
    # Signature is verified; handlers work on the plain JSON payload
    await run_in_threadpool(handle_event, db, json.loads(payload))
    return {"received": True}
