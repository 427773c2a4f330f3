"""Stripe checkout and subscription state sync.

Webhook handlers re-derive the local Profile/Subscription state from the event payload
instead of applying deltas, so a redelivered event leaves the same result.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import stripe
from sqlalchemy.orm import Session

from minimind.config import get_settings
from minimind.core.plans import Plan
from minimind.db.models.profile import Profile
from minimind.db.models.subscription import Subscription
from minimind.db.models.user import User

logger = logging.getLogger(__name__)

USER_ID_METADATA_KEY = "user_id"


class ProfileNotFoundError(LookupError):
    pass


class InvalidCouponError(ValueError):
    pass


def configure_stripe() -> None:
    stripe.api_key = get_settings().stripe_secret_key


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Key lookup that works for dicts and StripeObjects alike."""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, IndexError, TypeError, AttributeError):
        return default
    return default if value is None else value


def _object_id(value: Any) -> Optional[str]:
    """Stripe references may be a bare id or an expanded object."""
    if value is None or isinstance(value, str):
        return value
    return _get(value, "id")


def _timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _subscription_period_end(subscription: Any) -> Optional[datetime]:
    end = _get(subscription, "current_period_end")
    if end is None:
        # Newer API versions carry the period on the subscription items
        items = _get(_get(subscription, "items"), "data", [])
        end = _get(items[0], "current_period_end") if items else None
    return _timestamp(end)


def _invoice_subscription_id(invoice: Any) -> Optional[str]:
    sub = _object_id(_get(invoice, "subscription"))
    if sub is None:
        details = _get(_get(invoice, "parent"), "subscription_details")
        sub = _object_id(_get(details, "subscription"))
    return sub


def _invoice_period_end(invoice: Any) -> Optional[datetime]:
    lines = _get(_get(invoice, "lines"), "data", [])
    end = _get(_get(lines[0], "period"), "end") if lines else None
    return _timestamp(end or _get(invoice, "period_end"))


def _profile_by_customer(db: Session, customer_id: Optional[str]) -> Optional[Profile]:
    if not customer_id:
        return None
    return db.query(Profile).filter(Profile.stripe_customer_id == customer_id).first()


def _upsert_subscription(db: Session, user_id: uuid.UUID, **values: Any) -> Subscription:
    """One subscription row per user."""
    subscription = db.query(Subscription).filter(Subscription.user_id == user_id).first()
    if subscription is None:
        subscription = Subscription(id=uuid.uuid4(), user_id=user_id)
        db.add(subscription)
    for key, value in values.items():
        setattr(subscription, key, value)
    return subscription


def _set_profile_plan(db: Session, user_id: uuid.UUID, plan: Plan, customer_id: Optional[str] = None) -> None:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if profile is None:
        logger.warning("No profile for user %s while setting plan %s", user_id, plan.value)
        return
    profile.plan = plan.value
    if customer_id:
        profile.stripe_customer_id = customer_id


# Checkout ---------------------------------------------------------------------------


def create_checkout_session(db: Session, user: User, coupon_code: Optional[str] = None) -> dict:
    """Create (or reuse) the Stripe customer and open a subscription checkout session."""
    settings = get_settings()
    configure_stripe()
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile is None:
        raise ProfileNotFoundError("Profile not found")

    customer_id = profile.stripe_customer_id
    if not customer_id:
        customer = stripe.Customer.create(
            email=user.email,
            metadata={USER_ID_METADATA_KEY: str(user.id)},
        )
        customer_id = customer["id"]
        profile.stripe_customer_id = customer_id
        db.commit()

    params: dict[str, Any] = {
        "customer": customer_id,
        "payment_method_types": ["card"],
        "line_items": [{"price": settings.stripe_price_id, "quantity": 1}],
        "mode": "subscription",
        "success_url": f"{settings.frontend_url.rstrip('/')}/app?success=true",
        "cancel_url": f"{settings.frontend_url.rstrip('/')}/pricing?canceled=true",
        "metadata": {USER_ID_METADATA_KEY: str(user.id)},
    }
    if coupon_code:
        try:
            coupon = stripe.Coupon.retrieve(coupon_code)
        except stripe.StripeError as e:
            logger.warning("Invalid coupon code %s: %s", coupon_code, e)
            raise InvalidCouponError("Invalid coupon code") from e
        if not _get(coupon, "valid", False):
            raise InvalidCouponError("Invalid coupon code")
        # Stripe rejects discounts together with allow_promotion_codes
        params["discounts"] = [{"coupon": coupon_code}]
    else:
        params["allow_promotion_codes"] = True

    session = stripe.checkout.Session.create(**params)
    logger.info("Checkout session %s created for user %s", session["id"], user.id)
    return {"sessionId": session["id"], "url": _get(session, "url")}


def sync_subscription(db: Session, user: User) -> dict:
    """Pull the user's active subscription straight from Stripe (missed webhook recovery)."""
    configure_stripe()
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile is None or not profile.stripe_customer_id:
        raise ProfileNotFoundError("No Stripe customer found")

    result = stripe.Subscription.list(customer=profile.stripe_customer_id, status="active", limit=1)
    subscriptions = _get(result, "data", [])
    if not subscriptions:
        return {"success": False, "message": "No active subscription found in Stripe"}

    subscription = subscriptions[0]
    _set_profile_plan(db, user.id, Plan.PLUS)
    _upsert_subscription(
        db,
        user.id,
        stripe_customer_id=profile.stripe_customer_id,
        stripe_subscription_id=_get(subscription, "id"),
        plan=Plan.PLUS.value,
        status="active",
        current_period_end=_subscription_period_end(subscription),
    )
    db.commit()
    return {"success": True, "message": "Subscription synced successfully", "plan": Plan.PLUS.value}


# Webhooks ---------------------------------------------------------------------------


def handle_checkout_completed(db: Session, session: Any) -> None:
    raw_user_id = _get(_get(session, "metadata"), USER_ID_METADATA_KEY)
    customer_id = _object_id(_get(session, "customer"))
    logger.info("Checkout completed for user %s (customer %s)", raw_user_id, customer_id)
    if not raw_user_id:
        logger.error("No user id in checkout session metadata")
        return
    try:
        user_id = uuid.UUID(str(raw_user_id))
    except ValueError:
        logger.error("Malformed user id in checkout session metadata: %r", raw_user_id)
        return
    _set_profile_plan(db, user_id, Plan.PLUS, customer_id=customer_id)
    _upsert_subscription(
        db,
        user_id,
        stripe_customer_id=customer_id,
        stripe_subscription_id=_object_id(_get(session, "subscription")),
        plan=Plan.PLUS.value,
        status="active",
    )
    db.commit()


def _subscription_for(db: Session, stripe_subscription_id: Optional[str], user_id: uuid.UUID) -> Subscription:
    subscription = None
    if stripe_subscription_id:
        subscription = (
            db.query(Subscription)
            .filter(Subscription.stripe_subscription_id == stripe_subscription_id)
            .first()
        )
    return subscription or _upsert_subscription(db, user_id)


def handle_subscription_updated(db: Session, subscription: Any) -> None:
    customer_id = _object_id(_get(subscription, "customer"))
    profile = _profile_by_customer(db, customer_id)
    if profile is None:
        logger.error("No profile found for customer %s", customer_id)
        return
    status = _get(subscription, "status", "")
    plan = Plan.PLUS if status == "active" else Plan.FREE
    profile.plan = plan.value

    record = _subscription_for(db, _get(subscription, "id"), profile.user_id)
    record.stripe_customer_id = customer_id
    record.stripe_subscription_id = _get(subscription, "id")
    record.plan = plan.value
    record.status = status
    period_end = _subscription_period_end(subscription)
    if period_end:
        record.current_period_end = period_end
    db.commit()


def handle_subscription_deleted(db: Session, subscription: Any) -> None:
    customer_id = _object_id(_get(subscription, "customer"))
    profile = _profile_by_customer(db, customer_id)
    if profile is None:
        logger.error("No profile found for customer %s", customer_id)
        return
    profile.plan = Plan.FREE.value
    record = _subscription_for(db, _get(subscription, "id"), profile.user_id)
    record.plan = Plan.FREE.value
    record.status = "canceled"
    db.commit()


def _invoice_subscription(db: Session, invoice: Any) -> Optional[Subscription]:
    subscription_id = _invoice_subscription_id(invoice)
    if not subscription_id:
        return None
    record = (
        db.query(Subscription)
        .filter(Subscription.stripe_subscription_id == subscription_id)
        .first()
    )
    if record is None:
        logger.warning("Invoice for unknown subscription %s", subscription_id)
    return record


def handle_invoice_succeeded(db: Session, invoice: Any) -> None:
    record = _invoice_subscription(db, invoice)
    if record is None:
        return
    record.status = "active"
    period_end = _invoice_period_end(invoice)
    if period_end:
        record.current_period_end = period_end
    db.commit()


def handle_invoice_failed(db: Session, invoice: Any) -> None:
    record = _invoice_subscription(db, invoice)
    if record is None:
        return
    record.status = "past_due"
    db.commit()


EVENT_HANDLERS: dict[str, Callable[[Session, Any], None]] = {
    "checkout.session.completed": handle_checkout_completed,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
    "invoice.payment_succeeded": handle_invoice_succeeded,
    "invoice.paid": handle_invoice_succeeded,
    "invoice.payment_failed": handle_invoice_failed,
}


def handle_event(db: Session, event: Any) -> bool:
    """Dispatch a verified webhook event. Returns False for event types we ignore or cannot read."""
    event_type = _get(event, "type")
    logger.info("Webhook event received: %s %s", event_type, _get(event, "id"))
    handler = EVENT_HANDLERS.get(event_type) if isinstance(event_type, str) else None
    if handler is None:
        logger.info("Unhandled event type: %s", event_type)
        return False
    obj = _get(_get(event, "data"), "object")
    if obj is None:
        logger.error("Webhook event %s (%s) has no data.object", _get(event, "id"), event_type)
        return False
    handler(db, obj)
    return True
