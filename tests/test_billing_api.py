"""Billing routes and the Stripe webhook endpoint."""

import json
from unittest.mock import MagicMock

import stripe

from minimind.api.v1 import billing as billing_routes
from minimind.config import get_settings
from minimind.db.models import Profile
from minimind.services.billing_service import InvalidCouponError
from tests.conftest import auth_headers

WEBHOOK_URL = "/webhooks/stripe"


def _post_event(client, event, signature="t=1,v1=abc"):
    return client.post(
        WEBHOOK_URL,
        content=json.dumps(event),
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )


def test_webhook_invalid_signature(client, monkeypatch):
    def reject(payload, sig_header, secret):
        raise stripe.SignatureVerificationError("bad signature", sig_header)

    monkeypatch.setattr(billing_routes.Webhook, "construct_event", reject)
    response = _post_event(client, {"type": "checkout.session.completed"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid signature"


def test_webhook_invalid_payload(client, monkeypatch):
    def reject(payload, sig_header, secret):
        raise ValueError("not json")

    monkeypatch.setattr(billing_routes.Webhook, "construct_event", reject)
    assert _post_event(client, {}).status_code == 400


def test_webhook_checkout_completed(client, db, free_user, monkeypatch):
    construct = MagicMock()
    monkeypatch.setattr(billing_routes.Webhook, "construct_event", construct)
    event = {
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {
            "object": {"customer": "cus_1", "subscription": "sub_1", "metadata": {"user_id": str(free_user.id)}}
        },
    }
    response = _post_event(client, event)
    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert construct.call_args.args[1] == "t=1,v1=abc"
    assert construct.call_args.args[2] == "whsec_test"
    db.expire_all()
    assert db.query(Profile).filter(Profile.user_id == free_user.id).one().plan == "plus"

    me = client.get("/api/v1/me", headers=auth_headers(free_user)).json()
    assert me["plan"] == "plus"
    assert me["features"]["bedtime_mode"] is True


def test_webhook_unhandled_event_acknowledged(client, monkeypatch):
    monkeypatch.setattr(billing_routes.Webhook, "construct_event", MagicMock())
    response = _post_event(client, {"id": "evt_2", "type": "charge.refunded", "data": {"object": {}}})
    assert response.status_code == 200


def test_webhook_not_configured(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "stripe_webhook_secret", "")
    assert _post_event(client, {"type": "x"}).status_code == 501


def test_checkout_requires_auth(client):
    assert client.post("/api/v1/billing/checkout-session").status_code == 401


def test_checkout_route(client, free_user, monkeypatch):
    create = MagicMock(return_value={"sessionId": "cs_1", "url": "https://checkout.stripe.com/c/cs_1"})
    monkeypatch.setattr(billing_routes, "create_checkout_session", create)
    response = client.post(
        "/api/v1/billing/checkout-session",
        json={"couponCode": "KIDS50"},
        headers=auth_headers(free_user),
    )
    assert response.status_code == 200
    assert response.json()["sessionId"] == "cs_1"
    assert create.call_args.kwargs["coupon_code"] == "KIDS50"


def test_checkout_route_invalid_coupon(client, free_user, monkeypatch):
    monkeypatch.setattr(
        billing_routes, "create_checkout_session", MagicMock(side_effect=InvalidCouponError("Invalid coupon code"))
    )
    response = client.post(
        "/api/v1/billing/checkout-session",
        json={"couponCode": "NOPE"},
        headers=auth_headers(free_user),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid coupon code"


def test_checkout_route_stripe_not_configured(client, free_user, monkeypatch):
    monkeypatch.setattr(get_settings(), "stripe_secret_key", "")
    response = client.post("/api/v1/billing/checkout-session", headers=auth_headers(free_user))
    assert response.status_code == 501


def test_webhook_event_without_object_acknowledged(client, monkeypatch):
    monkeypatch.setattr(billing_routes.Webhook, "construct_event", MagicMock())
    response = _post_event(client, {"id": "evt_3", "type": "checkout.session.completed"})
    assert response.status_code == 200
    assert response.json() == {"received": True}
