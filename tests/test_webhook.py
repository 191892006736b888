"""
Tests for the Razorpay webhook endpoint.
"""
import hashlib
import hmac
import json
from datetime import datetime

import pytest

from app.core import config
from app.core.gating import as_naive_utc
from app.db.models.subscription import Subscription

WEBHOOK_SECRET = "whsec_test"


def _signed(payload: dict, secret: str = WEBHOOK_SECRET):
    body = json.dumps(payload).encode()
    signature = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return body, signature


@pytest.fixture(autouse=True)
def webhook_secret(monkeypatch):
    monkeypatch.setattr(config, "RAZORPAY_WEBHOOK_SECRET", WEBHOOK_SECRET)


def _event(status="active", current_end=1893456000):
    return {
        "event": f"subscription.{status}",
        "payload": {
            "subscription": {
                "entity": {
                    "id": "sub_from_webhook",
                    "customer_id": "cust_42",
                    "plan_id": "plan_mock_yearly",
                    "status": status,
                    "current_end": current_end,
                }
            }
        },
    }


def test_webhook_missing_signature(client):
    response = client.post("/billing/webhook", content=b"{}")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing signature or secret"}


def test_webhook_missing_secret(client, monkeypatch):
    monkeypatch.setattr(config, "RAZORPAY_WEBHOOK_SECRET", None)
    body, signature = _signed(_event())

    response = client.post("/billing/webhook", content=body, headers={"X-Razorpay-Signature": signature})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing signature or secret"}


def test_webhook_invalid_signature(client):
    body, _ = _signed(_event())
    _, wrong = _signed(_event(), secret="other")

    response = client.post("/billing/webhook", content=body, headers={"X-Razorpay-Signature": wrong})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid signature"}


def test_webhook_updates_subscription_by_customer(client, db, test_user, subscribe):
    subscribe(test_user, "plan_mock_monthly", status="created", razorpay_customer_id="cust_42")
    body, signature = _signed(_event("active"))

    response = client.post("/billing/webhook", content=body, headers={"X-Razorpay-Signature": signature})

    assert response.status_code == 200
    assert response.json() == {"received": True}

    db.expire_all()
    row = db.query(Subscription).filter(Subscription.user_id == test_user.id).first()
    assert row.status == "active"
    assert row.razorpay_subscription_id == "sub_from_webhook"
    assert row.plan_id == "plan_mock_yearly"
    assert as_naive_utc(row.current_period_end) == datetime(2030, 1, 1, 0, 0, 0)


def test_webhook_halted_subscription(client, db, test_user, subscribe):
    subscribe(test_user, "plan_mock_monthly", razorpay_customer_id="cust_42")
    body, signature = _signed(_event("halted"))

    client.post("/billing/webhook", content=body, headers={"X-Razorpay-Signature": signature})

    db.expire_all()
    row = db.query(Subscription).filter(Subscription.user_id == test_user.id).first()
    assert row.status == "halted"


def test_webhook_without_subscription_entity_is_acknowledged(client):
    body, signature = _signed({"event": "payment.captured", "payload": {"payment": {"entity": {"id": "pay_1"}}}})

    response = client.post("/billing/webhook", content=body, headers={"X-Razorpay-Signature": signature})

    assert response.status_code == 200
    assert response.json() == {"received": True}


def test_webhook_rejects_non_object_body(client):
    body, signature = _signed([])

    response = client.post("/billing/webhook", content=body, headers={"X-Razorpay-Signature": signature})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid webhook payload"}
