from types import SimpleNamespace

import pytest
import stripe

from chatterbox.errors import PaymentError
from chatterbox.payments import PaymentBridge


def test_create_payment_intent(client, make_user, payments):
    make_user("ann@example.com")
    res = client.post("/create-payment-intent")
    assert res.status_code == 200
    assert res.json() == {"success": True, "clientSecret": "pi_123_secret_456"}
    assert payments.calls == ["ann@example.com"]


def test_create_payment_intent_requires_session(client, payments):
    assert client.post("/create-payment-intent").status_code == 401
    assert payments.calls == []


def test_bridge_calls_stripe(monkeypatch):
    seen = {}

    def fake_create(**kwargs):
        seen.update(kwargs)
        return SimpleNamespace(id="pi_1", client_secret="pi_1_secret")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    bridge = PaymentBridge("sk_test_123", amount=500, currency="usd")
    assert bridge.create_intent("ann@example.com") == "pi_1_secret"
    assert seen["amount"] == 500
    assert seen["currency"] == "usd"
    assert seen["api_key"] == "sk_test_123"
    assert seen["automatic_payment_methods"] == {"enabled": True}
    assert seen["metadata"]["email"] == "ann@example.com"


def test_bridge_wraps_stripe_errors(monkeypatch):
    def fail(**kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fail)
    with pytest.raises(PaymentError) as info:
        PaymentBridge("sk_test_123", amount=500).create_intent("ann@example.com")
    assert info.value.status_code == 502


def test_bridge_without_key():
    with pytest.raises(PaymentError):
        PaymentBridge(None, amount=500).create_intent("ann@example.com")
