import pytest
import stripe

from marketplace.errors import UpstreamPaymentError
from marketplace.payments import stripe_client

class _StripeObj(dict):
    def to_dict(self):
        return dict(self)

def test_create_payment_intent_builds_destination_charge(monkeypatch):
    captured = {}
    def fake_create(**kwargs):
        captured.update(kwargs)
        return _StripeObj(id="pi_1", client_secret="pi_1_secret")
    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)

    res = stripe_client.create_payment_intent(
        amount=1999,
        currency="usd",
        destination="acct_V2",
        application_fee_amount=200,
        metadata={"vendor_id": "V2"},
        idempotency_key="k-1",
    )
    assert res == {"id": "pi_1", "client_secret": "pi_1_secret"}
    assert captured["amount"] == 1999
    assert captured["application_fee_amount"] == 200
    assert captured["transfer_data"] == {"destination": "acct_V2"}
    assert captured["idempotency_key"] == "k-1"

def test_create_payment_intent_without_idempotency_key(monkeypatch):
    captured = {}
    def fake_create(**kwargs):
        captured.update(kwargs)
        return {"id": "pi_2", "client_secret": "s"}
    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    stripe_client.create_payment_intent(
        amount=100, currency="usd", destination="acct_X", application_fee_amount=10, metadata={},
    )
    assert "idempotency_key" not in captured

def test_stripe_error_becomes_upstream_payment_error(monkeypatch):
    def boom(**kwargs):
        raise stripe.StripeError("Your card was declined.", code="card_declined")
    monkeypatch.setattr(stripe.PaymentIntent, "create", boom)

    with pytest.raises(UpstreamPaymentError) as exc:
        stripe_client.create_payment_intent(
            amount=100, currency="usd", destination="acct_X", application_fee_amount=10, metadata={},
        )
    assert exc.value.message == "Stripe error: Your card was declined."
    assert exc.value.code == "card_declined"
    assert exc.value.kind == "upstream_payment_error"

def test_create_express_account_requests_capabilities(monkeypatch):
    captured = {}
    def fake_create(**kwargs):
        captured.update(kwargs)
        return _StripeObj(id="acct_new")
    monkeypatch.setattr(stripe.Account, "create", fake_create)

    res = stripe_client.create_express_account(vendor_id="vendor-1")
    assert res["id"] == "acct_new"
    assert captured["type"] == "express"
    assert captured["capabilities"]["card_payments"] == {"requested": True}
    assert captured["capabilities"]["transfers"] == {"requested": True}
    assert captured["metadata"] == {"vendor_id": "vendor-1"}

def test_create_onboarding_link(monkeypatch):
    captured = {}
    def fake_create(**kwargs):
        captured.update(kwargs)
        return _StripeObj(url="https://connect.stripe.test/setup/abc")
    monkeypatch.setattr(stripe.AccountLink, "create", fake_create)

    res = stripe_client.create_onboarding_link(
        account_id="acct_1", refresh_url="https://shop.test/dashboard", return_url="https://shop.test/stripe-return?account_id=acct_1",
    )
    assert res["url"] == "https://connect.stripe.test/setup/abc"
    assert captured["account"] == "acct_1"
    assert captured["type"] == "account_onboarding"

def test_retrieve_account_error(monkeypatch):
    def boom(account_id):
        raise stripe.StripeError("No such account", code="resource_missing")
    monkeypatch.setattr(stripe.Account, "retrieve", boom)
    with pytest.raises(UpstreamPaymentError) as exc:
        stripe_client.retrieve_account("acct_missing")
    assert exc.value.code == "resource_missing"

def test_require_stripe_sets_api_key(monkeypatch):
    monkeypatch.setattr("marketplace.config.STRIPE_SECRET_KEY", "sk_test_xyz")
    monkeypatch.setattr(stripe, "api_key", None)
    assert stripe_client.require_stripe() is stripe
    assert stripe.api_key == "sk_test_xyz"
