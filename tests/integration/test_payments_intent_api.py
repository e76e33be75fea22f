from unittest.mock import MagicMock

from marketplace.accounts.models import Role, VendorAccount

def _patch(monkeypatch, account):
    monkeypatch.setattr("marketplace.payments.service.accounts_repository.get_vendor_account", lambda vendor_id: account)
    create = MagicMock(return_value={"id": "pi_1", "client_secret": "pi_1_secret"})
    monkeypatch.setattr("marketplace.payments.service.stripe_client.create_payment_intent", create)
    return create

def test_intent_returns_client_secret(client, monkeypatch):
    # Le fixture _override_require_user fournit un acheteur authentifié
    create = _patch(monkeypatch, VendorAccount(id="V2", role=Role.VENDOR, payment_account_id="acct_V2"))
    res = client.post(
        "/payments/intent",
        json={"amount": 19.99, "vendor_id": "V2"},
        headers={"Idempotency-Key": "header-key"},
    )
    assert res.status_code == 200
    data = res.json()
    assert data["clientSecret"] == "pi_1_secret"
    assert data["platformFee"] == 200
    assert data["vendorShare"] == 1799
    assert create.call_args.kwargs["idempotency_key"] == "header-key"
    assert create.call_args.kwargs["metadata"]["buyer_id"] == "buyer-1"

def test_intent_vendor_not_connected(client, monkeypatch):
    create = _patch(monkeypatch, VendorAccount(id="V1", role=Role.VENDOR))
    res = client.post("/payments/intent", json={"amount": "50.00", "vendor_id": "V1"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "vendor not connected to payments"
    assert body["kind"] == "vendor_not_connected"
    assert "clientSecret" not in body
    assert create.call_count == 0

def test_intent_validation_error(client, monkeypatch):
    create = _patch(monkeypatch, None)
    res = client.post("/payments/intent", json={"amount": 0, "vendor_id": "V2"})
    assert res.status_code == 400
    assert res.json() == {
        "error": "Amount must be greater than 0.",
        "message": "Amount must be greater than 0.",
        "kind": "validation",
    }
    assert create.call_count == 0

def test_intent_amount_beyond_maximum_is_validation_error(client, monkeypatch):
    create = _patch(monkeypatch, VendorAccount(id="V2", role=Role.VENDOR, payment_account_id="acct_V2"))
    res = client.post("/payments/intent", json={"amount": "1e30", "vendor_id": "V2"})
    assert res.status_code == 400
    body = res.json()
    assert body["kind"] == "validation"
    assert body["message"] == "Amount must not exceed 999999.99."
    assert create.call_count == 0

def test_intent_unknown_vendor(client, monkeypatch):
    _patch(monkeypatch, None)
    res = client.post("/payments/intent", json={"amount": 5, "vendor_id": "ghost"})
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"

def test_intent_invalid_json(client):
    res = client.post("/payments/intent", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid JSON in request body"

def test_intent_requires_authentication(app, client):
    from marketplace.utils.security import require_user
    app.dependency_overrides.pop(require_user, None)
    res = client.post("/payments/intent", json={"amount": 5, "vendor_id": "V2"})
    assert res.status_code == 401
    assert res.json()["kind"] == "unauthenticated"
