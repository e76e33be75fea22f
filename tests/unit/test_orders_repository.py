import pytest
from unittest.mock import MagicMock

import marketplace.orders.repository as repo
from marketplace.errors import UpstreamStoreError

class _Resp:
    def __init__(self, data=None):
        self.data = data

def _mk_client(data=None):
    client = MagicMock()
    query = client.table.return_value
    for name in ("select", "insert", "update", "eq", "order", "limit"):
        getattr(query, name).return_value = query
    query.execute.return_value = _Resp(data)
    return client, query

def _use(monkeypatch, client):
    monkeypatch.setattr("marketplace.infra.supabase_client.get_service_supabase", lambda: client)

def test_insert_order_returns_row(monkeypatch):
    client, query = _mk_client([{"id": "o1", "status": "Paid"}])
    _use(monkeypatch, client)
    row = repo.insert_order({"user_id": "u1", "status": "Paid"})
    assert row == {"id": "o1", "status": "Paid"}
    client.table.assert_called_with("orders")
    query.insert.assert_called_with({"user_id": "u1", "status": "Paid"})

def test_insert_order_without_returned_row(monkeypatch):
    client, _ = _mk_client([])
    _use(monkeypatch, client)
    with pytest.raises(UpstreamStoreError):
        repo.insert_order({"user_id": "u1"})

def test_insert_order_store_failure(monkeypatch):
    client, query = _mk_client()
    query.execute.side_effect = Exception("503 Service Unavailable")
    _use(monkeypatch, client)
    with pytest.raises(UpstreamStoreError) as exc:
        repo.insert_order({"payment_intent_id": "pi_1"})
    assert "503" in exc.value.message

def test_insert_order_items_bulk(monkeypatch):
    rows = [{"order_id": "o1", "product_id": "p1"}, {"order_id": "o1", "product_id": "p2"}]
    client, query = _mk_client(rows)
    _use(monkeypatch, client)
    assert repo.insert_order_items(rows) == rows
    client.table.assert_called_with("order_items")
    query.insert.assert_called_once_with(rows)

def test_insert_order_items_failure(monkeypatch):
    client, query = _mk_client()
    query.execute.side_effect = Exception("fk violation")
    _use(monkeypatch, client)
    with pytest.raises(UpstreamStoreError):
        repo.insert_order_items([{"order_id": "o1"}])

def test_get_order_by_payment_intent(monkeypatch):
    client, query = _mk_client([{"id": "o1"}])
    _use(monkeypatch, client)
    assert repo.get_order_by_payment_intent("pi_1") == {"id": "o1"}
    query.eq.assert_called_with("payment_intent_id", "pi_1")

def test_get_order_missing(monkeypatch):
    client, _ = _mk_client([])
    _use(monkeypatch, client)
    assert repo.get_order("o404") is None

def test_update_order_status(monkeypatch):
    client, query = _mk_client([{"id": "o1", "status": "Shipped"}])
    _use(monkeypatch, client)
    assert repo.update_order_status("o1", "Shipped")["status"] == "Shipped"
    query.update.assert_called_with({"status": "Shipped"})

def test_fetch_vendor_orders(monkeypatch):
    client, query = _mk_client([{"id": "o1"}, {"id": "o2"}])
    _use(monkeypatch, client)
    assert len(repo.fetch_vendor_orders("V2", limit=10)) == 2
    query.eq.assert_called_with("vendor_id", "V2")
    query.order.assert_called_with("created_at", desc=True)
    query.limit.assert_called_with(10)
