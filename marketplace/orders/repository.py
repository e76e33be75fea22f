from typing import Any, Dict, List, Optional
import logging

import marketplace.infra.supabase_client as supabase_client
from marketplace.errors import UpstreamStoreError

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "id, user_id, vendor_id, total_price, status, payment_intent_id, created_at"

# module marketplace.orders.repository
def _first(res) -> Optional[dict]:
    rows = getattr(res, "data", None)
    if isinstance(rows, list) and rows:
        return rows[0]
    if isinstance(rows, dict):
        return rows
    return None

def insert_order(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère une ligne 'orders' via service-role et retourne la ligne créée.
    - Soulève UpstreamStoreError si l'insert échoue ou ne renvoie aucune ligne.
    """
    try:
        res = supabase_client.get_service_supabase().table("orders").insert(payload).execute()
    except Exception as e:
        logger.exception("orders.repository.insert_order failed payment_intent=%s", payload.get("payment_intent_id"))
        raise UpstreamStoreError(str(e)) from e
    row = _first(res)
    if not row or not row.get("id"):
        raise UpstreamStoreError("Insert 'orders' sans ligne retournée")
    return row

def insert_order_items(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Insert groupé des lignes 'order_items' (tout ou rien côté PostgREST)."""
    try:
        res = supabase_client.get_service_supabase().table("order_items").insert(rows).execute()
    except Exception as e:
        logger.exception("orders.repository.insert_order_items failed order_id=%s", (rows or [{}])[0].get("order_id"))
        raise UpstreamStoreError(str(e)) from e
    return res.data or []

def get_order_by_payment_intent(payment_intent_id: str) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("payment_intent_id", payment_intent_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_order_by_payment_intent failed pi=%s", payment_intent_id)
        raise UpstreamStoreError(str(e)) from e
    return _first(res)

def get_order(order_id: str) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_order failed id=%s", order_id)
        raise UpstreamStoreError(str(e)) from e
    return _first(res)

def update_order_status(order_id: str, status: str) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .update({"status": status})
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.update_order_status failed id=%s status=%s", order_id, status)
        raise UpstreamStoreError(str(e)) from e
    return _first(res)

def fetch_vendor_orders(vendor_id: str, limit: int = 100) -> List[dict]:
    """
    Commandes d'un vendeur avec leurs lignes (jointure order_items -> products.name).
    - Tri: created_at desc
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(f"{ORDER_COLUMNS}, order_items(id, product_id, quantity, price_at_purchase, products(name))")
            .eq("vendor_id", vendor_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.fetch_vendor_orders failed vendor=%s", vendor_id)
        raise UpstreamStoreError(str(e)) from e
    return res.data or []
