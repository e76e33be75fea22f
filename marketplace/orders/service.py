"""Couche service de l'user story Commandes.
Rôles:
- Enregistrer la commande (orders + order_items) strictement après confirmation du paiement Stripe.
- Rendre détectable toute divergence paiement/commande (InconsistentStateError + référence du paiement).
- Côté vendeur: lister ses commandes (avec indicateurs) et faire avancer leur statut.
Le paiement n'est jamais rejoué ici: seule la lecture du PaymentIntent est faite.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional
import logging

from marketplace.accounts.models import Identity
from marketplace.errors import (
    ForbiddenError,
    InconsistentStateError,
    NotFoundError,
    UpstreamStoreError,
    ValidationError,
)
from marketplace.payments import split, stripe_client
from . import cart as cart_logic
from . import repository
from .models import CartLine, OrderStatus, can_transition

logger = logging.getLogger(__name__)

def _check_payment(intent: Dict[str, Any], identity: Identity, vendor_id: str, total: Decimal) -> None:
    payment_intent_id = intent.get("id") or ""
    status = intent.get("status") or ""
    if status != "succeeded":
        raise ValidationError(f"Paiement non confirmé (status={status})")

    meta = intent.get("metadata") or {}
    buyer_id = meta.get("buyer_id")
    if buyer_id and buyer_id != identity.id:
        raise ForbiddenError("Paiement appartenant à un autre utilisateur")
    if meta.get("vendor_id") and meta.get("vendor_id") != vendor_id:
        raise InconsistentStateError(payment_intent_id, detail="cart vendor differs from paid vendor")
    amount = intent.get("amount")
    if amount is not None and int(amount) != split.to_minor_units(total):
        raise InconsistentStateError(payment_intent_id, detail="cart total differs from paid amount")

def _recorded_order(payment_intent_id: str) -> Optional[Dict[str, Any]]:
    try:
        return repository.get_order_by_payment_intent(payment_intent_id)
    except UpstreamStoreError:
        return None

def commit_order(
    identity: Identity,
    payment_intent_id: Optional[str],
    lines: List[CartLine],
    clear_cart: Optional[Callable[[], None]] = None,
) -> Dict[str, Any]:
    """
    Enregistre la commande d'un paiement confirmé.
    Ordre strict:
      1) insert 'orders' (status Paid, payment_intent_id)
      2) insert 'order_items' (price_at_purchase = prix capturé dans le panier)
      3) clear_cart() seulement si 1) et 2) ont réussi
    - Un PaymentIntent déjà enregistré renvoie la commande existante (retry client sans doublon).
    - orders.payment_intent_id porte un index unique: un commit concurrent perdant relit la commande gagnante.
    - Échec en 1) ou 2): InconsistentStateError (le panier n'est pas vidé).
    """
    payment_intent_id = (payment_intent_id or "").strip()
    if not payment_intent_id:
        raise ValidationError("payment_intent_id manquant")
    if not lines:
        raise ValidationError("Panier vide")
    vendor_id = cart_logic.single_vendor(lines)
    total = cart_logic.cart_total(lines)

    intent = stripe_client.retrieve_payment_intent(payment_intent_id)
    intent.setdefault("id", payment_intent_id)
    _check_payment(intent, identity, vendor_id, total)

    try:
        existing = repository.get_order_by_payment_intent(payment_intent_id)
    except UpstreamStoreError as e:
        raise InconsistentStateError(payment_intent_id, detail=e.message) from e
    if existing:
        logger.info("orders.commit already recorded order=%s pi=%s", existing.get("id"), payment_intent_id)
        if clear_cart:
            clear_cart()
        return {"order": existing, "created": False}

    try:
        order = repository.insert_order({
            "user_id": identity.id,
            "vendor_id": vendor_id,
            "total_price": f"{total:.2f}",
            "status": OrderStatus.PAID.value,
            "payment_intent_id": payment_intent_id,
        })
    except UpstreamStoreError as e:
        # Index unique sur payment_intent_id: un commit concurrent a pu insérer entre-temps
        winner = _recorded_order(payment_intent_id)
        if winner:
            logger.info("orders.commit concurrent commit won order=%s pi=%s", winner.get("id"), payment_intent_id)
            if clear_cart:
                clear_cart()
            return {"order": winner, "created": False}
        logger.error("orders.commit order insert failed after payment pi=%s", payment_intent_id)
        raise InconsistentStateError(payment_intent_id, detail=e.message) from e

    order_id = order["id"]
    items = [
        {
            "order_id": order_id,
            "product_id": line.product_id,
            "quantity": line.quantity,
            "price_at_purchase": f"{line.price:.2f}",
        }
        for line in lines
    ]
    try:
        repository.insert_order_items(items)
    except UpstreamStoreError as e:
        logger.error("orders.commit items insert failed after payment pi=%s order=%s", payment_intent_id, order_id)
        raise InconsistentStateError(payment_intent_id, detail=e.message, order_id=order_id) from e

    if clear_cart:
        clear_cart()
    logger.info("orders.commit ok order=%s pi=%s lines=%s", order_id, payment_intent_id, len(items))
    return {"order": order, "created": True, "items": len(items)}

# --- Vendeur ---

def vendor_analytics(orders: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Indicateurs du tableau de bord vendeur (CA, commandes livrées / en cours, ventes par jour)."""
    total_revenue = Decimal("0")
    daily: Dict[str, Decimal] = defaultdict(Decimal)
    completed = processing = 0
    for order in orders:
        amount = Decimal(str(order.get("total_price") or 0))
        total_revenue += amount
        day = str(order.get("created_at") or "")[:10]
        if day:
            daily[day] += amount
        status = str(order.get("status") or "")
        if status == OrderStatus.DELIVERED.value:
            completed += 1
        elif status in (OrderStatus.PROCESSING.value, OrderStatus.SHIPPED.value):
            processing += 1
    return {
        "total_orders": len(orders),
        "total_revenue": f"{total_revenue:.2f}",
        "completed_orders": completed,
        "processing_orders": processing,
        "daily_sales": {day: f"{value:.2f}" for day, value in sorted(daily.items())},
    }

def list_vendor_orders(identity: Identity, limit: int = 100) -> Dict[str, Any]:
    if not identity.is_vendor:
        raise ForbiddenError("Réservé aux vendeurs")
    orders = repository.fetch_vendor_orders(identity.id, limit=limit)
    return {"orders": orders, "analytics": vendor_analytics(orders)}

def update_order_status(identity: Identity, order_id: str, status: Any) -> Dict[str, Any]:
    """
    Fait avancer le statut d'une commande du vendeur appelant.
    - 404 si la commande n'existe pas, 403 si elle appartient à un autre vendeur
    - 400 si la transition n'est pas permise par le cycle de vie
    """
    if not identity.is_vendor:
        raise ForbiddenError("Réservé aux vendeurs")
    target = OrderStatus.parse(status)
    order = repository.get_order(order_id)
    if not order:
        raise NotFoundError("Commande introuvable", order_id=order_id)
    if order.get("vendor_id") != identity.id:
        raise ForbiddenError("Commande appartenant à un autre vendeur")
    current = OrderStatus.parse(order.get("status"))
    if not can_transition(current, target):
        raise ValidationError(f"Transition interdite: {current.value} -> {target.value}")
    updated = repository.update_order_status(order_id, target.value)
    logger.info("orders.status order=%s %s -> %s", order_id, current.value, target.value)
    return updated or {**order, "status": target.value}
