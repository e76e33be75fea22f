# module marketplace.orders.views

"""Endpoints Panier et Commandes.
- /cart: panier de session mono-vendeur (lecture, ajout, quantité, retrait, vidage).
- /orders/commit: enregistre la commande après confirmation du paiement côté client.
- /orders/vendor: commandes + indicateurs du vendeur connecté.
- /orders/{order_id}/status: avance le statut d'une commande (cycle de vie).
Sécurité:
- require_user: identité explicite de l'acheteur pour le commit.
- require_vendor: tableau de bord et statut réservés aux vendeurs.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from marketplace.accounts.models import Identity
from marketplace.utils.security import require_user, require_vendor
from . import cart as cart_logic
from . import service as orders_service
from .models import CartLine

logger = logging.getLogger(__name__)
cart_router = APIRouter(prefix="/cart", tags=["Cart API"])
router = APIRouter(prefix="/orders", tags=["Orders API"])


class CartItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    vendor_id: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, gt=0)
    name: Optional[str] = None


class QuantityRequest(BaseModel):
    quantity: int


class CommitRequest(BaseModel):
    payment_intent_id: str
    items: Optional[List[Dict[str, Any]]] = None


class StatusRequest(BaseModel):
    status: str


# --- Panier ---

@cart_router.get("")
def get_cart(request: Request) -> Dict[str, Any]:
    return cart_logic.summary(cart_logic.load_lines(request.session))


@cart_router.post("/items")
def add_cart_item(req: CartItemRequest, request: Request) -> Dict[str, Any]:
    """Ajoute un produit (prix capturé à l'ajout); 400 si le vendeur diffère du panier courant."""
    line = CartLine(
        product_id=req.product_id,
        price=req.price,
        quantity=req.quantity,
        vendor_id=req.vendor_id,
        name=req.name or "",
    )
    return cart_logic.summary(cart_logic.add_line(request.session, line))


@cart_router.patch("/items/{product_id}")
def update_cart_item(product_id: str, req: QuantityRequest, request: Request) -> Dict[str, Any]:
    return cart_logic.summary(cart_logic.update_quantity(request.session, product_id, req.quantity))


@cart_router.delete("/items/{product_id}")
def remove_cart_item(product_id: str, request: Request) -> Dict[str, Any]:
    return cart_logic.summary(cart_logic.remove_line(request.session, product_id))


@cart_router.delete("")
def clear_cart(request: Request) -> Dict[str, Any]:
    cart_logic.clear(request.session)
    return cart_logic.summary([])


# --- Commandes ---

@router.post("/commit")
def commit_order(req: CommitRequest, request: Request, user: Identity = Depends(require_user)) -> Dict[str, Any]:
    """Enregistre la commande d'un PaymentIntent confirmé.
    - items fournis: lignes envoyées par le client (panier tenu côté front), panier de session intact
    - items absents: lignes du panier de session, vidé seulement après succès complet
    - 500 inconsistent_state (avec payment_reference) si le paiement est passé mais pas l'écriture
    """
    from_session = req.items is None
    if from_session:
        lines = cart_logic.load_lines(request.session)
    else:
        lines = [CartLine.from_dict(raw) for raw in req.items]
    result = orders_service.commit_order(
        user,
        req.payment_intent_id,
        lines,
        # Seul le panier de session qui a servi de source est vidé
        clear_cart=(lambda: cart_logic.clear(request.session)) if from_session else None,
    )
    order = result["order"]
    return {
        "order_id": order.get("id"),
        "status": order.get("status"),
        "total_price": order.get("total_price"),
        "created": result["created"],
        "cart_cleared": from_session,
    }


@router.get("/vendor")
def vendor_orders(user: Identity = Depends(require_vendor)) -> Dict[str, Any]:
    return orders_service.list_vendor_orders(user)


@router.patch("/{order_id}/status")
def update_status(order_id: str, req: StatusRequest, user: Identity = Depends(require_vendor)) -> Dict[str, Any]:
    return orders_service.update_order_status(user, order_id, req.status)
