"""
Panier de session (pas de Stripe, pas de DB).
Le panier vit dans la session signée du client (request.session["cart"]); il n'est jamais persisté
dans le store. Invariant: toutes les lignes d'un panier appartiennent au même vendeur.
"""
from decimal import Decimal
from typing import Any, Iterable, List, MutableMapping

from marketplace.errors import NotFoundError, ValidationError
from .models import CartLine

SESSION_KEY = "cart"

# module marketplace.orders.cart
def load_lines(session: MutableMapping[str, Any]) -> List[CartLine]:
    return [CartLine.from_dict(raw) for raw in session.get(SESSION_KEY) or []]

def _save(session: MutableMapping[str, Any], lines: Iterable[CartLine]) -> List[CartLine]:
    lines = list(lines)
    session[SESSION_KEY] = [line.to_dict() for line in lines]
    return lines

def single_vendor(lines: Iterable[CartLine]) -> str:
    """
    Retourne l'unique vendor_id du panier.
    - ValidationError si le panier est vide ou mélange plusieurs vendeurs.
    """
    vendors = {line.vendor_id for line in lines}
    if not vendors:
        raise ValidationError("Panier vide")
    if len(vendors) > 1:
        raise ValidationError("Un panier ne peut contenir que les produits d'un seul vendeur")
    return vendors.pop()

def cart_total(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.subtotal for line in lines), Decimal("0"))

def add_line(session: MutableMapping[str, Any], line: CartLine) -> List[CartLine]:
    """
    Ajoute un produit au panier.
    - Produit déjà présent: la quantité s'additionne, le prix capturé initialement est conservé.
    - Produit d'un autre vendeur que le panier courant: ValidationError.
    """
    lines = load_lines(session)
    if lines and lines[0].vendor_id != line.vendor_id:
        raise ValidationError("Un panier ne peut contenir que les produits d'un seul vendeur")
    for i, existing in enumerate(lines):
        if existing.product_id == line.product_id:
            lines[i] = CartLine(
                product_id=existing.product_id,
                price=existing.price,
                quantity=existing.quantity + line.quantity,
                vendor_id=existing.vendor_id,
                name=existing.name,
            )
            return _save(session, lines)
    lines.append(line)
    return _save(session, lines)

def update_quantity(session: MutableMapping[str, Any], product_id: str, quantity: int) -> List[CartLine]:
    """Fixe la quantité d'une ligne; quantity <= 0 retire la ligne."""
    if quantity <= 0:
        return remove_line(session, product_id)
    lines = load_lines(session)
    for i, existing in enumerate(lines):
        if existing.product_id == product_id:
            lines[i] = CartLine(
                product_id=existing.product_id,
                price=existing.price,
                quantity=quantity,
                vendor_id=existing.vendor_id,
                name=existing.name,
            )
            return _save(session, lines)
    raise NotFoundError(f"Produit absent du panier: {product_id}")

def remove_line(session: MutableMapping[str, Any], product_id: str) -> List[CartLine]:
    return _save(session, [line for line in load_lines(session) if line.product_id != product_id])

def clear(session: MutableMapping[str, Any]) -> None:
    session.pop(SESSION_KEY, None)

def summary(lines: List[CartLine]) -> dict:
    """Vue JSON du panier: lignes, total (2 décimales) et vendeur unique (ou None)."""
    return {
        "items": [line.to_dict() for line in lines],
        "total": f"{cart_total(lines):.2f}",
        "vendor_id": lines[0].vendor_id if lines else None,
    }
